import logging

from django.core import signing
from rest_framework import authentication, exceptions

from .models import User
from .tokens import read_token

logger = logging.getLogger(__name__)


class BearerTokenAuthentication(authentication.BaseAuthentication):
    """``Authorization: Bearer <token>`` with tokens from ``tokens.issue_token``."""

    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed('Invalid authorization header')

        try:
            user_id = read_token(header[1].decode())
        except signing.SignatureExpired:
            raise exceptions.AuthenticationFailed('Token expired')
        except (signing.BadSignature, UnicodeDecodeError, KeyError):
            raise exceptions.AuthenticationFailed('Invalid token')

        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            logger.warning("AUTH — token for unknown or inactive user %s", user_id)
            raise exceptions.AuthenticationFailed('Invalid token')
        return user, None

    def authenticate_header(self, request):
        return self.keyword
