"""Signed, time-limited bearer tokens carrying a user id."""
from django.conf import settings
from django.core import signing

SALT = 'apps.accounts.auth-token'


def issue_token(user):
    return signing.dumps({'user_id': user.pk}, salt=SALT)


def read_token(token):
    """
    Return the user id inside ``token``.

    Raises ``signing.SignatureExpired`` once the token is older than
    ``AUTH_TOKEN_MAX_AGE`` and ``signing.BadSignature`` when it was tampered with.
    """
    payload = signing.loads(token, salt=SALT, max_age=settings.AUTH_TOKEN_MAX_AGE)
    return payload['user_id']
