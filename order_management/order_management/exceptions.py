import logging

from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models import ProtectedError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.sales.exceptions import InvalidOrderStatus, OrderError

logger = logging.getLogger('apps.api')


def _model_name(exc):
    # Product.DoesNotExist -> "Product"
    return type(exc).__qualname__.split('.')[0]


def api_exception_handler(exc, context):
    """
    Shape every API error as ``{"error": message}`` or, for field
    validation, ``{"errors": {field: [messages]}}``.
    """
    view = context.get('view')
    view_name = type(view).__name__ if view else '-'

    if isinstance(exc, InvalidOrderStatus):
        return Response({'error': exc.message}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, OrderError):
        logger.info("CONFLICT — %s | %s", view_name, exc.message)
        return Response({'error': exc.message}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, ObjectDoesNotExist):
        return Response({'error': '{} not found'.format(_model_name(exc))}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'error_dict'):
            errors = exc.message_dict
        else:
            errors = {'non_field_errors': exc.messages}
        return Response({'errors': errors}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ProtectedError):
        return Response(
            {'error': 'Cannot delete a record that other records still reference'},
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, IntegrityError):
        logger.warning("INTEGRITY — %s | %s", view_name, str(exc))
        return Response({'error': 'Conflicts with an existing record'}, status=status.HTTP_409_CONFLICT)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        data = exc.detail if isinstance(exc.detail, dict) else {'non_field_errors': exc.detail}
        response.data = {'errors': data}
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
        response.data = {'error': str(detail)}
    return response
