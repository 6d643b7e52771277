"""
Uniform error responses for the REST API.

Every error body has the shape ``{"error": <title>, "detail": <message>}``.
Views that catch domain errors build the same envelope with ``error_response``;
framework exceptions (validation, auth, permissions, 404) go through
``api_exception_handler``.
"""
import logging

from django.conf import settings
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

ERROR_TITLES = {
    status.HTTP_400_BAD_REQUEST: 'Validation Error',
    status.HTTP_401_UNAUTHORIZED: 'Unauthorized',
    status.HTTP_403_FORBIDDEN: 'Forbidden',
    status.HTTP_404_NOT_FOUND: 'Not Found',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'Method Not Allowed',
    status.HTTP_409_CONFLICT: 'Conflict',
    status.HTTP_429_TOO_MANY_REQUESTS: 'Rate limit exceeded',
    status.HTTP_502_BAD_GATEWAY: 'Payment Provider Error',
}


class ConflictError(exceptions.APIException):
    """409 for writes that clash with an existing unique record."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists'
    default_code = 'conflict'


def error_response(status_code: int, detail, **extra) -> Response:
    body = {
        'error': ERROR_TITLES.get(status_code, 'Server Error'),
        'detail': detail,
    }
    body.update(extra)
    return Response(body, status=status_code)


def server_error_response(exc: Exception) -> Response:
    """500 response; the real message is only exposed while DEBUG is on."""
    detail = str(exc) if settings.DEBUG else 'An unexpected error occurred'
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail
    else:
        detail = response.data.get('detail', response.data) if isinstance(response.data, dict) else response.data

    view = context.get('view')
    logger.warning(
        f"{view.__class__.__name__ if view else 'API'} returned {response.status_code}: {detail}"
    )

    response.data = {
        'error': ERROR_TITLES.get(response.status_code, 'Error'),
        'detail': detail,
    }
    return response
