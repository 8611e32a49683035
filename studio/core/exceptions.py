"""
API error types and the project-wide DRF exception handler.

Domain services raise ``ServiceError`` subclasses; the handler turns them
into ``{"message": ..., "code": ...}`` responses and logs them.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed.'
    default_code = 'service_error'


class ResourceNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'


class ActionNotAllowed(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to perform this action.'
    default_code = 'not_allowed'


class ExternalServiceError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'External service request failed.'
    default_code = 'external_service_error'


def studio_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ServiceError):
        view = context.get('view')
        logger.warning(
            f"{exc.__class__.__name__} in {getattr(view, '__name__', view.__class__.__name__)}: {exc.detail}"
        )
        response.data = {'message': str(exc.detail), 'code': exc.get_codes()}
    elif response.status_code >= 500:
        logger.error(f"Server error: {exc}")
    return response
