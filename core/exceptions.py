"""
Core — Exception Handling

Domain exceptions raised by the service layer and the DRF exception
handler that turns them (and everything else) into the standard error
envelope:

    { "success": false, "errors": {...}, "code": "ERROR_CODE" }

Domain errors are detected before any write. Database failures are
reported separately as INFRASTRUCTURE_ERROR so callers can tell a
rejected request from a store outage and retry the latter.

@file core/exceptions.py
"""

import logging

from django.core.exceptions import PermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('voltstock')


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class BusinessRuleViolation(APIException):
    """Raised when a business rule is violated at the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Business rule violation.'
    default_code = 'BUSINESS_RULE_VIOLATION'


class InvalidStateTransition(BusinessRuleViolation):
    """Operation not allowed from the order's or sale's current status."""
    default_detail = 'Invalid state transition.'
    default_code = 'INVALID_STATE_TRANSITION'


class QuantityViolation(BusinessRuleViolation):
    """Negative quantity, or one that would push received/returned past ordered/sold."""
    default_detail = 'Quantity out of bounds.'
    default_code = 'QUANTITY_VIOLATION'


class InvalidInputError(BusinessRuleViolation):
    """Malformed service input: empty item list, non-positive quantity, negative price."""
    default_detail = 'Invalid input.'
    default_code = 'VALIDATION_ERROR'


class InsufficientStockError(APIException):
    """An outbound movement would take current_stock below zero."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient stock for this operation.'
    default_code = 'INSUFFICIENT_STOCK'


class DuplicateResourceError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'DUPLICATE_RESOURCE'


class ResourceNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'RESOURCE_NOT_FOUND'


class InfrastructureError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The data store is unavailable. No changes were applied; retry the operation.'
    default_code = 'INFRASTRUCTURE_ERROR'


# ---------------------------------------------------------------------------
# Standard exception handler
# ---------------------------------------------------------------------------

def _envelope(errors, code, status_code):
    return Response(
        {'success': False, 'errors': errors, 'code': code},
        status=status_code,
    )


def standard_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = ResourceNotFoundError()
    elif isinstance(exc, PermissionDenied):
        exc = APIException(detail='Permission denied.', code='PERMISSION_DENIED')
        exc.status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return _envelope(errors, 'VALIDATION_ERROR', status.HTTP_400_BAD_REQUEST)
    elif isinstance(exc, DatabaseError):
        logger.error('Database failure in %s: %s', context.get('view').__class__.__name__, exc)
        exc = InfrastructureError()

    response = exception_handler(exc, context)

    if response is None:
        logger.exception('Unhandled exception in view: %s', exc)
        return _envelope(
            {'detail': ['Internal server error.']},
            'INTERNAL_ERROR',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        code = 'VALIDATION_ERROR'
    else:
        code = getattr(exc, 'default_code', 'ERROR')
        # APIException(detail, code=...) keeps the explicit code on the detail
        detail_code = getattr(getattr(exc, 'detail', None), 'code', None)
        if detail_code and detail_code.isupper():
            code = detail_code

    if isinstance(exc, (BusinessRuleViolation, InsufficientStockError, DuplicateResourceError)):
        logger.warning(
            '%s rejected in %s: %s',
            code, context.get('view').__class__.__name__, exc.detail,
        )

    if isinstance(response.data, dict):
        errors = response.data
    elif isinstance(response.data, list):
        errors = {'detail': response.data}
    else:
        errors = {'detail': [str(response.data)]}

    response.data = {
        'success': False,
        'errors': errors,
        'code': code,
    }
    return response
