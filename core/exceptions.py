"""
Error taxonomy and the API-wide exception handler.

Every error response uses the envelope ``{"success": false, ...}`` with either
a ``msg`` (single message) or an ``error`` (field errors or generic text).
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = 'Not authorized, no token'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'You are not allowed to perform this action.'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This resource already exists.'
    default_code = 'conflict'


class InvalidState(exceptions.APIException):
    """Illegal status transition, or an action on a terminal booking."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This action is not allowed in the current state.'
    default_code = 'invalid_state'


class InvalidCredentials(exceptions.APIException):
    """Same shape whether the email is unknown or the password is wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid credentials'
    default_code = 'invalid_credentials'


class InvalidOrExpiredToken(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid or expired reset token.'
    default_code = 'invalid_reset_token'


class UpstreamDeliveryFailure(exceptions.APIException):
    """An email (or other provider) call failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Email could not be sent'
    default_code = 'delivery_failed'


class TokenExpired(exceptions.AuthenticationFailed):
    default_detail = 'Not authorized, token expired'
    default_code = 'token_expired'


class TokenMalformed(exceptions.AuthenticationFailed):
    default_detail = 'Not authorized, token malformed'
    default_code = 'token_malformed'


class TokenUnverifiable(exceptions.AuthenticationFailed):
    default_detail = 'Not authorized, token invalid'
    default_code = 'token_invalid'


def camelize(name):
    """Convert a model field name (daily_rate) to its API name (dailyRate)."""
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _django_error_detail(error):
    """Translate a model-level ValidationError into DRF error detail."""
    if hasattr(error, 'error_dict'):
        return {
            ('non_field_errors' if field == '__all__' else camelize(field)): messages
            for field, messages in error.message_dict.items()
        }
    return error.messages


def envelope_error(data, status_code=status.HTTP_400_BAD_REQUEST):
    """
    Wrap DRF error data in the response envelope.

    Server-side failures report their message under ``error``, client errors
    under ``msg``.
    """
    if isinstance(data, dict) and set(data.keys()) == {'detail'}:
        key = 'error' if status_code >= 500 else 'msg'
        return {'success': False, key: str(data['detail'])}
    return {'success': False, 'error': data}


def marketplace_exception_handler(exc, context):
    """
    DRF exception handler producing the uniform error envelope.

    - Missing credentials -> 401 "Not authorized, no token"
    - Django model ValidationError -> 400 with field messages
    - IntegrityError (duplicate unique key) -> 409
    - ObjectDoesNotExist -> 404
    - DRF exceptions and Http404 -> their own status code
    - Anything else -> logged with traceback, generic 500
    """
    if type(exc) is exceptions.NotAuthenticated:
        exc.detail = exceptions.ErrorDetail(NO_TOKEN_MESSAGE, code='not_authenticated')
    elif isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(detail=_django_error_detail(exc))
    elif isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error translated to conflict: {exc}")
        exc = Conflict()
    elif isinstance(exc, ObjectDoesNotExist):
        exc = exceptions.NotFound(str(exc) or None)

    # Deferred: rest_framework.views loads DEFAULT_AUTHENTICATION_CLASSES,
    # which import core.tokens and this module.
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
            exc_info=exc
        )
        return Response(
            {'success': False, 'error': 'Server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    response.data = envelope_error(response.data, response.status_code)
    return response
