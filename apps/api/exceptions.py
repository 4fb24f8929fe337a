"""
Error envelope for the MediaDeck API.

Every failure leaves the API as::

    {"success": false, "error": {"code": ..., "message": ..., "details"?, "errors"?}}

DRF exceptions, the media app's domain exceptions and plain Django
exceptions are all normalised here so views never build error bodies.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.media.exceptions import MediaException

logger = logging.getLogger(__name__)


# Domain error code -> HTTP status
EXCEPTION_STATUS_CODES = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "IMMUTABLE_FIELD": status.HTTP_400_BAD_REQUEST,
    "INVALID_EXPORT": status.HTTP_400_BAD_REQUEST,
    "UPLOAD_REFERENCED": status.HTTP_409_CONFLICT,
    "PROVIDER_NOT_CONFIGURED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_ERROR": status.HTTP_502_BAD_GATEWAY,
    "MEDIA_ERROR": status.HTTP_400_BAD_REQUEST,
}

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

FieldErrors = List[Dict[str, str]]


class APIError(APIException):
    """API-layer error that already knows its envelope code."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "API_ERROR"
    default_detail = "An error occurred."

    def __init__(
        self,
        detail: str = None,
        code: str = None,
        status_code: int = None,
        errors: FieldErrors = None,
    ):
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []
        super().__init__(detail=detail or self.default_detail, code=self.code)


class ValidationError(APIError):
    """A request parameter failed validation outside a serializer."""
    default_code = "VALIDATION_ERROR"
    default_detail = "Request validation failed."


def build_error_response(
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
    errors: Optional[FieldErrors] = None,
) -> Dict[str, Any]:
    """Assemble the error envelope, leaving out empty ``details``/``errors``."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    if errors:
        error["errors"] = errors
    return {"success": False, "error": error}


def custom_exception_handler(exc: Exception, context: dict) -> Response:
    """
    DRF ``EXCEPTION_HANDLER`` entry point.

    Anything DRF does not recognise still gets an envelope; unexpected
    exceptions become a logged 500 without leaking internals.
    """
    drf_response = drf_exception_handler(exc, context)
    status_code, code, message, details, errors = _describe(exc, drf_response)

    _log_error(exc, context.get("request"), context.get("view"), status_code)

    body = build_error_response(message, code, details=details, errors=errors)
    if drf_response is not None:
        drf_response.status_code = status_code
        drf_response.data = body
        return drf_response
    return Response(body, status=status_code)


def _describe(
    exc: Exception,
    drf_response: Optional[Response],
) -> Tuple[int, str, str, Optional[dict], Optional[FieldErrors]]:
    """Reduce an exception to (status, code, message, details, errors)."""

    # Session auth answers 403 for anonymous callers; the API always says 401
    if isinstance(exc, NotAuthenticated):
        return status.HTTP_401_UNAUTHORIZED, "UNAUTHENTICATED", str(exc.detail), None, None

    if isinstance(exc, APIError):
        return exc.status_code, exc.code, str(exc.detail), None, exc.errors or None

    if drf_response is not None:
        return (drf_response.status_code, *_describe_drf_detail(exc))

    if isinstance(exc, MediaException):
        status_code = EXCEPTION_STATUS_CODES.get(exc.code, status.HTTP_400_BAD_REQUEST)
        return status_code, exc.code, exc.message, exc.details or None, None

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            errors = _field_errors(exc.message_dict)
            message = _first_field_message(errors)
        else:
            errors = [{"message": str(msg)} for msg in exc.messages]
            message = exc.messages[0] if exc.messages else "Validation failed."
        return status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(message), None, errors

    return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_SERVER_ERROR", UNEXPECTED_ERROR_MESSAGE, None, None


def _describe_drf_detail(exc: Exception) -> Tuple[str, str, None, Optional[FieldErrors]]:
    """Code, message and field errors for a DRF exception's ``detail``."""
    detail = getattr(exc, "detail", None)
    code = getattr(exc, "default_code", "api_error").upper()

    if isinstance(detail, dict):
        errors = _field_errors(detail)
        return "VALIDATION_ERROR", _first_field_message(errors), None, errors

    if isinstance(detail, list):
        errors = [{"message": str(msg)} for msg in detail]
        return code, str(detail[0]) if detail else "An error occurred.", None, errors

    return code, str(detail if detail is not None else exc), None, None


def _field_errors(messages_by_field: Dict[str, Any]) -> FieldErrors:
    errors = []
    for field, messages in messages_by_field.items():
        if not isinstance(messages, (list, tuple)):
            messages = [messages]
        errors.extend({"field": field, "message": str(msg)} for msg in messages)
    return errors


def _first_field_message(errors: FieldErrors) -> str:
    """'title: This field is required.' for the first offending field."""
    if not errors:
        return "Validation failed."
    first = errors[0]
    return f"{first['field']}: {first['message']}"


def _log_error(exc: Exception, request, view, status_code: int) -> None:
    view_name = view.__class__.__name__ if view else "unknown"
    where = f"{request.method} {request.path}" if request else "unknown request"

    if status_code >= 500:
        logger.error(f"API error [{status_code}] {where} in {view_name}: {exc}", exc_info=exc)
    else:
        logger.warning(f"API error [{status_code}] {where} in {view_name}: {exc}")
