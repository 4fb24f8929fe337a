# apps/api/utils.py

"""
Response and parameter helpers shared by the API views.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from rest_framework import status
from rest_framework.response import Response

from apps.core.utils import parse_uuid

from .exceptions import ValidationError


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
    metadata: Optional[Dict[str, Any]] = None,
) -> Response:
    """
    Wrap ``data`` in the success envelope.

    ``{"success": true, "data"?, "message"?, "metadata"?}``; keys whose
    value is empty are left out, so a bare delete answers
    ``{"success": true, "message": ...}``.
    """
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if metadata:
        body["metadata"] = metadata
    return Response(body, status=status_code)


def require_uuid_param(value: Any, field_name: str = "id") -> UUID:
    """
    Parse an identifier taken from the query string or body.

    Raises:
        ValidationError: naming ``field_name`` when it is missing or malformed
    """
    parsed, error = parse_uuid(value, field_name)
    if error:
        raise ValidationError(detail=error, errors=[{"field": field_name, "message": error}])
    return parsed
