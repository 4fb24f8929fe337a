# apps/media/services/ownership.py

"""
The single ownership check shared by every read, update and delete.
"""

from typing import Any, TypeVar

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models

from ..exceptions import ResourceNotFoundError

ModelT = TypeVar("ModelT", bound=models.Model)


def owned_or_not_found(
    queryset: "models.QuerySet[ModelT]",
    pk: Any,
    user,
    resource: str,
) -> ModelT:
    """
    Load a record that belongs to ``user`` or raise ResourceNotFoundError.

    Absent records, foreign records and malformed identifiers all raise
    the same error.

    Args:
        queryset: Base queryset (e.g. ``Asset.objects.all()``)
        pk: Primary key from the request
        user: The authenticated caller
        resource: Display name used in the error ("Asset", "Draft", ...)

    Returns:
        The model instance
    """
    try:
        return queryset.get(pk=pk, user=user)
    except (queryset.model.DoesNotExist, DjangoValidationError, ValueError):
        raise ResourceNotFoundError(resource, pk)
