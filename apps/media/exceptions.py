# apps/media/exceptions.py

class MediaException(Exception):
    """Base exception for all media-library errors."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        self.message = message
        self.code = code or "MEDIA_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(MediaException):
    """
    Raised when a record is absent or belongs to another caller.

    Both cases share this one error so callers cannot probe for the
    existence of other users' records.
    """

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource} not found.",
            code="NOT_FOUND",
            details={
                "resource": resource,
                "id": str(resource_id),
            }
        )


class ImmutableFieldError(MediaException):
    """Raised when code tries to change a write-once field."""

    def __init__(self, model: str, field: str):
        self.model = model
        self.field = field
        super().__init__(
            message=f"{model}.{field} cannot be changed once set.",
            code="IMMUTABLE_FIELD",
            details={
                "model": model,
                "field": field,
            }
        )


class ProviderNotConfiguredError(MediaException):
    """Raised when Cloudinary credentials are missing."""

    def __init__(self, missing: list):
        self.missing = missing
        super().__init__(
            message="Cloudinary not configured",
            code="PROVIDER_NOT_CONFIGURED",
            details={
                "missing": missing,
            }
        )


class UploadStillReferencedError(MediaException):
    """Raised when asked to discard an upload that an asset still points to."""

    def __init__(self, public_id: str):
        self.public_id = public_id
        super().__init__(
            message=f"Upload '{public_id}' is referenced by an asset and cannot be discarded.",
            code="UPLOAD_REFERENCED",
            details={
                "public_id": public_id,
            }
        )


class StorageError(MediaException):
    """Raised when a Cloudinary storage call fails."""

    def __init__(self, operation: str, path: str, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        super().__init__(
            message=f"Storage error during {operation}: {reason}",
            code="STORAGE_ERROR",
            details={
                "operation": operation,
                "path": path,
                "reason": reason,
            }
        )


class InvalidExportError(MediaException):
    """Raised when an export preset does not apply to the asset."""

    def __init__(self, mode: str, kind: str, reason: str):
        self.mode = mode
        self.kind = kind
        super().__init__(
            message=reason,
            code="INVALID_EXPORT",
            details={
                "mode": mode,
                "kind": kind,
            }
        )
