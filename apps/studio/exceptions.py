"""Custom exception classes for the studio client."""


class StudioError(Exception):
    """Base exception for studio errors."""
    pass


class APIError(StudioError):
    """Raised when the API or the provider returns an error."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class NetworkError(StudioError):
    """Raised when network requests fail."""
    pass


class FileTooLargeError(StudioError):
    """Raised before any request when a file exceeds the size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File is {size / (1024 * 1024):.1f} MB; the limit is {limit / (1024 * 1024):.0f} MB."
        )


class UploadCancelledError(StudioError):
    """Raised when an upload is cancelled through its token."""
    pass


class InvalidTransitionError(StudioError):
    """Raised when an action is not allowed in the current state."""

    def __init__(self, state: str, action: str):
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} while {state}.")
