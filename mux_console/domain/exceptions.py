"""Domain-level exceptions.

Remote and storage collaborators raise these; route handlers catch them at the
call site and re-express them as typed error codes.
"""


class MuxConsoleError(Exception):
    """Base exception for all console errors."""

    pass


class MuxApiError(MuxConsoleError):
    """Raised when the Mux API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, body: object | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body

    def __str__(self) -> str:
        return f"{self.message} (status={self.status_code})"


class RateLimitQueueFullError(MuxConsoleError):
    """Raised when the bounded rate limiter already holds its maximum of pending calls."""

    def __init__(self, max_pending: int):
        super().__init__(f"Rate limit queue is full ({max_pending} pending calls)")
        self.max_pending = max_pending


class StorageError(MuxConsoleError):
    """Raised when a storage collaborator fails."""

    pass


class NotFoundError(StorageError):
    """Raised when a referenced record does not exist."""

    pass


class ConflictError(StorageError):
    """Raised when a write violates a uniqueness constraint."""

    pass


def status_code_of(error: BaseException) -> int | None:
    """Return the numeric HTTP status carried by an exception, if any."""
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def is_not_found(error: BaseException) -> bool:
    """Check whether an exception signals a missing entity."""
    return isinstance(error, NotFoundError) or status_code_of(error) == 404
