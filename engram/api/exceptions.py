"""API exception hierarchy for consistent error handling.

All API exceptions inherit from EngramAPIError, which carries the HTTP
status and error code used by the global exception handler. Store errors
are translated with ``from_store_error``.
"""

from engram.api.models.errors import ErrorCode
from engram.db.errors import (
    NotFoundError,
    NoUpdatesProvidedError,
    StoreError,
    ValidationError,
)


class EngramAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(EngramAPIError):
    """Raised when request validation fails."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class NoUpdatesError(EngramAPIError):
    """Raised when an update carries no fields."""

    status_code = 400
    error_code = ErrorCode.NO_UPDATES_PROVIDED


class EpisodeNotFoundError(EngramAPIError):
    """Raised when an episode id does not exist."""

    status_code = 404
    error_code = ErrorCode.EPISODE_NOT_FOUND


class StorageFailureError(EngramAPIError):
    """Raised when the storage engine fails."""

    status_code = 500
    error_code = ErrorCode.STORAGE_FAILURE


def from_store_error(exc: StoreError) -> EngramAPIError:
    """Map a store error onto its API counterpart."""
    if isinstance(exc, NotFoundError):
        return EpisodeNotFoundError(str(exc))
    if isinstance(exc, NoUpdatesProvidedError):
        return NoUpdatesError(str(exc))
    if isinstance(exc, ValidationError):
        return InvalidRequestError(str(exc))
    return StorageFailureError(str(exc))
