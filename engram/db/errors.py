"""Store error hierarchy.

Every store implementation wraps engine-specific failures in one of these
errors so that callers can map them to protocol responses without knowing
which backend is in use.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(StoreError):
    """Raised when an episode lookup, update or delete matches no row.

    Empty search results are not an error.
    """

    def __init__(self, episode_id: str, cause: Exception | None = None) -> None:
        super().__init__(f"episode not found: {episode_id}", cause=cause)
        self.episode_id = episode_id


class ValidationError(StoreError):
    """Raised on invalid input.

    Examples:
        - Empty content or source
        - Embedding with the wrong number of dimensions
    """

    pass


class NoUpdatesProvidedError(ValidationError):
    """Raised when an update request carries no mutable field."""

    def __init__(self) -> None:
        super().__init__("no updates provided")


class StorageError(StoreError):
    """Raised when the storage engine fails.

    The message names the operation that failed; the engine exception is
    kept in ``cause``.
    """

    def __init__(
        self, operation: str, message: str, cause: Exception | None = None
    ) -> None:
        super().__init__(f"failed to {operation}: {message}", cause=cause)
        self.operation = operation


class DecodeError(StorageError):
    """Raised when a stored value has a shape the decoder does not recognise."""

    def __init__(self, column: str, value: object) -> None:
        super().__init__(
            "decode episode",
            f"unexpected {type(value).__name__} value in column '{column}'",
        )
        self.column = column


class MigrationError(StorageError):
    """Raised when a schema migration fails and is rolled back."""

    def __init__(self, version: int, name: str, cause: Exception) -> None:
        super().__init__(f"apply migration {version} ({name})", str(cause), cause=cause)
        self.version = version


class StoreClosedError(StorageError):
    """Raised when an operation is attempted after the store was closed."""

    def __init__(self, operation: str) -> None:
        super().__init__(operation, "store is closed")
