"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes returned by every endpoint."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, bad timestamps)."""

    NO_UPDATES_PROVIDED = "NO_UPDATES_PROVIDED"
    """An update request carried no mutable field."""

    EPISODE_NOT_FOUND = "EPISODE_NOT_FOUND"
    """No episode has the requested id."""

    STORAGE_FAILURE = "STORAGE_FAILURE"
    """The storage engine failed."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Example:
        {
            "error": {
                "code": "EPISODE_NOT_FOUND",
                "message": "episode not found: 3f2a..."
            }
        }
    """

    error: ErrorBody
