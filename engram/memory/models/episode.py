"""Episode model and the parameter objects of the episode store."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_GROUP_ID = "default"
DEFAULT_MAX_RESULTS = 10


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Episode(BaseModel):
    """Atomic unit of agent memory.

    Episodes are immutable once written except for ``tags``,
    ``expired_at`` and ``metadata``. Setting ``expired_at`` retires an
    episode from default search results without deleting it.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default="", description="Opaque identifier; assigned at insert if empty")
    content: str = Field(..., description="Memory text")
    name: str | None = Field(default=None, description="Short human label")
    source: str = Field(..., description="Identifier of the writer")
    source_model: str | None = Field(default=None, description="Model that produced the content")
    source_description: str | None = Field(default=None, description="Free-text provenance")
    group_id: str = Field(default="", description="Partition key; 'default' when empty")
    tags: list[str] = Field(default_factory=list, description="Ordered labels")
    embedding: list[float] | None = Field(default=None, description="Semantic vector")
    created_at: datetime | None = Field(default=None, description="Assigned by the store when missing")
    valid_at: datetime | None = Field(default=None, description="When the content became true")
    expired_at: datetime | None = Field(default=None, description="Soft retirement marker")
    metadata: str | None = Field(default=None, description="Opaque JSON text")

    @field_validator("created_at", "valid_at", "expired_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the episode is retired at ``now``."""
        if self.expired_at is None:
            return False
        return self.expired_at <= (now or utc_now())


class SearchParams(BaseModel):
    """Composite search request.

    ``query`` restricts results to embedded episodes; ``query_embedding``
    (normally the embedding of ``query``) switches ranking from recency to
    cosine similarity.
    """

    query: str = ""
    query_embedding: list[float] | None = None
    group_id: str | None = None
    source: str | None = None
    before: datetime | None = None
    after: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    include_expired: bool = False
    max_results: int = DEFAULT_MAX_RESULTS

    @field_validator("before", "after")
    @classmethod
    def normalize_bounds(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def limit(self) -> int:
        """Effective result cap; non-positive values mean the default."""
        return self.max_results if self.max_results > 0 else DEFAULT_MAX_RESULTS


class UpdateParams(BaseModel):
    """Sparse update of the mutable episode fields. ``None`` leaves a field as is."""

    tags: list[str] | None = None
    expired_at: datetime | None = None
    metadata: str | None = None

    @field_validator("expired_at")
    @classmethod
    def normalize_expired_at(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    def is_empty(self) -> bool:
        return self.tags is None and self.expired_at is None and self.metadata is None
