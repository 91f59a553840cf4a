"""Memory API request and response models."""

import json
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from engram.memory.models import DEFAULT_MAX_RESULTS, Episode


def _metadata_to_text(value: Any) -> Any:
    """Accept metadata as JSON text or as a JSON object/array."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return value


class AddMemoryRequest(BaseModel):
    """Request model for adding an episode."""

    content: str = Field(..., description="Memory text")
    source: str = Field(..., description="Identifier of the writer")
    name: str | None = Field(default=None, description="Short human label")
    source_model: str | None = Field(default=None, description="Model that produced the content")
    source_description: str | None = Field(default=None, description="Free-text provenance")
    group_id: str | None = Field(default=None, description="Partition; 'default' when omitted")
    tags: list[str] = Field(default_factory=list, description="Labels")
    valid_at: datetime | None = Field(default=None, description="When the content became true")
    metadata: str | None = Field(default=None, description="JSON text (objects are accepted too)")

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> Any:
        return _metadata_to_text(value)


class SearchRequest(BaseModel):
    """JSON body for POST /memory/search."""

    query: str = ""
    group_id: str | None = None
    source: str | None = None
    before: datetime | None = None
    after: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    include_expired: bool = False
    max_results: int = DEFAULT_MAX_RESULTS


class UpdateEpisodeRequest(BaseModel):
    """Sparse update; omitted fields are left unchanged."""

    tags: list[str] | None = Field(default=None, description="Replacement tag list")
    expired_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("expired_at", "expires_at"),
        description="Retire the episode from default searches at this instant",
    )
    metadata: str | None = Field(default=None, description="Replacement JSON metadata")

    @field_validator("metadata", mode="before")
    @classmethod
    def coerce_metadata(cls, value: Any) -> Any:
        return _metadata_to_text(value)


class EpisodeResponse(BaseModel):
    """Episode as returned by the API. The vector itself is not echoed."""

    id: str
    content: str
    name: str | None
    source: str
    source_model: str | None
    source_description: str | None
    group_id: str
    tags: list[str]
    embedded: bool
    created_at: datetime | None
    valid_at: datetime | None
    expired_at: datetime | None
    metadata: str | None

    @classmethod
    def from_episode(cls, episode: Episode) -> "EpisodeResponse":
        return cls(
            id=episode.id,
            content=episode.content,
            name=episode.name,
            source=episode.source,
            source_model=episode.source_model,
            source_description=episode.source_description,
            group_id=episode.group_id,
            tags=episode.tags,
            embedded=episode.embedding is not None,
            created_at=episode.created_at,
            valid_at=episode.valid_at,
            expired_at=episode.expired_at,
            metadata=episode.metadata,
        )


class AddMemoryResponse(BaseModel):
    """Response for POST /memory."""

    success: bool = True
    episode: EpisodeResponse
    embedded: bool = Field(..., description="False when the embedding service was unavailable")


class EpisodeListResponse(BaseModel):
    """Response for searches and listings."""

    episodes: list[EpisodeResponse]
    count: int
    ranking: str = Field(..., description="'semantic' or 'recency'")


class UpdateEpisodeResponse(BaseModel):
    """Response for PUT /memory/episodes/{id}."""

    success: bool = True
    message: str = "Episode updated successfully"
    episode: EpisodeResponse
