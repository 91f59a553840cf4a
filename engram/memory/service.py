"""Memory service: the caller-facing operations behind the HTTP API, MCP tools and CLI.

The service owns everything the store deliberately does not: required-field
validation, JSON validation of metadata, request defaults, and embedding via
the gateway. An unavailable embedding service degrades a write to "stored
without a vector" and a search to recency ranking; it never fails a request.
"""

import json
from datetime import datetime

from pydantic import BaseModel, Field

from engram.db.errors import ValidationError
from engram.memory.models import (
    DEFAULT_GROUP_ID,
    DEFAULT_MAX_RESULTS,
    Episode,
    SearchParams,
    UpdateParams,
)
from engram.memory.store import EpisodeStore
from engram.observability.logging import get_logger
from engram.observability.metrics import (
    EPISODES_DELETED,
    EPISODES_INSERTED,
    EPISODES_STORED,
    EPISODES_UPDATED,
)
from engram.providers.embedding import EmbeddingProvider, embed_with_timeout

logger = get_logger(__name__)


class AddMemoryResult(BaseModel):
    """Outcome of add_memory."""

    episode: Episode
    embedded: bool = Field(..., description="Whether a vector was stored")
    embedding_error: str | None = Field(default=None, description="Why embedding degraded")


class SearchResult(BaseModel):
    """Outcome of a search or listing."""

    episodes: list[Episode]
    ranking: str = Field(..., description="'semantic' or 'recency'")
    embedding_error: str | None = None

    @property
    def count(self) -> int:
        return len(self.episodes)


class StoreStatus(BaseModel):
    """Readiness summary for status endpoints."""

    status: str
    episode_count: int
    database_ready: bool
    embedding_provider: str | None = None


def validate_metadata(metadata: str | None) -> str | None:
    """Reject metadata that is not JSON text."""
    if metadata is None:
        return None
    try:
        json.loads(metadata)
    except ValueError as e:
        raise ValidationError(f"metadata must be valid JSON: {e}", cause=e) from e
    return metadata


class MemoryService:
    """Episode operations with embedding-failure tolerance."""

    def __init__(
        self,
        store: EpisodeStore,
        embedding_provider: EmbeddingProvider | None,
        *,
        embedding_timeout: float = 5.0,
        default_group_id: str = DEFAULT_GROUP_ID,
    ) -> None:
        """Initialize the service.

        Args:
            store: Episode store
            embedding_provider: Provider for content and query vectors; None
                disables embedding entirely
            embedding_timeout: Seconds to wait for one embedding
            default_group_id: Group used when a request names none
        """
        self._store = store
        self._embedding_provider = embedding_provider
        self._embedding_timeout = embedding_timeout
        self._default_group_id = default_group_id

    @property
    def store(self) -> EpisodeStore:
        return self._store

    async def _embed(self, text: str) -> tuple[list[float] | None, str | None]:
        outcome = await embed_with_timeout(
            self._embedding_provider,
            text,
            timeout=self._embedding_timeout,
            dimensions=self._store.dimensions,
        )
        return outcome.vector, outcome.reason

    async def add_memory(
        self,
        content: str,
        source: str,
        *,
        name: str | None = None,
        source_model: str | None = None,
        source_description: str | None = None,
        group_id: str | None = None,
        tags: list[str] | None = None,
        valid_at: datetime | None = None,
        metadata: str | None = None,
    ) -> AddMemoryResult:
        """Embed and store a new episode.

        Raises:
            ValidationError: If content or source is empty, or metadata is not JSON
            StorageError: If the store rejects the write
        """
        if not content or not content.strip():
            raise ValidationError("content is required")
        if not source or not source.strip():
            raise ValidationError("source is required")
        validate_metadata(metadata)

        vector, reason = await self._embed(content)

        episode = Episode(
            content=content,
            name=name or None,
            source=source,
            source_model=source_model or None,
            source_description=source_description or None,
            group_id=group_id or self._default_group_id,
            tags=tags or [],
            embedding=vector,
            valid_at=valid_at,
            metadata=metadata,
        )
        await self._store.insert_episode(episode)

        EPISODES_INSERTED.labels(
            group_id=episode.group_id, embedded=str(vector is not None).lower()
        ).inc()
        logger.info(
            "memory_added",
            episode_id=episode.id,
            group_id=episode.group_id,
            source=source,
            embedded=vector is not None,
        )
        return AddMemoryResult(episode=episode, embedded=vector is not None, embedding_error=reason)

    async def search(
        self,
        query: str = "",
        *,
        group_id: str | None = None,
        source: str | None = None,
        before: datetime | None = None,
        after: datetime | None = None,
        tags: list[str] | None = None,
        include_expired: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> SearchResult:
        """Search episodes, ranked by similarity to ``query`` when it can be embedded."""
        query_embedding: list[float] | None = None
        reason: str | None = None
        if query:
            query_embedding, reason = await self._embed(query)

        params = SearchParams(
            query=query,
            query_embedding=query_embedding,
            group_id=group_id or self._default_group_id,
            source=source or None,
            before=before,
            after=after,
            tags=tags or [],
            include_expired=include_expired,
            max_results=max_results,
        )
        episodes = await self._store.search(params)

        return SearchResult(
            episodes=episodes,
            ranking="semantic" if query_embedding else "recency",
            embedding_error=reason,
        )

    async def get_episodes(
        self,
        *,
        group_id: str | None = None,
        before: datetime | None = None,
        after: datetime | None = None,
        include_expired: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> SearchResult:
        """List episodes newest first."""
        return await self.search(
            "",
            group_id=group_id,
            before=before,
            after=after,
            include_expired=include_expired,
            max_results=max_results,
        )

    async def get_episode(self, episode_id: str) -> Episode:
        return await self._store.get_episode(episode_id)

    async def update_episode(
        self,
        episode_id: str,
        *,
        tags: list[str] | None = None,
        expired_at: datetime | None = None,
        metadata: str | None = None,
    ) -> Episode:
        """Apply a sparse update and return the episode as stored.

        Raises:
            NoUpdatesProvidedError: If nothing is supplied
            NotFoundError: If the episode does not exist
        """
        validate_metadata(metadata)
        await self._store.update_episode(
            episode_id,
            UpdateParams(tags=tags, expired_at=expired_at, metadata=metadata),
        )
        EPISODES_UPDATED.inc()
        logger.info("episode_updated", episode_id=episode_id)
        return await self._store.get_episode(episode_id)

    async def delete_episode(self, episode_id: str) -> None:
        await self._store.delete_episode(episode_id)
        EPISODES_DELETED.inc()

    async def status(self) -> StoreStatus:
        """Report readiness and the number of stored episodes."""
        ready = await self._store.health_check()
        count = await self._store.count_episodes() if ready else 0
        EPISODES_STORED.set(count)
        return StoreStatus(
            status="operational" if ready else "unavailable",
            episode_count=count,
            database_ready=ready,
            embedding_provider=(
                self._embedding_provider.provider_name if self._embedding_provider else None
            ),
        )
