"""EpisodeStore abstract interface."""

from abc import ABC, abstractmethod

from engram.memory.models import Episode, SearchParams, UpdateParams


class EpisodeStore(ABC):
    """Abstract interface for episode storage.

    Implementations persist episodes and answer composite searches. They
    never call an embedding provider: vectors arrive precomputed on the
    episode or in ``SearchParams.query_embedding``.

    Errors are reported through the ``engram.db.errors`` hierarchy.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Embedding length accepted by the store."""
        pass

    async def initialize(self) -> None:
        """Prepare the store for use (open handles, ensure schema)."""
        return None

    @abstractmethod
    async def insert_episode(self, episode: Episode) -> str:
        """Persist a new episode.

        Assigns ``id``, ``created_at`` and the default ``group_id`` on the
        passed episode when they are empty, and returns the id.
        """
        pass

    @abstractmethod
    async def get_episode(self, episode_id: str) -> Episode:
        """Get an episode by ID. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    async def update_episode(self, episode_id: str, params: UpdateParams) -> None:
        """Apply a sparse update to the mutable fields."""
        pass

    @abstractmethod
    async def delete_episode(self, episode_id: str) -> None:
        """Physically remove an episode."""
        pass

    @abstractmethod
    async def search(self, params: SearchParams) -> list[Episode]:
        """Run a composite filtered and ranked search."""
        pass

    @abstractmethod
    async def count_episodes(self, group_id: str | None = None) -> int:
        """Count stored episodes, optionally within one group."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the store can serve requests."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release resources. Later operations raise StoreClosedError."""
        pass
