"""In-memory implementation of EpisodeStore."""

from datetime import datetime
from uuid import uuid4

from engram.db.errors import NoUpdatesProvidedError, NotFoundError, StoreClosedError
from engram.memory.codec import encode_embedding
from engram.memory.models import DEFAULT_GROUP_ID, Episode, SearchParams, UpdateParams, utc_now
from engram.memory.query import build_order_by
from engram.memory.store import EpisodeStore
from engram.utils.vector import cosine_similarity


class InMemoryEpisodeStore(EpisodeStore):
    """In-memory implementation of EpisodeStore for testing and development.

    Uses dict storage with a linear scan for searches and applies the same
    filter, ranking and tie-break rules as the DuckDB store.
    Not suitable for production use.
    """

    def __init__(self, dimensions: int = 768) -> None:
        self._dimensions = dimensions
        self._episodes: dict[str, Episode] = {}
        self._closed = False

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreClosedError(operation)

    async def insert_episode(self, episode: Episode) -> str:
        self._check_open("insert episode")
        embedding = encode_embedding(episode.embedding, self._dimensions)

        if not episode.id:
            episode.id = str(uuid4())
        if not episode.group_id:
            episode.group_id = DEFAULT_GROUP_ID
        if episode.created_at is None:
            episode.created_at = utc_now()

        stored = episode.model_copy(deep=True)
        stored.embedding = embedding
        self._episodes[episode.id] = stored
        return episode.id

    async def get_episode(self, episode_id: str) -> Episode:
        self._check_open("get episode")
        episode = self._episodes.get(episode_id)
        if episode is None:
            raise NotFoundError(episode_id)
        return episode.model_copy(deep=True)

    async def update_episode(self, episode_id: str, params: UpdateParams) -> None:
        self._check_open("update episode")
        if params.is_empty():
            raise NoUpdatesProvidedError()

        episode = self._episodes.get(episode_id)
        if episode is None:
            raise NotFoundError(episode_id)

        if params.tags is not None:
            # [] reads back the same as the NULL the DuckDB store writes
            episode.tags = list(params.tags)
        if params.expired_at is not None:
            episode.expired_at = params.expired_at
        if params.metadata is not None:
            episode.metadata = params.metadata

    async def delete_episode(self, episode_id: str) -> None:
        self._check_open("delete episode")
        if self._episodes.pop(episode_id, None) is None:
            raise NotFoundError(episode_id)

    async def search(self, params: SearchParams) -> list[Episode]:
        self._check_open("search episodes")
        now = utc_now()

        results = [ep for ep in self._episodes.values() if self._matches(ep, params, now)]

        _, ranking = build_order_by(params, self._dimensions)
        if ranking == "semantic" and params.query_embedding:
            query_vector = params.query_embedding

            def similarity_key(ep: Episode) -> tuple[int, float, str]:
                # Episodes without an embedding rank last, as NULLs do in DuckDB
                if ep.embedding is None:
                    return (1, 0.0, ep.id)
                return (0, -cosine_similarity(query_vector, ep.embedding), ep.id)

            results.sort(key=similarity_key)
        else:
            results.sort(key=lambda ep: ep.id)
            results.sort(key=lambda ep: ep.created_at or now, reverse=True)

        return [ep.model_copy(deep=True) for ep in results[: params.limit]]

    @staticmethod
    def _matches(episode: Episode, params: SearchParams, now: datetime) -> bool:
        if params.query and episode.embedding is None:
            return False
        if params.group_id and episode.group_id != params.group_id:
            return False
        if params.source and episode.source != params.source:
            return False
        created_at = episode.created_at
        if params.before is not None and (created_at is None or created_at >= params.before):
            return False
        if params.after is not None and (created_at is None or created_at <= params.after):
            return False
        if not params.include_expired and episode.is_expired(now):
            return False
        return all(tag in episode.tags for tag in params.tags)

    async def count_episodes(self, group_id: str | None = None) -> int:
        self._check_open("count episodes")
        if group_id:
            return sum(1 for ep in self._episodes.values() if ep.group_id == group_id)
        return len(self._episodes)

    async def health_check(self) -> bool:
        return not self._closed

    async def close(self) -> None:
        self._closed = True
