"""DuckDB implementation of EpisodeStore.

Uses an embedded DuckDB database file, with the vss extension's HNSW index
for cosine ranking when it is available.
"""

import time
from collections.abc import Callable
from typing import TypeVar
from uuid import uuid4

import duckdb

from engram.db.connection import IN_MEMORY, DuckDBConnection
from engram.db.errors import NoUpdatesProvidedError, NotFoundError, StoreError
from engram.db.schema import DEFAULT_DIMENSIONS, SchemaStatus, ensure_schema, list_indexes
from engram.memory.codec import (
    SELECT_COLUMNS,
    decode_episode,
    encode_embedding,
    encode_tags,
)
from engram.memory.models import DEFAULT_GROUP_ID, Episode, SearchParams, UpdateParams, utc_now
from engram.memory.query import build_search_query
from engram.memory.store import EpisodeStore
from engram.observability.logging import get_logger
from engram.observability.metrics import SEARCH_LATENCY, SEARCH_RESULTS, STORE_ERRORS

logger = get_logger(__name__)

T = TypeVar("T")


def _rows_affected(cursor: duckdb.DuckDBPyConnection) -> int:
    row = cursor.fetchone()
    return int(row[0]) if row else 0


class DuckDBEpisodeStore(EpisodeStore):
    """DuckDB implementation of EpisodeStore.

    Every method maps to a single statement executed on its own cursor.
    Engine errors surface as StorageError naming the failed operation.
    """

    def __init__(
        self,
        connection: DuckDBConnection | None = None,
        *,
        dimensions: int = DEFAULT_DIMENSIONS,
        enable_vector_index: bool = True,
    ) -> None:
        """Initialize with a connection manager.

        Args:
            connection: DuckDB connection (defaults to a transient in-memory one)
            dimensions: Embedding length of the FLOAT[n] column
            enable_vector_index: Whether to attempt the HNSW index
        """
        self._connection = connection or DuckDBConnection(IN_MEMORY)
        self._dimensions = dimensions
        self._enable_vector_index = enable_vector_index
        self._schema: SchemaStatus | None = None

    @classmethod
    async def open(
        cls,
        path: str,
        *,
        dimensions: int = DEFAULT_DIMENSIONS,
        enable_vector_index: bool = True,
    ) -> "DuckDBEpisodeStore":
        """Open the database at ``path`` and ensure its schema."""
        store = cls(
            DuckDBConnection(path),
            dimensions=dimensions,
            enable_vector_index=enable_vector_index,
        )
        await store.initialize()
        return store

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def schema(self) -> SchemaStatus | None:
        """Schema status from the last initialize() call."""
        return self._schema

    @property
    def vector_index_enabled(self) -> bool:
        return self._schema is not None and self._schema.vector_index

    async def initialize(self) -> None:
        """Connect and create or migrate the schema.

        Raises:
            MigrationError: If a pending migration fails
            StorageError: If the database cannot be opened
        """
        await self._connection.connect()
        try:
            self._schema = await self._connection.run(
                "initialize schema",
                lambda cur: ensure_schema(
                    cur,
                    self._dimensions,
                    enable_vector_index=self._enable_vector_index,
                    file_backed=self._connection.is_file_backed,
                ),
            )
        except StoreError:
            await self._connection.close()
            raise

    async def close(self) -> None:
        await self._connection.close()

    async def health_check(self) -> bool:
        return await self._connection.health_check()

    async def list_indexes(self) -> list[str]:
        """Names of the indexes defined on the episodes table."""
        return await self._connection.run("list indexes", list_indexes)

    async def insert_episode(self, episode: Episode) -> str:
        """Insert an episode, filling in id, created_at and group_id."""
        embedding = encode_embedding(episode.embedding, self._dimensions)

        if not episode.id:
            episode.id = str(uuid4())
        if not episode.group_id:
            episode.group_id = DEFAULT_GROUP_ID
        if episode.created_at is None:
            episode.created_at = utc_now()

        parameters = [
            episode.id,
            episode.content,
            episode.name,
            episode.source,
            episode.source_model,
            episode.source_description,
            episode.group_id,
            encode_tags(episode.tags),
            embedding,
            episode.created_at,
            episode.valid_at,
            episode.expired_at,
            episode.metadata,
        ]

        def _insert(cur: duckdb.DuckDBPyConnection) -> None:
            cur.execute(
                f"""
                INSERT INTO episodes ({SELECT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, CAST(? AS FLOAT[{self._dimensions}]),
                        ?, ?, ?, ?)
                """,
                parameters,
            )

        await self._tracked("insert episode", _insert)
        logger.debug(
            "episode_inserted",
            episode_id=episode.id,
            group_id=episode.group_id,
            embedded=embedding is not None,
        )
        return episode.id

    async def get_episode(self, episode_id: str) -> Episode:
        def _get(cur: duckdb.DuckDBPyConnection) -> Episode:
            row = cur.execute(
                f"SELECT {SELECT_COLUMNS} FROM episodes WHERE id = ?",
                [episode_id],
            ).fetchone()
            if row is None:
                raise NotFoundError(episode_id)
            return decode_episode(row)

        return await self._tracked("get episode", _get)

    async def update_episode(self, episode_id: str, params: UpdateParams) -> None:
        """Update only the fields supplied in ``params``.

        Raises:
            NoUpdatesProvidedError: If no field is set
            NotFoundError: If no episode has this id
        """
        if params.is_empty():
            raise NoUpdatesProvidedError()

        assignments: list[str] = []
        parameters: list[object] = []
        if params.tags is not None:
            assignments.append("tags = ?")
            parameters.append(encode_tags(params.tags))
        if params.expired_at is not None:
            assignments.append("expired_at = ?")
            parameters.append(params.expired_at)
        if params.metadata is not None:
            assignments.append("metadata = ?")
            parameters.append(params.metadata)
        parameters.append(episode_id)

        def _update(cur: duckdb.DuckDBPyConnection) -> None:
            cur.execute(
                f"UPDATE episodes SET {', '.join(assignments)} WHERE id = ?",
                parameters,
            )
            if _rows_affected(cur) == 0:
                raise NotFoundError(episode_id)

        await self._tracked("update episode", _update)
        logger.debug("episode_updated", episode_id=episode_id, fields=len(assignments))

    async def delete_episode(self, episode_id: str) -> None:
        def _delete(cur: duckdb.DuckDBPyConnection) -> None:
            cur.execute("DELETE FROM episodes WHERE id = ?", [episode_id])
            if _rows_affected(cur) == 0:
                raise NotFoundError(episode_id)

        await self._tracked("delete episode", _delete)
        logger.info("episode_deleted", episode_id=episode_id)

    async def search(self, params: SearchParams) -> list[Episode]:
        query = build_search_query(params, self._dimensions)

        def _search(cur: duckdb.DuckDBPyConnection) -> list[Episode]:
            rows = cur.execute(query.sql, query.parameters).fetchall()
            return [decode_episode(row) for row in rows]

        start = time.perf_counter()
        episodes = await self._tracked("search episodes", _search)
        SEARCH_LATENCY.labels(ranking=query.ranking).observe(time.perf_counter() - start)
        SEARCH_RESULTS.observe(len(episodes))

        logger.debug(
            "episodes_searched",
            ranking=query.ranking,
            group_id=params.group_id,
            results=len(episodes),
        )
        return episodes

    async def count_episodes(self, group_id: str | None = None) -> int:
        def _count(cur: duckdb.DuckDBPyConnection) -> int:
            if group_id:
                row = cur.execute(
                    "SELECT count(*) FROM episodes WHERE group_id = ?", [group_id]
                ).fetchone()
            else:
                row = cur.execute("SELECT count(*) FROM episodes").fetchone()
            return int(row[0]) if row else 0

        return await self._tracked("count episodes", _count)

    async def _tracked(
        self, operation: str, fn: Callable[[duckdb.DuckDBPyConnection], T]
    ) -> T:
        """Run ``fn`` on the connection and count storage failures."""
        try:
            return await self._connection.run(operation, fn)
        except StoreError as e:
            if not isinstance(e, NotFoundError):
                STORE_ERRORS.labels(operation=operation, error_type=type(e).__name__).inc()
            raise
