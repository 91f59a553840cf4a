"""DuckDB connection management.

A single DuckDB database handle is shared by every store operation. Each
operation runs in a worker thread on its own cursor, so concurrent callers
interleave under DuckDB's MVCC without application-level locking.
"""

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import duckdb

from engram.db.errors import StorageError, StoreClosedError
from engram.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

IN_MEMORY = ":memory:"


class DuckDBConnection:
    """Owns the DuckDB database handle for the lifetime of a store.

    Usage:
        connection = DuckDBConnection("./engram.duckdb")
        await connection.connect()
        try:
            rows = await connection.run(
                "count episodes",
                lambda cur: cur.execute("SELECT count(*) FROM episodes").fetchall(),
            )
        finally:
            await connection.close()
    """

    def __init__(self, path: str = IN_MEMORY) -> None:
        """Initialize connection configuration.

        Args:
            path: Database file path, or ":memory:" for a transient database
        """
        self._path = path
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._closed = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_file_backed(self) -> bool:
        return self._path != IN_MEMORY

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        """Open the database file, creating parent directories as needed."""
        if self._closed:
            raise StoreClosedError("connect")
        if self._conn is not None:
            return

        def _connect() -> duckdb.DuckDBPyConnection:
            if self.is_file_backed:
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            conn = duckdb.connect(self._path)
            conn.execute("SET TimeZone = 'UTC'")
            return conn

        try:
            self._conn = await asyncio.to_thread(_connect)
        except duckdb.Error as e:
            logger.error("duckdb_connection_failed", path=self._path, error=str(e))
            raise StorageError("open database", str(e), cause=e) from e

        logger.info("duckdb_connected", path=self._path)

    async def close(self) -> None:
        """Release the database handle. Safe to call more than once."""
        if self._conn is None:
            self._closed = True
            return

        conn = self._conn
        self._conn = None
        self._closed = True
        await asyncio.to_thread(conn.close)
        logger.info("duckdb_closed", path=self._path)

    async def run(
        self,
        operation: str,
        fn: Callable[[duckdb.DuckDBPyConnection], T],
    ) -> T:
        """Run ``fn`` on a fresh cursor in a worker thread.

        Engine errors are wrapped in StorageError naming ``operation``.
        Store errors raised by ``fn`` itself propagate unchanged.

        Raises:
            StoreClosedError: If the connection has been closed
            StorageError: If the engine reports an error
        """
        conn = self._conn
        if conn is None:
            raise StoreClosedError(operation)

        def _run() -> T:
            cursor = conn.cursor()
            try:
                cursor.execute("SET TimeZone = 'UTC'")
                return fn(cursor)
            finally:
                cursor.close()

        try:
            return await asyncio.to_thread(_run)
        except duckdb.Error as e:
            logger.error("duckdb_operation_failed", operation=operation, error=str(e))
            raise StorageError(operation, str(e), cause=e) from e

    async def health_check(self) -> bool:
        """Return True if the database answers a trivial query."""
        if self._conn is None:
            return False
        try:
            await self.run("health check", lambda cur: cur.execute("SELECT 1").fetchone())
        except StorageError as e:
            logger.warning("duckdb_health_check_failed", error=str(e))
            return False
        return True
