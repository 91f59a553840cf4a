"""Episode table definition and versioned schema migrations.

All functions here are synchronous and take a DuckDB cursor; callers run them
through ``DuckDBConnection.run`` so they execute in a worker thread.

Migrations are ordered by version. Each carries a guard that inspects the
live schema and an apply step that runs inside a single transaction together
with the version bump in ``schema_meta``. A failed migration is rolled back
and surfaces as MigrationError.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import duckdb

from engram.db.errors import MigrationError
from engram.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DIMENSIONS = 768

VECTOR_INDEX_NAME = "idx_episodes_embedding"

# No index on expired_at: DuckDB cannot UPDATE an indexed column in place.
SECONDARY_INDEXES: dict[str, str] = {
    "idx_episodes_created_at": "episodes (created_at DESC)",
    "idx_episodes_group_id": "episodes (group_id)",
    "idx_episodes_valid_at": "episodes (valid_at)",
    "idx_episodes_source": "episodes (source)",
}


def episodes_table_ddl(table: str, dimensions: int) -> str:
    """Return the CREATE TABLE statement for the current episode schema."""
    return f"""
        CREATE TABLE IF NOT EXISTS {table} (
            id VARCHAR PRIMARY KEY,
            content TEXT NOT NULL,
            name VARCHAR,
            source VARCHAR NOT NULL,
            source_model VARCHAR,
            source_description TEXT,
            group_id VARCHAR DEFAULT 'default',
            tags VARCHAR[],
            embedding FLOAT[{dimensions}],
            created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
            valid_at TIMESTAMPTZ,
            expired_at TIMESTAMPTZ,
            metadata JSON
        )
    """


def create_secondary_indexes(cursor: duckdb.DuckDBPyConnection) -> None:
    for name, target in SECONDARY_INDEXES.items():
        cursor.execute(f"CREATE INDEX IF NOT EXISTS {name} ON {target}")


def list_indexes(cursor: duckdb.DuckDBPyConnection) -> list[str]:
    """Return the names of all indexes defined on the episodes table."""
    rows = cursor.execute(
        "SELECT index_name FROM duckdb_indexes() WHERE table_name = 'episodes' ORDER BY index_name"
    ).fetchall()
    return [row[0] for row in rows]


def column_type(cursor: duckdb.DuckDBPyConnection, table: str, column: str) -> str | None:
    row = cursor.execute(
        """
        SELECT data_type
        FROM information_schema.columns
        WHERE table_name = ? AND column_name = ?
        """,
        [table, column],
    ).fetchone()
    return row[0] if row else None


# Schema version bookkeeping


def _create_schema_meta_table(cursor: duckdb.DuckDBPyConnection) -> None:
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_meta (
            key VARCHAR PRIMARY KEY,
            value VARCHAR
        )
        """
    )


def get_schema_version(cursor: duckdb.DuckDBPyConnection) -> int:
    """Get the recorded schema version (0 for databases that predate versioning)."""
    row = cursor.execute("SELECT value FROM schema_meta WHERE key = 'version'").fetchone()
    return int(row[0]) if row else 0


def _set_schema_version(cursor: duckdb.DuckDBPyConnection, version: int) -> None:
    cursor.execute(
        """
        INSERT INTO schema_meta (key, value) VALUES ('version', ?)
        ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
        """,
        [str(version)],
    )


# Migrations


@dataclass(frozen=True)
class Migration:
    """A single schema upgrade step."""

    version: int
    name: str
    is_needed: Callable[[duckdb.DuckDBPyConnection], bool]
    apply: Callable[[duckdb.DuckDBPyConnection, int], None]


def _needs_timestamptz(cursor: duckdb.DuckDBPyConnection) -> bool:
    return column_type(cursor, "episodes", "created_at") == "TIMESTAMP"


def _migrate_timestamptz(cursor: duckdb.DuckDBPyConnection, dimensions: int) -> None:
    """Rebuild the episodes table with timezone-aware timestamp columns.

    Naive values are interpreted in the session time zone (UTC).
    """
    cursor.execute("DROP TABLE IF EXISTS episodes_new")
    cursor.execute(episodes_table_ddl("episodes_new", dimensions))
    cursor.execute(
        """
        INSERT INTO episodes_new
            SELECT id, content, name, source, source_model, source_description,
                   group_id, tags, embedding,
                   created_at::TIMESTAMPTZ, valid_at::TIMESTAMPTZ, expired_at::TIMESTAMPTZ,
                   metadata
            FROM episodes
        """
    )
    cursor.execute("DROP TABLE episodes")
    cursor.execute("ALTER TABLE episodes_new RENAME TO episodes")
    create_secondary_indexes(cursor)


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        name="timestamptz",
        is_needed=_needs_timestamptz,
        apply=_migrate_timestamptz,
    ),
]

SCHEMA_VERSION = MIGRATIONS[-1].version


@dataclass
class SchemaStatus:
    """Outcome of ensure_schema."""

    version: int
    applied: list[int] = field(default_factory=list)
    vector_search_loaded: bool = False
    vector_index: bool = False


def migrate(
    cursor: duckdb.DuckDBPyConnection,
    dimensions: int = DEFAULT_DIMENSIONS,
    migrations: list[Migration] | None = None,
) -> list[int]:
    """Run all migrations newer than the recorded schema version.

    Returns:
        Versions whose apply step actually ran

    Raises:
        MigrationError: If a migration fails; its transaction is rolled back
    """
    _create_schema_meta_table(cursor)
    current = get_schema_version(cursor)
    applied: list[int] = []

    for migration in migrations if migrations is not None else MIGRATIONS:
        if migration.version <= current:
            continue

        needed = migration.is_needed(cursor)
        cursor.begin()
        try:
            if needed:
                logger.info(
                    "migration_started", version=migration.version, migration=migration.name
                )
                migration.apply(cursor, dimensions)
            _set_schema_version(cursor, migration.version)
            cursor.commit()
        except duckdb.Error as e:
            cursor.rollback()
            logger.error(
                "migration_failed",
                version=migration.version,
                migration=migration.name,
                error=str(e),
            )
            raise MigrationError(migration.version, migration.name, e) from e

        current = migration.version
        if needed:
            applied.append(migration.version)
            logger.info("migration_applied", version=migration.version, migration=migration.name)
        else:
            logger.debug("migration_not_needed", version=migration.version, migration=migration.name)

    return applied


def load_vector_extension(cursor: duckdb.DuckDBPyConnection) -> bool:
    """Load the vss extension, installing it first if necessary.

    Returns:
        True if the extension is available
    """
    try:
        cursor.execute("LOAD vss")
        return True
    except duckdb.Error:
        pass

    try:
        cursor.execute("INSTALL vss")
        cursor.execute("LOAD vss")
    except duckdb.Error as e:
        logger.warning("vss_extension_unavailable", error=str(e))
        return False
    logger.info("vss_extension_installed")
    return True


def create_vector_index(cursor: duckdb.DuckDBPyConnection, file_backed: bool) -> bool:
    """Create the HNSW index on embeddings.

    Failure is logged and tolerated; semantic ranking then falls back to a
    full scan.
    """
    try:
        if file_backed:
            cursor.execute("SET hnsw_enable_experimental_persistence = true")
        cursor.execute(
            f"CREATE INDEX IF NOT EXISTS {VECTOR_INDEX_NAME} "
            "ON episodes USING HNSW (embedding) WITH (metric = 'cosine')"
        )
    except duckdb.Error as e:
        logger.warning("vector_index_unavailable", error=str(e))
        return False
    return True


def ensure_schema(
    cursor: duckdb.DuckDBPyConnection,
    dimensions: int = DEFAULT_DIMENSIONS,
    *,
    enable_vector_index: bool = True,
    file_backed: bool = True,
) -> SchemaStatus:
    """Create or upgrade the episode schema. Safe to call repeatedly.

    Args:
        cursor: DuckDB cursor
        dimensions: Embedding length for the FLOAT[n] column
        enable_vector_index: Whether to attempt the HNSW index
        file_backed: Whether the database lives on disk (HNSW persistence)

    Raises:
        MigrationError: If a pending migration fails
    """
    vss_loaded = load_vector_extension(cursor) if enable_vector_index else False

    cursor.execute(episodes_table_ddl("episodes", dimensions))
    create_secondary_indexes(cursor)

    applied = migrate(cursor, dimensions)

    vector_index = create_vector_index(cursor, file_backed) if vss_loaded else False

    status = SchemaStatus(
        version=get_schema_version(cursor),
        applied=applied,
        vector_search_loaded=vss_loaded,
        vector_index=vector_index,
    )
    logger.info(
        "schema_ready",
        version=status.version,
        applied=applied,
        vector_index=vector_index,
    )
    return status
