"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["duckdb", "inmemory"]


class StorageConfig(BaseModel):
    """Configuration for the episode store."""

    backend: BackendType = Field(
        default="duckdb",
        description="Store implementation (inmemory is for tests and development)",
    )
    db_path: str = Field(
        default="./engram.duckdb",
        description="DuckDB database file, or ':memory:'",
    )
    dimensions: int = Field(
        default=768,
        gt=0,
        description="Embedding vector length; fixed by the table schema",
    )
    enable_vector_index: bool = Field(
        default=True,
        description="Load the vss extension and build an HNSW index on embeddings",
    )
