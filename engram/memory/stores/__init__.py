"""EpisodeStore implementations."""

from engram.memory.stores.duckdb import DuckDBEpisodeStore
from engram.memory.stores.inmemory import InMemoryEpisodeStore

__all__ = ["DuckDBEpisodeStore", "InMemoryEpisodeStore"]
