"""Construction and teardown of the store, provider and service.

Every entry point (HTTP server, MCP stdio server, CLI commands) goes through
``open_service`` so the database handle is opened once and released exactly
once, including on error paths.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from engram.config import Settings
from engram.memory.service import MemoryService
from engram.memory.store import EpisodeStore
from engram.memory.stores import DuckDBEpisodeStore, InMemoryEpisodeStore
from engram.observability.logging import get_logger
from engram.providers.embedding import EmbeddingProvider, create_embedding_provider

logger = get_logger(__name__)


async def create_store(settings: Settings) -> EpisodeStore:
    """Build and initialize the configured episode store."""
    storage = settings.storage
    if storage.backend == "inmemory":
        store: EpisodeStore = InMemoryEpisodeStore(dimensions=storage.dimensions)
    else:
        store = await DuckDBEpisodeStore.open(
            storage.db_path,
            dimensions=storage.dimensions,
            enable_vector_index=storage.enable_vector_index,
        )

    logger.info("episode_store_initialized", backend=storage.backend, path=storage.db_path)
    return store


@asynccontextmanager
async def open_service(
    settings: Settings,
    *,
    embedding_provider: EmbeddingProvider | None = None,
    with_embeddings: bool = True,
) -> AsyncIterator[MemoryService]:
    """Open a MemoryService for the duration of the block.

    Args:
        settings: Application settings
        embedding_provider: Provider override (tests, embedded use)
        with_embeddings: Build the configured provider when no override is given
    """
    store = await create_store(settings)
    provider = embedding_provider
    if provider is None and with_embeddings:
        provider = create_embedding_provider(settings.embedding, settings.storage.dimensions)

    try:
        yield MemoryService(
            store,
            provider,
            embedding_timeout=settings.embedding.timeout_seconds,
            default_group_id=settings.api.default_group_id,
        )
    finally:
        if provider is not None and embedding_provider is None:
            await provider.close()
        await store.close()
        logger.info("episode_store_closed")
