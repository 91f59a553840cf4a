"""Embedding providers and the timeout-bounded embedding gateway."""

from engram.config.models.providers import EmbeddingConfig
from engram.observability.logging import get_logger
from engram.providers.embedding.base import EmbeddingError, EmbeddingProvider, EmbeddingResponse
from engram.providers.embedding.gateway import EmbeddingOutcome, embed_with_timeout
from engram.providers.embedding.mock import MockEmbeddingProvider
from engram.providers.embedding.openai_compatible import OpenAICompatibleEmbeddingProvider

logger = get_logger(__name__)


def create_embedding_provider(config: EmbeddingConfig, dimensions: int) -> EmbeddingProvider:
    """Build the provider selected in configuration."""
    if config.provider == "mock":
        provider: EmbeddingProvider = MockEmbeddingProvider(dimensions=dimensions)
    else:
        provider = OpenAICompatibleEmbeddingProvider(
            base_url=config.base_url,
            model=config.model,
            dimensions=dimensions,
            api_key=config.api_key,
            timeout=config.request_timeout_seconds,
        )

    logger.info(
        "embedding_provider_initialized",
        provider=provider.provider_name,
        model=config.model,
        dimensions=dimensions,
    )
    return provider


__all__ = [
    "EmbeddingError",
    "EmbeddingOutcome",
    "EmbeddingProvider",
    "EmbeddingResponse",
    "MockEmbeddingProvider",
    "OpenAICompatibleEmbeddingProvider",
    "create_embedding_provider",
    "embed_with_timeout",
]
