"""Timeout-bounded embedding with failure reported as a value.

Writes and searches must never fail because the embedding service is slow
or down. ``embed_with_timeout`` therefore never raises: it returns an
EmbeddingOutcome that is either a usable vector or a degraded result with a
reason, and the caller proceeds either way.
"""

import asyncio
import math
import time

from pydantic import BaseModel

from engram.observability.logging import get_logger
from engram.observability.metrics import EMBEDDING_LATENCY, EMBEDDING_REQUESTS
from engram.providers.embedding.base import EmbeddingError, EmbeddingProvider

logger = get_logger(__name__)


class EmbeddingOutcome(BaseModel):
    """Result of one embedding attempt."""

    vector: list[float] | None = None
    degraded: bool = False
    reason: str | None = None

    @classmethod
    def ok(cls, vector: list[float]) -> "EmbeddingOutcome":
        return cls(vector=vector)

    @classmethod
    def unavailable(cls, reason: str) -> "EmbeddingOutcome":
        return cls(degraded=True, reason=reason)


async def embed_with_timeout(
    provider: EmbeddingProvider | None,
    text: str,
    *,
    timeout: float,
    dimensions: int,
) -> EmbeddingOutcome:
    """Embed ``text`` within ``timeout`` seconds.

    Timeouts, provider errors (expected or not) and unusable vectors produce a
    degraded outcome, logged as a warning.
    """
    if provider is None:
        return EmbeddingOutcome.unavailable("no embedding provider configured")

    start = time.perf_counter()
    try:
        vector = await asyncio.wait_for(provider.embed_single(text), timeout=timeout)
    except TimeoutError:
        outcome = EmbeddingOutcome.unavailable(f"embedding timed out after {timeout}s")
    except EmbeddingError as e:
        outcome = EmbeddingOutcome.unavailable(str(e))
    except Exception as e:
        logger.exception("embedding_provider_failed", provider=provider.provider_name)
        outcome = EmbeddingOutcome.unavailable(f"unexpected embedding failure: {e}")
    else:
        if len(vector) != dimensions:
            outcome = EmbeddingOutcome.unavailable(
                f"embedding has {len(vector)} dimensions, expected {dimensions}"
            )
        elif not all(math.isfinite(x) for x in vector):
            outcome = EmbeddingOutcome.unavailable("embedding contains non-finite values")
        else:
            outcome = EmbeddingOutcome.ok(vector)

    EMBEDDING_LATENCY.labels(provider=provider.provider_name).observe(time.perf_counter() - start)
    EMBEDDING_REQUESTS.labels(
        provider=provider.provider_name,
        outcome="degraded" if outcome.degraded else "ok",
    ).inc()

    if outcome.degraded:
        logger.warning(
            "embedding_degraded",
            provider=provider.provider_name,
            reason=outcome.reason,
        )

    return outcome
