"""Mock embedding provider for testing."""

import hashlib
from typing import Any

from engram.providers.embedding.base import EmbeddingError, EmbeddingProvider, EmbeddingResponse
from engram.utils.vector import normalize


class MockEmbeddingProvider(EmbeddingProvider):
    """Deterministic embedding provider that makes no network calls.

    Vectors are derived from a hash of the text, so equal texts embed
    identically while similar texts are not close. ``fixed`` maps exact texts
    to hand-picked vectors for ranking tests; ``fail`` makes every call raise.
    """

    def __init__(
        self,
        dimensions: int = 768,
        default_model: str = "mock-embedding",
        fixed: dict[str, list[float]] | None = None,
        fail: bool = False,
    ):
        self._dimensions = dimensions
        self._default_model = default_model
        self._fixed = dict(fixed or {})
        self.fail = fail
        self._call_history: list[list[str]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def call_history(self) -> list[list[str]]:
        """Texts passed to each embed() call."""
        return self._call_history

    def _generate_embedding(self, text: str) -> list[float]:
        if text in self._fixed:
            return list(self._fixed[text])

        digest = hashlib.sha256(text.encode()).digest()
        raw = [(digest[i % len(digest)] / 127.5) - 1.0 for i in range(self._dimensions)]
        return normalize(raw)

    async def embed(
        self,
        texts: list[str],
        *,
        model: str | None = None,
        **kwargs: Any,  # noqa: ARG002
    ) -> EmbeddingResponse:
        self._call_history.append(list(texts))
        if self.fail:
            raise EmbeddingError("mock embedding provider configured to fail")

        return EmbeddingResponse(
            embeddings=[self._generate_embedding(text) for text in texts],
            model=model or self._default_model,
            dimensions=self._dimensions,
        )
