"""Embedding provider for OpenAI-compatible ``/v1/embeddings`` endpoints.

Ollama, vLLM, LM Studio and the OpenAI API itself all accept this request
shape. The default configuration targets a local Ollama server running
``nomic-embed-text``.
"""

from typing import Any

import httpx

from engram.observability.logging import get_logger
from engram.providers.embedding.base import EmbeddingError, EmbeddingProvider, EmbeddingResponse

logger = get_logger(__name__)


class OpenAICompatibleEmbeddingProvider(EmbeddingProvider):
    """Embedding provider speaking the OpenAI embeddings wire format."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        dimensions: int = 768,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the provider.

        Args:
            base_url: Server root; ``/v1/embeddings`` is appended
            model: Model identifier sent with each request
            dimensions: Expected vector length
            api_key: Optional bearer token
            timeout: HTTP request timeout in seconds
            client: Preconfigured client (tests inject a mock transport)
        """
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimensions = dimensions
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def provider_name(self) -> str:
        return "openai_compatible"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1/embeddings"

    async def embed(
        self,
        texts: list[str],
        *,
        model: str | None = None,
        **kwargs: Any,
    ) -> EmbeddingResponse:
        """Generate embeddings, one request for all texts.

        Raises:
            EmbeddingError: On transport errors, non-200 answers or a
                response without the expected ``data[].embedding`` entries
        """
        use_model = model or self._model

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload: dict[str, Any] = {"model": use_model, "input": texts}
        payload.update(kwargs)

        logger.debug("embedding_request", model=use_model, num_texts=len(texts))

        try:
            response = await self._client.post(self.endpoint, headers=headers, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("embedding_transport_error", endpoint=self.endpoint, error=str(e))
            raise EmbeddingError(f"embedding request failed: {e}", cause=e) from e

        if response.status_code != 200:
            logger.warning(
                "embedding_http_error",
                status_code=response.status_code,
                error=response.text[:500],
            )
            raise EmbeddingError(
                f"embedding server returned {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            embeddings = [[float(x) for x in item["embedding"]] for item in items]
            usage = None
            if isinstance(data.get("usage"), dict):
                usage = {
                    "prompt_tokens": int(data["usage"].get("prompt_tokens", 0)),
                    "total_tokens": int(data["usage"].get("total_tokens", 0)),
                }
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise EmbeddingError(f"malformed embedding response: {e}", cause=e) from e

        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"expected {len(texts)} embeddings, received {len(embeddings)}"
            )

        return EmbeddingResponse(
            embeddings=embeddings,
            model=data.get("model") or use_model,
            dimensions=len(embeddings[0]) if embeddings else self._dimensions,
            usage=usage,
        )

    async def close(self) -> None:
        await self._client.aclose()
