"""Embedding provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

EmbeddingProviderType = Literal["openai_compatible", "mock"]


class EmbeddingConfig(BaseModel):
    """Configuration for the embedding gateway.

    The default targets a local Ollama server, which exposes the
    OpenAI-compatible ``/v1/embeddings`` endpoint.
    """

    provider: EmbeddingProviderType = Field(
        default="openai_compatible",
        description="Embedding provider implementation",
    )
    base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the embedding server",
    )
    model: str = Field(default="nomic-embed-text", description="Embedding model name")
    api_key: str | None = Field(
        default=None,
        description="Bearer token, if the server requires one",
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Budget for one embedding call before the write proceeds without it",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP client timeout",
    )
