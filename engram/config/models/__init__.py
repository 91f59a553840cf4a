"""Configuration model exports.

    from engram.config.models import StorageConfig, EmbeddingConfig
"""

from engram.config.models.api import APIConfig, MCPConfig
from engram.config.models.observability import LoggingConfig, ObservabilityConfig
from engram.config.models.providers import EmbeddingConfig
from engram.config.models.storage import StorageConfig

__all__ = [
    "APIConfig",
    "MCPConfig",
    "EmbeddingConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "StorageConfig",
]
