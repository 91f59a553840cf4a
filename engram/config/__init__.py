"""Configuration loading for Engram.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from engram.config import get_settings

    settings = get_settings()
    db_path = settings.storage.db_path
"""

from functools import lru_cache

from engram.config.loader import load_config
from engram.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Falls back to model defaults when no config/default.toml is found.
    Call ``reload_settings()`` to pick up changed files or environment.
    """
    try:
        set_toml_config(load_config())
    except FileNotFoundError:
        set_toml_config({})

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
