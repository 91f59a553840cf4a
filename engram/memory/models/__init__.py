"""Memory domain models."""

from engram.memory.models.episode import (
    DEFAULT_GROUP_ID,
    DEFAULT_MAX_RESULTS,
    Episode,
    SearchParams,
    UpdateParams,
    ensure_utc,
    utc_now,
)

__all__ = [
    "DEFAULT_GROUP_ID",
    "DEFAULT_MAX_RESULTS",
    "Episode",
    "SearchParams",
    "UpdateParams",
    "ensure_utc",
    "utc_now",
]
