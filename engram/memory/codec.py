"""Encoding episodes into DuckDB parameters and decoding result rows.

The engine hands back its own representations (lists for ``VARCHAR[]`` and
``FLOAT[n]``, strings or structures for ``JSON``). Every column goes through
an explicit decoder here; a value of any shape not listed raises DecodeError
instead of being silently dropped.
"""

import json
import math
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from engram.db.errors import DecodeError, ValidationError
from engram.memory.models import Episode, ensure_utc

EPISODE_COLUMNS: tuple[str, ...] = (
    "id",
    "content",
    "name",
    "source",
    "source_model",
    "source_description",
    "group_id",
    "tags",
    "embedding",
    "created_at",
    "valid_at",
    "expired_at",
    "metadata",
)

SELECT_COLUMNS = ", ".join(EPISODE_COLUMNS)


# Encoding


def encode_tags(tags: Sequence[str] | None) -> list[str] | None:
    """Empty tag lists are stored as NULL."""
    if not tags:
        return None
    return list(tags)


def encode_embedding(embedding: Sequence[float] | None, dimensions: int) -> list[float] | None:
    """Validate an embedding for storage. Empty vectors are stored as NULL.

    Raises:
        ValidationError: If the length differs from ``dimensions`` or a
            component is not a finite number
    """
    if not embedding:
        return None
    if len(embedding) != dimensions:
        raise ValidationError(
            f"embedding has {len(embedding)} dimensions, expected {dimensions}"
        )
    if not all(_is_number(x) and math.isfinite(x) for x in embedding):
        raise ValidationError("embedding must contain only finite numbers")
    return [float(x) for x in embedding]


def format_vector_literal(vector: Sequence[float], dimensions: int) -> str:
    """Format a query vector as a constant DuckDB array expression.

    A constant (rather than a bound parameter) lets the HNSW index serve the
    ORDER BY.

    Raises:
        ValueError: If the vector cannot be encoded
    """
    if len(vector) != dimensions:
        raise ValueError(f"query vector has {len(vector)} dimensions, expected {dimensions}")
    if not all(_is_number(x) and math.isfinite(x) for x in vector):
        raise ValueError("query vector must contain only finite numbers")
    return "[" + ", ".join(repr(float(x)) for x in vector) + f"]::FLOAT[{dimensions}]"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Decoding


def decode_text(column: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(column, value)


def decode_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)) and all(isinstance(tag, str) for tag in value):
        return list(value)
    raise DecodeError("tags", value)


def decode_embedding(value: Any) -> list[float] | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and all(_is_number(x) for x in value):
        return [float(x) for x in value]
    raise DecodeError("embedding", value)


def decode_timestamp(column: str, value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    raise DecodeError(column, value)


def decode_metadata(value: Any) -> str | None:
    """JSON text is returned verbatim; structures are re-encoded compactly."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    raise DecodeError("metadata", value)


def decode_episode(row: Sequence[Any]) -> Episode:
    """Build an Episode from a row selected with SELECT_COLUMNS.

    Raises:
        DecodeError: If any column holds an unexpected shape
    """
    if len(row) != len(EPISODE_COLUMNS):
        raise DecodeError("row", row)

    values = dict(zip(EPISODE_COLUMNS, row, strict=True))
    return Episode(
        id=decode_text("id", values["id"]) or "",
        content=decode_text("content", values["content"]) or "",
        name=decode_text("name", values["name"]),
        source=decode_text("source", values["source"]) or "",
        source_model=decode_text("source_model", values["source_model"]),
        source_description=decode_text("source_description", values["source_description"]),
        group_id=decode_text("group_id", values["group_id"]) or "",
        tags=decode_tags(values["tags"]),
        embedding=decode_embedding(values["embedding"]),
        created_at=decode_timestamp("created_at", values["created_at"]),
        valid_at=decode_timestamp("valid_at", values["valid_at"]),
        expired_at=decode_timestamp("expired_at", values["expired_at"]),
        metadata=decode_metadata(values["metadata"]),
    )
