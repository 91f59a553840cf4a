"""Database utilities for Engram.

This module contains:
- DuckDB connection management
- Store error hierarchy
- Schema definition and versioned migrations
"""

from engram.db.errors import (
    DecodeError,
    MigrationError,
    NotFoundError,
    NoUpdatesProvidedError,
    StorageError,
    StoreClosedError,
    StoreError,
    ValidationError,
)

__all__ = [
    "StoreError",
    "StorageError",
    "StoreClosedError",
    "DecodeError",
    "MigrationError",
    "NotFoundError",
    "ValidationError",
    "NoUpdatesProvidedError",
]
