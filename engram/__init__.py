"""Engram: an append-mostly episode log with vector similarity search."""

__version__ = "0.4.0"
