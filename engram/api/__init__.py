"""HTTP API for Engram."""
