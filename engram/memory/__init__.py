"""Episode memory: models, stores, search and the service used by adapters.

Episodes are the single source of truth. The store persists and searches
them; the service adds caller-level validation and embedding.
"""
