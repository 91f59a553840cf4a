"""Prometheus metrics for Engram."""

from prometheus_client import Counter, Gauge, Histogram

EPISODES_INSERTED = Counter(
    "engram_episodes_inserted_total",
    "Total number of episodes written",
    labelnames=["group_id", "embedded"],
)

EPISODES_UPDATED = Counter(
    "engram_episodes_updated_total",
    "Total number of episode updates applied",
)

EPISODES_DELETED = Counter(
    "engram_episodes_deleted_total",
    "Total number of episodes physically removed",
)

EMBEDDING_REQUESTS = Counter(
    "engram_embedding_requests_total",
    "Embedding gateway calls by outcome",
    labelnames=["provider", "outcome"],
)

EMBEDDING_LATENCY = Histogram(
    "engram_embedding_latency_seconds",
    "Embedding gateway latency in seconds",
    labelnames=["provider"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

SEARCH_LATENCY = Histogram(
    "engram_search_latency_seconds",
    "Episode search latency in seconds",
    labelnames=["ranking"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

SEARCH_RESULTS = Histogram(
    "engram_search_results",
    "Number of episodes returned per search",
    buckets=(0, 1, 2, 5, 10, 20, 50, 100),
)

STORE_ERRORS = Counter(
    "engram_store_errors_total",
    "Store operations that failed",
    labelnames=["operation", "error_type"],
)

EPISODES_STORED = Gauge(
    "engram_episodes_stored",
    "Number of episodes in the store at the last status check",
)
