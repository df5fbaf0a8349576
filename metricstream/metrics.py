from prometheus_client import Counter, Gauge, Histogram

# Search backend
BACKEND_QUERIES_TOTAL = Counter(
    "metricstream_backend_queries_total", "Snapshot queries issued to Elasticsearch."
)
BACKEND_QUERY_FAILURES_TOTAL = Counter(
    "metricstream_backend_query_failures_total",
    "Snapshot queries that failed or returned a malformed response.",
)
BACKEND_QUERY_LATENCY_SECONDS = Histogram(
    "metricstream_backend_query_latency_seconds",
    "Latency of snapshot queries against Elasticsearch.",
)

# Snapshot cache
SNAPSHOT_CACHE_HITS_TOTAL = Counter(
    "metricstream_snapshot_cache_hits_total",
    "Snapshot requests served by the current tick's entry.",
)
SNAPSHOT_CACHE_MISSES_TOTAL = Counter(
    "metricstream_snapshot_cache_misses_total",
    "Snapshot requests that started a new computation.",
)

# Push channel
ACTIVE_SUBSCRIPTIONS = Gauge(
    "metricstream_active_subscriptions", "Currently connected push subscribers."
)
DELIVERIES_TOTAL = Counter(
    "metricstream_deliveries_total", "Payloads delivered to push subscribers."
)
DELIVERY_SKIPPED_TICKS_TOTAL = Counter(
    "metricstream_delivery_skipped_ticks_total",
    "Ticks skipped because of backend failure or a delivery overrunning its slot.",
)
DELIVERY_FAILURES_TOTAL = Counter(
    "metricstream_delivery_failures_total",
    "Sends to a subscriber that raised and ended the subscription.",
)
