"""
Prometheus metrics for Stock Service.

Tracks HTTP traffic and cache-aside behaviour (hits, misses, store reads,
cache writes and update outcomes).
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "stock_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "stock_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Cache-aside metrics
cache_hits_total = Counter("stock_cache_hits_total", "Total stock cache hits")

cache_misses_total = Counter("stock_cache_misses_total", "Total stock cache misses")

cache_writes_total = Counter(
    "stock_cache_writes_total",
    "Total stock cache writes",
    ["path"],  # read (miss populate) or write (update overwrite)
)

store_reads_total = Counter("stock_store_reads_total", "Total stock store reads")

stock_updates_total = Counter(
    "stock_updates_total",
    "Total stock update requests",
    ["result"],  # updated or not_found
)


def track_request_metrics(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record one HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


async def metrics_endpoint() -> Response:
    """Expose metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
