"""
Prometheus metrics for monitoring the event indexing pipeline.

Defines and exposes metrics for:
- Reindex outcomes (indexed, rejected, failed, deindexed)
- Rejection reasons
- Reindex latency
- Geocoding provider outcomes and cache effectiveness

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the forum-events pipeline.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_reindex("indexed", latency=0.12)
        metrics.record_geocode("nominatim", "found")
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.reindex_total = Counter(
            "forum_events_reindex_total",
            "Total reindex attempts by outcome",
            ["status"],  # indexed, rejected, failed, deindexed
        )

        self.rejections = Counter(
            "forum_events_rejections_total",
            "Total posts rejected as non-events",
            ["reason"],
        )

        self.reindex_latency = Histogram(
            "forum_events_reindex_latency_seconds",
            "Time to reindex a single post",
            buckets=LATENCY_BUCKETS,
        )

        self.geocode_requests = Counter(
            "forum_events_geocode_requests_total",
            "Geocoding provider calls by outcome",
            ["provider", "outcome"],  # found, not_found, out_of_bounds
        )

        self.geocode_cache = Counter(
            "forum_events_geocode_cache_total",
            "Geocode cache lookups",
            ["result"],  # hit, miss
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info("Prometheus metrics server started on port %d", port)

    def record_reindex(self, status: str, latency: float | None = None) -> None:
        """
        Record the outcome of a single reindex.

        Args:
            status: indexed, rejected, failed or deindexed
            latency: Optional wall time of the reindex in seconds
        """
        self.reindex_total.labels(status=status).inc()
        if latency is not None:
            self.reindex_latency.observe(latency)

    def record_rejection(self, reason: str) -> None:
        """Record why a post was not indexed."""
        self.rejections.labels(reason=reason).inc()

    def record_geocode(self, provider: str, outcome: str) -> None:
        """Record a provider call outcome."""
        self.geocode_requests.labels(provider=provider, outcome=outcome).inc()

    def record_geocode_cache(self, hit: bool) -> None:
        """Record a geocode cache lookup."""
        self.geocode_cache.labels(result="hit" if hit else "miss").inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
