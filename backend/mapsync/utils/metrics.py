"""Prometheus metrics for geocoding."""

from prometheus_client import Counter, Histogram

from backend.mapsync.geocoding.guard import GeocodeMetrics

geocode_call_latency_ms = Histogram(
    "geocode_call_latency_ms",
    "External geocoding call latency in milliseconds",
    ["outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)

geocode_call_errors_total = Counter(
    "geocode_call_errors_total",
    "Total external geocoding call errors",
    ["reason"],
)

geocode_cache_hits_total = Counter(
    "geocode_cache_hits_total",
    "Total geocoding cache hits",
)

geocode_tier_resolutions_total = Counter(
    "geocode_tier_resolutions_total",
    "Entities resolved per geocoding tier (5 = global fallback)",
    ["tier"],
)


class PrometheusGeocodeMetrics(GeocodeMetrics):
    """Prometheus-based geocoding metrics implementation."""

    def record_latency(self, outcome: str, latency_ms: float) -> None:
        geocode_call_latency_ms.labels(outcome=outcome).observe(latency_ms)

    def inc_error(self, reason: str) -> None:
        geocode_call_errors_total.labels(reason=reason).inc()

    def inc_cache_hit(self) -> None:
        geocode_cache_hits_total.inc()

    def inc_tier(self, tier: int) -> None:
        geocode_tier_resolutions_total.labels(tier=str(tier)).inc()
