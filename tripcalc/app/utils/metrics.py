"""Prometheus metrics for trip mutations and geocoding."""

from prometheus_client import Counter, Histogram

# Trip mutation metrics
trip_mutations_total = Counter(
    "trip_mutations_total",
    "Total trip mutations by operation and outcome",
    ["operation", "outcome"],
)

trip_saves_total = Counter(
    "trip_saves_total",
    "Total explicit trip saves",
)

# Geocoding metrics
geocode_requests_total = Counter(
    "geocode_requests_total",
    "Total geocoding requests by kind and outcome",
    ["kind", "outcome"],
)

geocode_latency_ms = Histogram(
    "geocode_latency_ms",
    "Geocoding upstream latency in milliseconds",
    ["kind"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 4000, 8000],
)


class PrometheusTripMetrics:
    """Prometheus-based trip metrics implementation."""

    def record_mutation(self, operation: str, outcome: str) -> None:
        """Count a mutation outcome (applied, noop, rejected)."""
        trip_mutations_total.labels(operation=operation, outcome=outcome).inc()

    def record_save(self) -> None:
        """Count an explicit save."""
        trip_saves_total.inc()
