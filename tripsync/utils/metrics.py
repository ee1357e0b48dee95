"""Prometheus metrics for generation and schedule editing."""

from prometheus_client import Counter, Histogram

generation_requests_total = Counter(
    "generation_requests_total",
    "Generation requests by admission outcome",
    ["outcome"],
)

generation_outcomes_total = Counter(
    "generation_outcomes_total",
    "Finished generations by outcome and failure reason",
    ["outcome", "reason"],
)

generation_duration_seconds = Histogram(
    "generation_duration_seconds",
    "Wall time of a generation job in seconds",
    ["outcome"],
    buckets=[1, 5, 10, 30, 60, 120, 300, 600, 900],
)

route_lookups_total = Counter(
    "route_lookups_total",
    "Route provider lookups",
    ["outcome"],
)

schedule_edits_total = Counter(
    "schedule_edits_total",
    "Schedule edits applied",
    ["mode", "kind"],
)


class PrometheusEngineMetrics:
    """Prometheus-based metrics implementation."""

    def inc_generation_request(self, outcome: str) -> None:
        """Count a generation request (accepted, conflict, rejected)."""
        generation_requests_total.labels(outcome=outcome).inc()

    def record_generation(self, outcome: str, reason: str, duration_s: float) -> None:
        """Record a finished generation job."""
        generation_outcomes_total.labels(outcome=outcome, reason=reason).inc()
        generation_duration_seconds.labels(outcome=outcome).observe(duration_s)

    def inc_route_lookup(self, outcome: str) -> None:
        """Count a route lookup (ok, error)."""
        route_lookups_total.labels(outcome=outcome).inc()

    def inc_edit(self, mode: str, kind: str) -> None:
        """Count an applied edit item (commit, preview, single)."""
        schedule_edits_total.labels(mode=mode, kind=kind).inc()
