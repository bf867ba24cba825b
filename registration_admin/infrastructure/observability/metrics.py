"""Prometheus metrics for monitoring saga outcomes, compensations and store health"""

from prometheus_client import Counter, Histogram

# Saga metrics
saga_counter = Counter(
    "registration_saga_total",
    "Registration sagas executed",
    ["operation", "outcome"],  # outcome: success | failure
)

saga_step_failure_counter = Counter(
    "registration_saga_step_failures_total",
    "Saga steps that failed",
    ["saga", "step", "kind"],
)

compensation_counter = Counter(
    "registration_compensations_total",
    "Compensating actions executed after a failed step",
    ["saga", "step", "outcome"],  # outcome: ok | failed
)

best_effort_failure_counter = Counter(
    "registration_best_effort_failures_total",
    "Best-effort steps that failed without failing their saga",
    ["saga", "step"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_saga(operation: str, ok: bool) -> None:
    """Record saga outcome for monitoring failure rates per operation"""
    outcome = "success" if ok else "failure"
    saga_counter.labels(operation=operation, outcome=outcome).inc()
