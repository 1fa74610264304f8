"""Prometheus metrics for calculation volume, history deletions and request latency"""

from prometheus_client import Counter, Histogram

# Calculation metrics
calculation_counter = Counter(
    "tip_calculations_total",
    "Total tip calculations performed",
    ["mode"],  # saved | validated
)

calculation_failure_counter = Counter(
    "tip_calculation_failures_total",
    "Calculations rejected or failed",
    ["reason"],  # invalid_input | storage
)

# History metrics
history_deletion_counter = Counter(
    "tip_history_deletions_total",
    "History delete requests that succeeded",
    ["scope"],  # single | all
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_calculation(persisted: bool) -> None:
    calculation_counter.labels(mode="saved" if persisted else "validated").inc()


def record_calculation_failure(reason: str) -> None:
    calculation_failure_counter.labels(reason=reason).inc()


def record_history_deletion(scope: str) -> None:
    history_deletion_counter.labels(scope=scope).inc()
