"""Prometheus metrics for monitoring workflow transitions and integrations"""

from typing import Optional

from prometheus_client import Counter, Histogram

# Lifecycle metrics
transition_counter = Counter(
    "discount_transition_total",
    "Status transitions applied",
    ["entity", "status"],  # order | check | operation ; target status
)

validation_failure_counter = Counter(
    "discount_validation_failures_total",
    "Transitions refused by validation",
    ["entity"],
)

stale_transition_counter = Counter(
    "discount_stale_transition_total",
    "Guarded updates that matched no row (concurrent change)",
    ["entity"],
)

# Integration metrics
integration_counter = Counter(
    "discount_integration_total",
    "Completed integration attempts",
    ["entity", "outcome"],  # integrated | error | skipped
)

integration_latency_histogram = Histogram(
    "discount_integration_seconds",
    "Time from integration request to completion",
    ["entity"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transition(entity: str, status: str) -> None:
    transition_counter.labels(entity=entity, status=status).inc()


def record_validation_failure(entity: str) -> None:
    validation_failure_counter.labels(entity=entity).inc()


def record_stale_transition(entity: str) -> None:
    stale_transition_counter.labels(entity=entity).inc()


def record_integration(entity: str, outcome: str, latency_seconds: Optional[float] = None) -> None:
    """Record integration outcome and, when known, request-to-completion latency"""
    integration_counter.labels(entity=entity, outcome=outcome).inc()
    if latency_seconds is not None and latency_seconds >= 0:
        integration_latency_histogram.labels(entity=entity).observe(latency_seconds)
