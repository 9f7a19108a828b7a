"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
    ),
)

IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently being handled",
    ("method",),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

PROVIDER_ATTEMPTS = Counter(
    "router_provider_attempts_total",
    "Provider attempts made by the model router, by outcome",
    ("provider", "outcome"),
)

RATE_LIMIT_COOLDOWNS = Counter(
    "router_rate_limit_cooldowns_total",
    "Cooldown windows opened after a provider was rate limited",
    ("provider",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def record_provider_attempt(provider: str, outcome: str) -> None:
    """Count one router attempt (``success``, ``failure`` or ``skipped``)."""

    PROVIDER_ATTEMPTS.labels(provider=provider, outcome=outcome).inc()


def record_rate_limit(provider: str) -> None:
    RATE_LIMIT_COOLDOWNS.labels(provider=provider).inc()
