"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    IN_PROGRESS,
    PROVIDER_ATTEMPTS,
    RATE_LIMIT_COOLDOWNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_provider_attempt,
    record_rate_limit,
)

__all__ = [
    "ERROR_COUNTER",
    "IN_PROGRESS",
    "PROVIDER_ATTEMPTS",
    "RATE_LIMIT_COOLDOWNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_provider_attempt",
    "record_rate_limit",
]
