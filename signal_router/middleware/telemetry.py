"""Prometheus instrumentation for every HTTP request."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from signal_router.telemetry import IN_PROGRESS, observe_request


def _route_label(request: Request) -> str:
    """Route template when routing has matched, otherwise the raw path."""

    path = getattr(request.scope.get("route"), "path", None)
    return path or request.url.path


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Count, time and track in-flight requests."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status_code = 500
        IN_PROGRESS.labels(method=request.method).inc()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            IN_PROGRESS.labels(method=request.method).dec()
            # The route is only attached to the scope after routing ran.
            observe_request(
                request.method,
                _route_label(request),
                status_code,
                time.perf_counter() - started,
            )
