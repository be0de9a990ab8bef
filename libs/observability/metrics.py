"""Prometheus helpers: request instrumentation and per-service counters."""

from __future__ import annotations

import time
from typing import Sequence

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

_REQUEST_COUNTER = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    labelnames=("service", "method", "path", "status"),
)
_REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    labelnames=("service", "method", "path"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

_COUNTERS: dict[str, Counter] = {}


def service_counter(name: str, documentation: str, labelnames: Sequence[str] = ()) -> Counter:
    """Return the counter registered under ``name``, creating it once.

    The default registry rejects duplicate names, so modules that may be
    imported more than once (test reloads, several app instances) share the
    same collector through this cache.
    """

    counter = _COUNTERS.get(name)
    if counter is None:
        counter = Counter(name, documentation, labelnames=tuple(labelnames))
        _COUNTERS[name] = counter
    return counter


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count requests and observe their latency per route template."""

    def __init__(self, app: ASGIApp, *, service_name: str) -> None:
        super().__init__(app)
        self._service_name = service_name

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        route = request.scope.get("route")
        path: str = getattr(route, "path", request.url.path)
        method = request.method.upper()
        status = "500"
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = str(getattr(response, "status_code", 500))
            return response
        finally:
            _REQUEST_COUNTER.labels(self._service_name, method, path, status).inc()
            _REQUEST_LATENCY.labels(self._service_name, method, path).observe(
                time.perf_counter() - start
            )


def setup_metrics(app: FastAPI, *, service_name: str) -> None:
    """Attach the metrics middleware and expose ``/metrics``."""

    if getattr(app.state, "_metrics_configured", False):
        return

    app.add_middleware(MetricsMiddleware, service_name=service_name)

    async def metrics_endpoint() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.add_api_route(
        "/metrics",
        metrics_endpoint,
        methods=["GET"],
        include_in_schema=False,
        name="metrics",
    )
    app.state._metrics_configured = True
