"""Prometheus instruments for HTTP traffic and the write pipeline."""

from __future__ import annotations

import time
from collections.abc import Callable

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_COUNTER = Counter(
    "scribe_request_total",
    "HTTP requests by route template and status",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "scribe_request_duration_seconds",
    "HTTP request latency by route template",
    ["method", "path"],
)
PIPELINE_REJECTIONS = Counter(
    "scribe_pipeline_rejection_total",
    "Pipeline operations that ended in an API error",
    ["operation", "status_code"],
)
SLUG_FALLBACKS = Counter(
    "scribe_slug_fallback_total",
    "Slugs that fell back to a random suffix after exhausting numbered probes",
)


def _route_template(request: Request) -> str:
    # Templates keep label cardinality bounded; unmatched paths share one label.
    route = request.scope.get("route")
    return getattr(route, "path", "<unmatched>")


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            path = _route_template(request)
            REQUEST_COUNTER.labels(request.method, path, status_code).inc()
            REQUEST_LATENCY.labels(request.method, path).observe(
                time.perf_counter() - start
            )


def metrics_response() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
