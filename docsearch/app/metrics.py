from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from docsearch.app.settings import settings

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
SEARCH_OUTCOMES = Counter(
    "docsearch_searches_total",
    "Search requests by outcome",
    ["outcome"],
)
SEARCH_SOURCES = Histogram(
    "docsearch_search_sources",
    "Number of sources attached to answered searches",
    buckets=(0, 1, 2, 3, 4, 5),
)


def record_search(outcome: str, sources: int | None = None) -> None:
    if not settings.metrics_enabled:
        return
    SEARCH_OUTCOMES.labels(outcome).inc()
    if sources is not None:
        SEARCH_SOURCES.observe(sources)


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled:
        return await call_next(request)
    path = request.url.path
    if path == "/metrics":
        return await call_next(request)
    route = request.scope.get("route")
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        route = request.scope.get("route", route)
        return response
    finally:
        label = getattr(route, "path", path)
        duration = time.monotonic() - start
        REQUEST_COUNT.labels(request.method, label, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, label).observe(duration)


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
