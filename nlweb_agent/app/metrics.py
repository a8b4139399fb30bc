from __future__ import annotations

"""Prometheus instrumentation for the HTTP layer and the query pipeline."""

import logging
import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
import psutil
from starlette.responses import Response

from nlweb_agent.app.settings import settings

logger = logging.getLogger(__name__)

UNMATCHED_ROUTE = "unmatched"

HTTP_REQUESTS = Counter(
    "nlweb_http_requests_total",
    "HTTP requests by route template and status",
    ["method", "route", "status"],
)
HTTP_LATENCY = Histogram(
    "nlweb_http_request_duration_seconds",
    "HTTP request duration by route template",
    ["method", "route"],
)
QUERY_OUTCOMES = Counter(
    "nlweb_query_outcomes_total",
    "Query pipeline outcomes by error kind",
    ["outcome"],
)
INDEXED_DOCUMENTS = Gauge(
    "nlweb_indexed_documents",
    "Documents currently held by the content index",
)
HOST_MEMORY_PERCENT = Gauge(
    "nlweb_host_memory_usage_percent",
    "Host memory in use, excluding reclaimable cache",
)
HOST_CPU_PERCENT = Gauge(
    "nlweb_host_cpu_usage_percent",
    "Host CPU utilisation since the previous scrape",
)


def route_label(request: Request) -> str:
    """Label by the matched route template so path parameters do not fan out."""
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template or UNMATCHED_ROUTE


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled or request.url.path == "/metrics":
        return await call_next(request)
    start = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        route = route_label(request)
        HTTP_REQUESTS.labels(request.method, route, str(status)).inc()
        HTTP_LATENCY.labels(request.method, route).observe(time.perf_counter() - start)


def record_query_outcome(outcome: str) -> None:
    QUERY_OUTCOMES.labels(outcome).inc()


def refresh_gauges(indexed_documents: int) -> None:
    """Sample index size and host resources at scrape time."""
    INDEXED_DOCUMENTS.set(indexed_documents)
    try:
        HOST_MEMORY_PERCENT.set(psutil.virtual_memory().percent)
        HOST_CPU_PERCENT.set(psutil.cpu_percent(interval=None))
    except (OSError, psutil.Error) as exc:
        logger.warning("resource_metrics_failed", extra={"detail": type(exc).__name__})


def metrics_response(indexed_documents: int) -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    refresh_gauges(indexed_documents)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
