"""
Prometheus metrics middleware for HTTP request tracking.

This middleware integrates with the prometheus_metrics module to
track HTTP request duration and status codes.
"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

_ULID_SEGMENT = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")


def normalize_endpoint(raw_path: str) -> str:
    """
    Collapse identifier segments to keep label cardinality bounded.

    Example: /api/v1/posts/01HX.../offers -> /api/v1/posts/:id/offers
    """
    return "/".join(
        ":id" if segment.isdigit() or _ULID_SEGMENT.match(segment) else segment
        for segment in raw_path.split("/")
    )


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip metrics collection for the metrics endpoint itself
        if request.url.path == "/metrics/prometheus":
            return await call_next(request)

        method = request.method
        path = normalize_endpoint(request.url.path)

        start_time = time.time()
        response = await call_next(request)
        prometheus_metrics.record_http_request(
            method=method,
            endpoint=path,
            duration=time.time() - start_time,
            status_code=response.status_code,
        )
        return response
