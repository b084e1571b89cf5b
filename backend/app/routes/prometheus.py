"""
Prometheus metrics endpoint for monitoring infrastructure.

This is a PUBLIC endpoint (no authentication required) following
standard Prometheus practices. It exposes metrics collected from
the @measure_operation decorators throughout the application.
"""

from fastapi import APIRouter, Response
from prometheus_client import Counter

from ..monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

router = APIRouter(prefix="/metrics", tags=["monitoring"])

_scrape_counter = Counter(
    "tradeswap_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get("/prometheus", include_in_schema=False)
async def get_prometheus_metrics() -> Response:
    """Expose metrics in Prometheus text format."""
    _scrape_counter.inc()
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
