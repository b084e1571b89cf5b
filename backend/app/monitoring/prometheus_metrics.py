"""
Prometheus metrics module for the trade platform.

Service timings come from the @measure_operation decorator; the domain
counters track how negotiations end (offers decided, rooms opened and
completed, messages posted).
"""

from threading import Lock
from time import monotonic
from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "tradeswap_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

service_operation_duration_seconds = Histogram(
    "tradeswap_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "tradeswap_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tradeswap_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

offers_decided_total = Counter(
    "tradeswap_offers_decided_total",
    "Offers moved out of pending",
    ["outcome", "reason"],
    registry=REGISTRY,
)

chat_rooms_opened_total = Counter(
    "tradeswap_chat_rooms_opened_total",
    "Chat rooms opened",
    ["source"],
    registry=REGISTRY,
)

chat_rooms_completed_total = Counter(
    "tradeswap_chat_rooms_completed_total",
    "Chat rooms marked complete",
    registry=REGISTRY,
)

chat_messages_total = Counter(
    "tradeswap_chat_messages_total",
    "Chat messages posted",
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    _cache_lock: Lock = Lock()
    _cache_payload: Optional[bytes] = None
    _cache_ts: Optional[float] = None
    _cache_ttl_seconds: float = 1.0

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        """Record HTTP request metrics."""
        http_request_duration_seconds.labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).observe(duration)
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'OfferNegotiationService')
            operation: Operation/method name (e.g., 'accept_offer')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        now = monotonic()
        payload = PrometheusMetrics._cache_payload
        ts = PrometheusMetrics._cache_ts

        if payload is not None and ts is not None and (now - ts) <= PrometheusMetrics._cache_ttl_seconds:
            return payload

        with PrometheusMetrics._cache_lock:
            PrometheusMetrics._cache_payload = cast(bytes, generate_latest(REGISTRY))
            PrometheusMetrics._cache_ts = monotonic()
            payload = PrometheusMetrics._cache_payload

        return cast(bytes, payload)

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)

    @staticmethod
    def _invalidate_cache() -> None:
        """Invalidate cached metrics so next scrape refreshes."""
        with PrometheusMetrics._cache_lock:
            PrometheusMetrics._cache_ts = None
            PrometheusMetrics._cache_payload = None

    # Domain helpers
    @staticmethod
    def inc_offer_decided(outcome: str, reason: str = "owner") -> None:
        """Count an offer leaving pending (outcome accepted|rejected, reason owner|superseded)."""
        offers_decided_total.labels(outcome=outcome, reason=reason).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_chat_room_opened(source: str) -> None:
        """Count a newly opened room (source offer|event_match)."""
        chat_rooms_opened_total.labels(source=source).inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_chat_room_completed() -> None:
        chat_rooms_completed_total.inc()
        PrometheusMetrics._invalidate_cache()

    @staticmethod
    def inc_chat_message() -> None:
        chat_messages_total.inc()
        PrometheusMetrics._invalidate_cache()


# Singleton instance
prometheus_metrics = PrometheusMetrics()
