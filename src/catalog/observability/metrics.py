"""Prometheus metrics for the catalog API.

Provides metrics collection and exposure:
- HTTP request metrics (latency, count) labelled with cache status
- Cache metrics (hits, misses per category, transport errors, latency)
- Invalidation fan-out outcomes

Usage:
    from catalog.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.cache_hits_total.labels(category="product").inc()
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from catalog.config import settings

if TYPE_CHECKING:
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

_PRODUCT_ID_RE = re.compile(r"/api/products/\d+")


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    # HTTP metrics
    http_requests_total: Any = None
    http_request_duration_seconds: Any = None

    # Cache metrics
    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_errors_total: Any = None
    cache_operation_duration_seconds: Any = None
    cache_invalidations_total: Any = None

    # Internal state
    _initialized: bool = field(default=False, repr=False)
    _registry: CollectorRegistry | None = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = CollectorRegistry()

        self.http_requests_total = Counter(
            "catalog_http_requests_total",
            "Total HTTP requests",
            ["method", "route", "status", "cache_status"],
            registry=self._registry,
        )

        self.http_request_duration_seconds = Histogram(
            "catalog_http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route", "cache_status"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.3, 0.5, 1.0, 3.0),
            registry=self._registry,
        )

        self.cache_hits_total = Counter(
            "catalog_cache_hits_total",
            "Cache hits",
            ["category"],
            registry=self._registry,
        )

        self.cache_misses_total = Counter(
            "catalog_cache_misses_total",
            "Cache misses",
            ["category"],
            registry=self._registry,
        )

        self.cache_errors_total = Counter(
            "catalog_cache_errors_total",
            "Cache store failures absorbed by the fail-open policy",
            ["operation", "backend"],
            registry=self._registry,
        )

        self.cache_operation_duration_seconds = Histogram(
            "catalog_cache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation", "backend"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.25, 0.5),
            registry=self._registry,
        )

        self.cache_invalidations_total = Counter(
            "catalog_cache_invalidations_total",
            "Cache invalidations by category and outcome",
            ["category", "outcome"],
            registry=self._registry,
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def normalize_route(path: str) -> str:
    """Replace product ids with a placeholder to keep label cardinality low.

    Examples:
        /api/products/42 -> /api/products/:id
        /api/products/categories -> /api/products/categories
    """
    return _PRODUCT_ID_RE.sub("/api/products/:id", path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for HTTP request metrics.

    The cache_status label comes from the X-Cache response header set by
    cached read endpoints ("hit"/"miss"); other responses use "none".
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.metrics = get_metrics()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Record metrics for HTTP requests."""
        # Skip metrics for health and metrics endpoints
        if request.url.path.startswith("/health") or request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        route = normalize_route(request.url.path)
        start_time = time.perf_counter()
        status_code = 500  # Default in case of exception
        cache_status = "none"

        try:
            response = await call_next(request)
            status_code = response.status_code
            cache_status = response.headers.get("x-cache", "none").lower()
            return response
        finally:
            duration = time.perf_counter() - start_time

            if self.metrics.http_requests_total:
                self.metrics.http_requests_total.labels(
                    method=method,
                    route=route,
                    status=status_code,
                    cache_status=cache_status,
                ).inc()

            if self.metrics.http_request_duration_seconds:
                self.metrics.http_request_duration_seconds.labels(
                    method=method,
                    route=route,
                    cache_status=cache_status,
                ).observe(duration)


def record_cache_hit(category: str) -> None:
    """Record cache hit."""
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(category=category).inc()


def record_cache_miss(category: str) -> None:
    """Record cache miss."""
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(category=category).inc()


def record_cache_error(operation: str, backend: str = "redis") -> None:
    """Record a cache failure that was absorbed instead of raised."""
    metrics = get_metrics()
    if metrics.cache_errors_total:
        metrics.cache_errors_total.labels(operation=operation, backend=backend).inc()


def record_cache_operation(operation: str, duration: float, backend: str = "redis") -> None:
    """Record cache operation duration.

    Args:
        operation: Cache operation (get, set, delete, scan, ...)
        duration: Operation duration in seconds
        backend: Store backend (redis, memory)
    """
    metrics = get_metrics()
    if metrics.cache_operation_duration_seconds:
        metrics.cache_operation_duration_seconds.labels(
            operation=operation,
            backend=backend,
        ).observe(duration)


def record_invalidation(category: str, ok: bool) -> None:
    """Record one branch of an invalidation fan-out."""
    metrics = get_metrics()
    if metrics.cache_invalidations_total:
        metrics.cache_invalidations_total.labels(
            category=category,
            outcome="ok" if ok else "failed",
        ).inc()
