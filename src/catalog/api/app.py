"""FastAPI application factory for the catalog API.

Creates the application with:
- Product catalog router (/api/products) backed by the cache-aside layer
- Health probes and Prometheus metrics
- Lifecycle management for the database pool and the cache runtime
- Uniform JSON error bodies
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from catalog.api.errors import EXCEPTION_HANDLERS
from catalog.api.middleware import CorrelationMiddleware
from catalog.api.routers import health, products
from catalog.api.routers import metrics as metrics_router
from catalog.cache.runtime import build_cache_runtime
from catalog.config import CacheConfig, settings
from catalog.observability import configure_logging
from catalog.observability.metrics import MetricsMiddleware, get_metrics
from catalog.persistence.db import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Initialize Prometheus metrics
    - Create database tables and the connection pool
    - Build the cache runtime and store it on app.state

    On shutdown:
    - Close the cache store
    - Close database connections
    """
    configure_logging(json_format=settings.env != "dev", level=settings.log_level)
    get_metrics()

    logger.info("Starting %s (%s)", settings.app_name, settings.env)
    await init_db()
    app.state.cache = build_cache_runtime(CacheConfig.from_settings(settings))
    logger.info("%s startup complete", settings.app_name)

    yield

    logger.info("Shutting down %s", settings.app_name)
    await app.state.cache.close()
    await close_db()
    logger.info("%s shutdown complete", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Catalog API",
        description="Product catalog with a Redis cache-aside layer",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CorrelationMiddleware is innermost so every log line carries the IDs
    app.add_middleware(CorrelationMiddleware)
    if settings.enable_metrics:
        app.add_middleware(MetricsMiddleware)

    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))

    app.include_router(health.router)
    if settings.enable_metrics:
        app.include_router(metrics_router.router)
    app.include_router(products.router)

    return app
