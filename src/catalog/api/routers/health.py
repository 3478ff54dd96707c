"""Health check endpoints for the catalog API.

- /health       - Full report for external checks
- /health/live  - Liveness probe (always OK while the process runs)
- /health/ready - Readiness probe (database required, cache optional)

The cache fails open, so an unreachable cache degrades the service but
never makes it unready.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from catalog.persistence.db import health_check as db_health_check

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 5.0


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    healthy: bool
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": "up" if self.healthy else "down",
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def _check(name: str, probe: Callable[[], Awaitable[bool]]) -> ComponentHealth:
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(probe(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy, message = False, f"{name} check timed out"
    except Exception as e:
        healthy, message = False, str(e)
    return ComponentHealth(
        name=name,
        healthy=healthy,
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


async def check_database() -> ComponentHealth:
    return await _check("database", db_health_check)


async def check_cache(request: Request) -> ComponentHealth:
    return await _check("cache", request.app.state.cache.store.health_check)


def overall_status(database: ComponentHealth, cache: ComponentHealth) -> HealthStatus:
    if not database.healthy:
        return HealthStatus.UNHEALTHY
    if not cache.healthy:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


@router.get("/health")
async def full_health(request: Request) -> JSONResponse:
    """Full health report.

    Returns 200 unless the database is down.
    """
    database, cache = await asyncio.gather(check_database(), check_cache(request))
    status = overall_status(database, cache)
    return JSONResponse(
        content={
            "status": status.value,
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {c.name: c.to_dict() for c in (database, cache)},
        },
        status_code=503 if status == HealthStatus.UNHEALTHY else 200,
    )


@router.get("/health/live")
async def liveness() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness(request: Request) -> JSONResponse:
    """Readiness probe."""
    database, cache = await asyncio.gather(check_database(), check_cache(request))
    status = overall_status(database, cache)
    return JSONResponse(
        content={
            "status": "not_ready" if status == HealthStatus.UNHEALTHY else "ready",
            "database": "up" if database.healthy else "down",
            "cache": "up" if cache.healthy else "down",
        },
        status_code=503 if status == HealthStatus.UNHEALTHY else 200,
    )
