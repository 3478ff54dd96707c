"""Tests for health, metrics and correlation endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from catalog.cache.runtime import CacheRuntime


@pytest.fixture
def database_up(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    probe = AsyncMock(return_value=True)
    monkeypatch.setattr("catalog.api.routers.health.db_health_check", probe)
    return probe


class TestHealth:
    """Test health probes."""

    def test_liveness(self, client: TestClient) -> None:
        """Liveness never checks dependencies."""
        assert client.get("/health/live").json() == {"status": "ok"}

    def test_all_healthy(self, client: TestClient, database_up: AsyncMock) -> None:
        """Database and cache up is healthy."""
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "up"
        assert body["checks"]["cache"]["status"] == "up"

    def test_cache_down_is_degraded_but_ready(
        self,
        client: TestClient,
        database_up: AsyncMock,
        cache_runtime: CacheRuntime,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """The API keeps serving without its cache."""
        monkeypatch.setattr(cache_runtime.store, "health_check", AsyncMock(return_value=False))

        health = client.get("/health")
        ready = client.get("/health/ready")

        assert health.status_code == 200
        assert health.json()["status"] == "degraded"
        assert ready.status_code == 200
        assert ready.json() == {"status": "ready", "database": "up", "cache": "down"}

    def test_database_down_is_not_ready(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without a database the service is unhealthy."""
        monkeypatch.setattr(
            "catalog.api.routers.health.db_health_check", AsyncMock(return_value=False)
        )

        assert client.get("/health").status_code == 503
        ready = client.get("/health/ready")
        assert ready.status_code == 503
        assert ready.json()["status"] == "not_ready"

    def test_database_probe_exception(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A raising probe counts as down and reports its message."""
        monkeypatch.setattr(
            "catalog.api.routers.health.db_health_check",
            AsyncMock(side_effect=RuntimeError("pool exhausted")),
        )
        body = client.get("/health").json()
        assert body["checks"]["database"]["message"] == "pool exhausted"


class TestMetricsEndpoint:
    """Test Prometheus exposition."""

    def test_metrics_include_cache_counters(self, client: TestClient) -> None:
        """Cache hits and misses show up in /metrics."""
        client.get("/api/products/1")
        client.get("/api/products/1")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "catalog_cache_hits_total" in response.text
        assert "catalog_cache_misses_total" in response.text


class TestCorrelation:
    """Test correlation headers."""

    def test_request_id_is_generated(self, client: TestClient) -> None:
        """Responses always carry a request id."""
        response = client.get("/health/live")
        assert response.headers["x-request-id"]
        assert response.headers["x-correlation-id"] == response.headers["x-request-id"]

    def test_incoming_ids_are_echoed(self, client: TestClient) -> None:
        """Caller-provided ids are passed through."""
        response = client.get(
            "/health/live", headers={"x-request-id": "req-1", "x-correlation-id": "corr-1"}
        )
        assert response.headers["x-request-id"] == "req-1"
        assert response.headers["x-correlation-id"] == "corr-1"
