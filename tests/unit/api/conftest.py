"""Fixtures for API tests.

The app is created without running its lifespan: the cache runtime is put
on app.state directly and the catalog service is overridden so no database
is needed.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog.api.app import create_app
from catalog.api.deps import get_catalog_service
from catalog.cache.runtime import CacheRuntime
from catalog.services.catalog import CatalogService

LAMP = {
    "id": 1,
    "name": "desk lamp",
    "description": None,
    "category": "lighting",
    "price": 25.0,
    "stock": 10,
    "image_url": None,
    "created_at": "2026-01-10T12:00:00",
    "updated_at": "2026-01-10T12:00:00",
}


@pytest.fixture
def products() -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_id.return_value = dict(LAMP)
    repo.find_all.return_value = [dict(LAMP)]
    repo.count.return_value = 1
    repo.distinct_categories.return_value = ["lighting"]
    repo.create.return_value = {**LAMP, "id": 2}
    repo.update.return_value = {**LAMP, "price": 30.0}
    repo.delete.return_value = dict(LAMP)
    return repo


@pytest.fixture
def app(cache_runtime: CacheRuntime, products: AsyncMock) -> FastAPI:
    app = create_app()
    app.state.cache = cache_runtime
    app.dependency_overrides[get_catalog_service] = lambda: CatalogService(
        cache_runtime, products
    )
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)
