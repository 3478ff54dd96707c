"""Fixtures for persistence tests backed by in-memory SQLite."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog.persistence.repositories import ProductRepository
from catalog.persistence.tables import Base


@pytest_asyncio.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def repository(db_session: AsyncSession) -> ProductRepository:
    repo = ProductRepository(db_session)
    for data in (
        {"name": "Desk Lamp", "category": "Lighting", "price": 25.0, "stock": 10,
         "description": "LED lamp with dimmer"},
        {"name": "Floor Lamp", "category": "lighting", "price": 80.0, "stock": 0},
        {"name": "Notebook", "category": "Stationery", "price": 4.5, "stock": 200,
         "description": "100% recycled paper"},
        {"name": "Fountain Pen", "category": "stationery", "price": 45.0, "stock": 3},
    ):
        await repo.create(data)
    await repo.commit()
    return repo
