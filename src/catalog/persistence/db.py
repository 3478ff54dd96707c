"""Database engine and sessions for the catalog API.

Sessions come in two lifetimes:
- request sessions (get_session) belong to one HTTP request and are closed
  by FastAPI when the request finishes; product writes run on these
- standalone sessions (standalone_session) are opened around a single unit
  of work, such as a cache fill that several requests may be waiting on,
  and never depend on the request that started the work
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.config import Settings, settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(config: Settings) -> dict[str, Any]:
    """Keyword arguments for create_async_engine.

    Pool sizing only applies to server databases; SQLite (local runs and
    tests) keeps the driver's default pool.
    """
    options: dict[str, Any] = {"pool_pre_ping": True}
    if make_url(config.database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
            pool_recycle=config.db_pool_recycle,
        )
    return options


def get_engine() -> AsyncEngine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(settings.database_url, **engine_options(settings))
        logger.info("Database engine created (%s)", make_url(settings.database_url).drivername)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        # Rows are turned into dicts before commit, but keep them loaded anyway
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request session for FastAPI dependency injection."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        await session.close()


@asynccontextmanager
async def standalone_session() -> AsyncIterator[AsyncSession]:
    """Session owned by the enclosing block rather than by a request.

    Nothing is committed; the session is closed (rolling back anything
    pending) when the block exits, including on cancellation.
    """
    async with get_session_factory()() as session:
        yield session


async def init_db() -> None:
    """Create the products table and its indexes if they don't exist."""
    from catalog.persistence.tables import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine; the next get_engine() call builds a new one."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def health_check() -> bool:
    """Run SELECT 1 on a standalone session.

    Connection errors propagate so the health endpoint can report them.
    """
    async with standalone_session() as session:
        await session.execute(text("SELECT 1"))
    return True
