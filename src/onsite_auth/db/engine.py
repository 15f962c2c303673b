"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from onsite_auth.db.models import Base
from onsite_auth.settings import get_settings

log = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db(database_url: str | None = None) -> None:
    global _engine, _session_factory
    settings = get_settings()
    url = database_url or settings.database_url
    options: dict = {"echo": False}
    if not url.startswith("sqlite"):
        options.update(pool_size=10, pool_timeout=settings.db_pool_timeout_seconds)
    _engine = create_async_engine(url, **options)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)
    log.info("db_initialized", dialect=_engine.dialect.name)


async def create_schema() -> None:
    """Create any missing tables. Intended for development and sqlite deployments."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db_schema_created")


async def close_db() -> None:
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
    _engine = None
    _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
