"""SQL implementations of the credential and session stores."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from sqlalchemy.exc import SQLAlchemyError

from onsite_auth.errors import InternalError

log = structlog.get_logger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat every stored timestamp as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver failures and timeouts into InternalError."""
    try:
        yield
    except (SQLAlchemyError, asyncio.TimeoutError, OSError) as exc:
        log.error("store_error", operation=operation, error_type=type(exc).__name__)
        raise InternalError("Storage is temporarily unavailable") from exc
