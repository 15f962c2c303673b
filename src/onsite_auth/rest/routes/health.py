"""Liveness and readiness probes. Both are public."""

from fastapi import APIRouter
from sqlalchemy import text

from onsite_auth.db.deps import SessionDep
from onsite_auth.db.repositories import store_errors

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(session: SessionDep) -> dict[str, str]:
    """Ready once the users and sessions database answers a trivial query."""
    async with store_errors("readiness_check"):
        await session.execute(text("SELECT 1"))
    return {"status": "ready", "database": "ok"}
