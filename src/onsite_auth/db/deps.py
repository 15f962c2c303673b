"""FastAPI dependency injection for database sessions and stores."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from onsite_auth.auth.store.base import CredentialStore, SessionStore
from onsite_auth.db.engine import get_session_factory
from onsite_auth.db.repositories.sessions import SqlSessionStore
from onsite_auth.db.repositories.users import SqlCredentialStore


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session, auto-closing on exit."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_credential_store(session: SessionDep) -> CredentialStore:
    return SqlCredentialStore(session)


def get_session_store(session: SessionDep) -> SessionStore:
    return SqlSessionStore(session)


CredentialStoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
