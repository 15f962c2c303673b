"""Repository for issued bearer sessions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from onsite_auth.auth.models import Session
from onsite_auth.auth.store.base import token_digest
from onsite_auth.db.models import SessionModel
from onsite_auth.db.repositories import as_utc, store_errors


def _row_to_session(row: SessionModel) -> Session:
    return Session(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        revoked_at=as_utc(row.revoked_at) if row.revoked_at else None,
    )


class SqlSessionStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, user_id: UUID, token: str, ttl: timedelta, issued_at: datetime | None = None
    ) -> Session:
        issued = issued_at or datetime.now(UTC)
        row = SessionModel(
            user_id=user_id,
            token_hash=token_digest(token),
            issued_at=issued,
            expires_at=issued + ttl,
        )
        async with store_errors("create_session"):
            self._session.add(row)
            await self._session.commit()
        return Session(
            id=row.id,
            user_id=user_id,
            token_hash=row.token_hash,
            issued_at=issued,
            expires_at=issued + ttl,
        )

    async def find_by_token(self, token: str) -> Session | None:
        async with store_errors("find_session"):
            result = await self._session.execute(
                select(SessionModel)
                .where(SessionModel.token_hash == token_digest(token))
                .execution_options(populate_existing=True)
            )
            row = result.scalars().first()
        return _row_to_session(row) if row else None

    async def revoke(self, token: str) -> None:
        async with store_errors("revoke_session"):
            await self._session.execute(
                update(SessionModel)
                .where(
                    SessionModel.token_hash == token_digest(token),
                    SessionModel.revoked_at.is_(None),
                )
                .values(revoked_at=datetime.now(UTC))
                .execution_options(synchronize_session=False)
            )
            await self._session.commit()

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        async with store_errors("revoke_user_sessions"):
            result = await self._session.execute(
                update(SessionModel)
                .where(SessionModel.user_id == user_id, SessionModel.revoked_at.is_(None))
                .values(revoked_at=datetime.now(UTC))
                .execution_options(synchronize_session=False)
            )
            await self._session.commit()
        return result.rowcount

    async def delete(self, session_id: UUID) -> None:
        async with store_errors("delete_session"):
            await self._session.execute(
                delete(SessionModel)
                .where(SessionModel.id == session_id)
                .execution_options(synchronize_session=False)
            )
            await self._session.commit()

    async def purge_expired(self, now: datetime) -> int:
        async with store_errors("purge_sessions"):
            result = await self._session.execute(
                delete(SessionModel)
                .where(or_(SessionModel.expires_at <= now, SessionModel.revoked_at.is_not(None)))
                .execution_options(synchronize_session=False)
            )
            await self._session.commit()
        return result.rowcount
