"""Repository for user credential records."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from onsite_auth.auth.models import Role, User
from onsite_auth.db.models import UserModel
from onsite_auth.db.repositories import as_utc, store_errors
from onsite_auth.errors import ConflictError


def _row_to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        role=Role(row.role),
        company=row.company,
        password_hash=row.password_hash,
        created_at=as_utc(row.created_at),
    )


class SqlCredentialStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, email: str, name: str, role: Role, company: str, password_hash: str
    ) -> User:
        """Insert a user; the unique email index turns a lost race into ConflictError."""
        user = UserModel(
            email=email.lower(),
            name=name,
            role=Role(role).value,
            company=company,
            password_hash=password_hash,
        )
        async with store_errors("create_user"):
            self._session.add(user)
            try:
                await self._session.commit()
            except IntegrityError as exc:
                await self._session.rollback()
                raise ConflictError("Email already registered") from exc
            await self._session.refresh(user)
        return _row_to_user(user)

    async def get_by_email(self, email: str) -> User | None:
        async with store_errors("get_user_by_email"):
            result = await self._session.execute(
                select(UserModel).where(UserModel.email == email.lower())
            )
            row = result.scalars().first()
        return _row_to_user(row) if row else None

    async def get_by_id(self, user_id: UUID) -> User | None:
        async with store_errors("get_user_by_id"):
            row = await self._session.get(UserModel, user_id)
        return _row_to_user(row) if row else None

    async def count_by_company(self, company: str) -> int:
        async with store_errors("count_users_by_company"):
            result = await self._session.execute(
                select(func.count())
                .select_from(UserModel)
                .where(func.lower(UserModel.company) == company.strip().lower())
            )
            return result.scalar_one()
