"""In-memory credential and session stores for testing and development."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from uuid import UUID

from onsite_auth.auth.models import Role, Session, User
from onsite_auth.auth.store.base import token_digest
from onsite_auth.errors import ConflictError


class InMemoryCredentialStore:
    """Dict-backed user store keyed by lower-cased email."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def create(
        self, email: str, name: str, role: Role, company: str, password_hash: str
    ) -> User:
        key = email.lower()
        if key in self._users:
            raise ConflictError("Email already registered")
        user = User(
            id=uuid.uuid4(),
            email=key,
            name=name,
            role=role,
            company=company,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self._users[key] = user
        return user

    async def get_by_email(self, email: str) -> User | None:
        return self._users.get(email.lower())

    async def get_by_id(self, user_id: UUID) -> User | None:
        return next((u for u in self._users.values() if u.id == user_id), None)

    async def count_by_company(self, company: str) -> int:
        wanted = company.strip().lower()
        return sum(1 for u in self._users.values() if u.company.strip().lower() == wanted)


class InMemorySessionStore:
    """Dict-backed session store keyed by token digest."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def create(
        self, user_id: UUID, token: str, ttl: timedelta, issued_at: datetime | None = None
    ) -> Session:
        issued = issued_at or datetime.now(UTC)
        session = Session(
            id=uuid.uuid4(),
            user_id=user_id,
            token_hash=token_digest(token),
            issued_at=issued,
            expires_at=issued + ttl,
        )
        self._sessions[session.token_hash] = session
        return session

    async def find_by_token(self, token: str) -> Session | None:
        return self._sessions.get(token_digest(token))

    async def revoke(self, token: str) -> None:
        session = self._sessions.get(token_digest(token))
        if session is not None and session.revoked_at is None:
            session.revoked_at = datetime.now(UTC)

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        now = datetime.now(UTC)
        revoked = 0
        for session in self._sessions.values():
            if session.user_id == user_id and session.revoked_at is None:
                session.revoked_at = now
                revoked += 1
        return revoked

    async def delete(self, session_id: UUID) -> None:
        self._sessions = {k: s for k, s in self._sessions.items() if s.id != session_id}

    async def purge_expired(self, now: datetime) -> int:
        before = len(self._sessions)
        self._sessions = {k: s for k, s in self._sessions.items() if s.is_live(now)}
        return before - len(self._sessions)
