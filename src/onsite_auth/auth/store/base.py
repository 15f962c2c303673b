"""Protocols for pluggable credential and session storage backends."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from onsite_auth.auth.models import Role, Session, User


def token_digest(token: str) -> str:
    """SHA-256 hex digest used to index sessions; raw tokens are never stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class CredentialStore(Protocol):
    """Backend interface for user records.

    ``create`` must enforce email uniqueness itself and raise ``ConflictError``
    when it loses a race against a concurrent registration.
    """

    async def create(
        self, email: str, name: str, role: Role, company: str, password_hash: str
    ) -> User: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def get_by_id(self, user_id: UUID) -> User | None: ...
    async def count_by_company(self, company: str) -> int: ...


class SessionStore(Protocol):
    """Backend interface for issued sessions."""

    async def create(
        self, user_id: UUID, token: str, ttl: timedelta, issued_at: datetime | None = None
    ) -> Session: ...
    async def find_by_token(self, token: str) -> Session | None: ...
    async def revoke(self, token: str) -> None: ...
    async def revoke_all_for_user(self, user_id: UUID) -> int: ...
    async def delete(self, session_id: UUID) -> None: ...
    async def purge_expired(self, now: datetime) -> int: ...
