"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"
    CLIENT = "client"  # provisioned externally, never by self-registration


@dataclass
class User:
    id: UUID
    email: str
    name: str
    role: Role
    company: str
    password_hash: str
    created_at: datetime


@dataclass
class Session:
    id: UUID
    user_id: UUID
    token_hash: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None

    def is_live(self, now: datetime) -> bool:
        return not self.revoked and now < self.expires_at


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    role: Role
    company: str
    token_id: str
    issued_at: datetime
    expires_at: datetime


@dataclass
class CurrentUser:
    """Identity resolved from a verified bearer token and its live session."""

    user_id: UUID
    role: Role
    company: str
    session_id: UUID
    expires_at: datetime
