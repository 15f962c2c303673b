"""Pydantic request/response models for REST API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from onsite_auth.auth.models import User


class UserSchema(BaseModel):
    id: str
    email: str
    name: str
    role: str
    company: str
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> UserSchema:
        """Public fields only; the password hash never leaves the service."""
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role.value,
            company=user.company,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    user: UserSchema
    token: str


class MeResponse(BaseModel):
    user: UserSchema


class LogoutAllResponse(BaseModel):
    revoked: int


class ErrorResponse(BaseModel):
    error: str
    message: str
