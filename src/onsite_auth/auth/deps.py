"""FastAPI auth dependencies."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends, Request

from onsite_auth.auth.models import CurrentUser, Role
from onsite_auth.auth.passwords import PasswordHasher
from onsite_auth.auth.service import AuthService
from onsite_auth.auth.tokens import TokenService
from onsite_auth.db.deps import CredentialStoreDep, SessionStoreDep
from onsite_auth.errors import ForbiddenError
from onsite_auth.settings import get_settings


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, algorithm=settings.jwt_algorithm)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
PasswordHasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]


def get_auth_service(
    credentials: CredentialStoreDep,
    sessions: SessionStoreDep,
    tokens: TokenServiceDep,
    hasher: PasswordHasherDep,
) -> AuthService:
    ttl = timedelta(hours=get_settings().session_ttl_hours)
    return AuthService(credentials, sessions, tokens, hasher, session_ttl=ttl)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


async def get_current_user(request: Request, service: AuthServiceDep) -> CurrentUser:
    """
    Resolve the current authenticated user from the Bearer token.

    The identity is stored on ``request.state.current_user`` and its user id is
    bound into the structlog context for the rest of the request.
    """
    current_user = await service.authenticate(request.headers.get("Authorization"))
    request.state.current_user = current_user
    structlog.contextvars.bind_contextvars(user_id=str(current_user.user_id))
    return current_user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_role(*roles: Role | str):
    """Dependency factory that enforces role membership."""
    allowed = {Role(r) for r in roles}

    async def _check(current_user: CurrentUserDep) -> CurrentUser:
        if current_user.role not in allowed:
            raise ForbiddenError(
                f"Role '{current_user.role.value}' is not permitted. "
                f"Required: {sorted(r.value for r in allowed)}"
            )
        return current_user

    return Depends(_check)
