"""Registration, login, logout and per-request session verification.

``AuthService`` is the only place that combines the credential store, the
password hasher, the token service and the session store. Within a flow every
store call is awaited before the next step starts, and a session is only ever
created after the credential has been created or verified.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from onsite_auth.auth.models import CurrentUser, Role, Session, User
from onsite_auth.auth.passwords import PasswordHasher
from onsite_auth.auth.schemas import LoginRequest, RegisterRequest
from onsite_auth.auth.store.base import CredentialStore, SessionStore
from onsite_auth.auth.tokens import TokenService
from onsite_auth.errors import (
    AuthenticationError,
    ConflictError,
    ExpiredTokenError,
    NotFoundError,
    Unauthorized,
)

log = structlog.get_logger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


def _now_utc() -> datetime:
    return datetime.now(UTC)


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise Unauthorized("No token provided")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Malformed Authorization header")
    return token


@dataclass
class AuthResult:
    user: User
    token: str
    session: Session


class AuthService:
    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionStore,
        tokens: TokenService,
        hasher: PasswordHasher,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _now_utc,
    ) -> None:
        self._credentials = credentials
        self._sessions = sessions
        self._tokens = tokens
        self._hasher = hasher
        self._session_ttl = session_ttl
        self._clock = clock

    async def register(self, request: RegisterRequest) -> AuthResult:
        """Create a user and its first session.

        The first user registered under a company becomes its admin, later
        ones become members. Two concurrent first registrations for the same
        company can both end up admin; email uniqueness is still enforced by
        the store.
        """
        if await self._credentials.get_by_email(request.email) is not None:
            raise ConflictError("Email already registered")

        existing = await self._credentials.count_by_company(request.company)
        role = Role.ADMIN if existing == 0 else Role.MEMBER

        password_hash = await asyncio.to_thread(self._hasher.hash, request.password)
        user = await self._credentials.create(
            email=request.email,
            name=request.full_name,
            role=role,
            company=request.company,
            password_hash=password_hash,
        )
        log.info("user_registered", user_id=str(user.id), role=role.value, company=user.company)

        return await self._start_session(user)

    async def login(self, request: LoginRequest) -> AuthResult:
        user = await self._credentials.get_by_email(request.email)
        if user is None:
            await asyncio.to_thread(self._hasher.verify_dummy, request.password)
            log.info("login_failed", reason="unknown_email")
            raise AuthenticationError()

        if not await asyncio.to_thread(self._hasher.verify, request.password, user.password_hash):
            log.info("login_failed", reason="bad_password", user_id=str(user.id))
            raise AuthenticationError()

        log.info("login_succeeded", user_id=str(user.id))
        return await self._start_session(user)

    async def authenticate(self, authorization: str | None) -> CurrentUser:
        """Resolve an Authorization header value to the identity behind a live session."""
        token = extract_bearer_token(authorization)
        try:
            claims = self._tokens.verify(token)
        except ExpiredTokenError:
            # exp is whole seconds, so it can fire before the row counts as expired.
            session = await self._sessions.find_by_token(token)
            if session is not None:
                await self._sessions.delete(session.id)
                log.info("session_rejected", reason="expired", session_id=str(session.id))
            raise

        session = await self._sessions.find_by_token(token)
        if session is None or session.user_id != claims.user_id:
            log.info("session_rejected", reason="not_found", user_id=str(claims.user_id))
            raise Unauthorized("Session not found")

        if not session.is_live(self._clock()):
            await self._sessions.delete(session.id)
            reason = "revoked" if session.revoked else "expired"
            log.info("session_rejected", reason=reason, session_id=str(session.id))
            raise Unauthorized(f"Session {reason}")

        return CurrentUser(
            user_id=session.user_id,
            role=claims.role,
            company=claims.company,
            session_id=session.id,
            expires_at=session.expires_at,
        )

    async def logout(self, authorization: str | None) -> None:
        await self.authenticate(authorization)
        token = extract_bearer_token(authorization)
        await self._sessions.revoke(token)
        log.info("session_revoked")

    async def logout_all(self, identity: CurrentUser) -> int:
        revoked = await self._sessions.revoke_all_for_user(identity.user_id)
        log.info("sessions_revoked", user_id=str(identity.user_id), count=revoked)
        return revoked

    async def get_me(self, identity: CurrentUser) -> User:
        user = await self._credentials.get_by_id(identity.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def purge_expired_sessions(self) -> int:
        purged = await self._sessions.purge_expired(self._clock())
        if purged:
            log.info("sessions_purged", count=purged)
        return purged

    async def _start_session(self, user: User) -> AuthResult:
        now = self._clock()
        token, _expires_at = self._tokens.mint(
            user_id=user.id,
            role=user.role,
            company=user.company,
            ttl=self._session_ttl,
            now=now,
        )
        session = await self._sessions.create(
            user_id=user.id, token=token, ttl=self._session_ttl, issued_at=now
        )
        return AuthResult(user=user, token=token, session=session)
