"""JWT token creation and verification.

Every bearer token issued by the service is an HS256 JWT signed with the
server secret. Verification fails closed: anything other than a pristine,
unexpired, correctly signed access token raises ``InvalidTokenError``.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.utils import base64url_decode, base64url_encode

from onsite_auth.auth.models import Role, TokenClaims
from onsite_auth.errors import ExpiredTokenError, InvalidTokenError

_TOKEN_TYPE = "access"
_REQUIRED_CLAIMS = ["sub", "jti", "iat", "exp", "type"]


def _now_utc() -> datetime:
    return datetime.now(UTC)


def _is_canonical_segment(segment: str) -> bool:
    # base64url decoding ignores stray characters and unused trailing bits,
    # so a flipped bit can decode to identical bytes. Re-encoding catches it.
    try:
        return base64url_encode(base64url_decode(segment)).decode("ascii") == segment
    except (ValueError, UnicodeError):
        return False


class TokenService:
    """Sole authority for minting and verifying bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    def mint(
        self,
        user_id: UUID,
        role: Role,
        company: str,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> tuple[str, datetime]:
        """Create a signed access token. Returns (token, expires_at)."""
        issued_at = now or _now_utc()
        expires_at = issued_at + ttl
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "company": company,
            "jti": secrets.token_hex(16),
            "iat": issued_at,
            "exp": expires_at,
            "type": _TOKEN_TYPE,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, expires_at

    def verify(self, token: str) -> TokenClaims:
        """Check signature, structure and expiry. Raises InvalidTokenError on any failure."""
        segments = token.split(".")
        if len(segments) != 3 or not all(_is_canonical_segment(s) for s in segments):
            raise InvalidTokenError()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != _TOKEN_TYPE:
            raise InvalidTokenError("Not an access token")

        try:
            return TokenClaims(
                user_id=UUID(payload["sub"]),
                role=Role(payload["role"]),
                company=str(payload["company"]),
                token_id=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed token payload") from exc
