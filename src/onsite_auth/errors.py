"""Error taxonomy shared by the auth flows, the stores and the REST layer.

Every error carries a stable machine-readable ``kind`` and an HTTP status so
the REST layer can render ``{"error": kind, "message": message}`` without
knowing which flow raised it.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error the auth core reports to callers."""

    kind = "internal_error"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class ValidationError(AuthError):
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AuthError):
    """Bad credentials. The message is always generic to avoid account enumeration."""

    kind = "authentication_error"
    status_code = 401
    default_message = "Invalid email or password"


class ConflictError(AuthError):
    kind = "conflict"
    status_code = 409
    default_message = "Resource already exists"


class Unauthorized(AuthError):
    """Missing, invalid, expired or revoked bearer token."""

    kind = "unauthorized"
    status_code = 401
    default_message = "Authentication required"


class InvalidTokenError(Unauthorized):
    default_message = "Invalid or expired token"


class ExpiredTokenError(InvalidTokenError):
    """Correctly signed token whose exp has passed."""

    default_message = "Session expired"


class ForbiddenError(AuthError):
    kind = "forbidden"
    status_code = 403
    default_message = "Not permitted"


class NotFoundError(AuthError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class InternalError(AuthError):
    pass
