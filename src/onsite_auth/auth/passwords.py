"""Password hashing and verification using bcrypt."""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes. Longer inputs never match.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Hash a plaintext password with bcrypt. Returns a utf-8 string."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """Return True if password matches the stored bcrypt hash.

        Malformed hashes and over-long passwords return False instead of raising.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same bcrypt work as a real check against a throwaway hash.

        Used when the account does not exist so response time does not reveal it.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("onsite-timing-equalizer")
        self.verify(password, self._dummy_hash)
        return False
