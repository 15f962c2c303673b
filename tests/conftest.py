"""Service test fixtures with in-memory stores."""

from __future__ import annotations

import os

# Settings are read on first use; pin a test configuration before any app import.
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-at-least-32-characters-long")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_PURGE_INTERVAL_SECONDS", "0")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from onsite_auth.auth.deps import get_password_hasher, get_token_service  # noqa: E402
from onsite_auth.auth.passwords import PasswordHasher  # noqa: E402
from onsite_auth.auth.service import AuthService  # noqa: E402
from onsite_auth.auth.store.memory import InMemoryCredentialStore, InMemorySessionStore  # noqa: E402
from onsite_auth.auth.tokens import TokenService  # noqa: E402
from onsite_auth.db.deps import get_credential_store, get_session_store  # noqa: E402
from onsite_auth.rest.app import create_app  # noqa: E402

TEST_SECRET = "unit-test-signing-secret-0123456789abcdef"


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def service(credentials, sessions, token_service, hasher) -> AuthService:
    return AuthService(credentials, sessions, token_service, hasher)


@pytest.fixture
def app(credentials, sessions, token_service, hasher):
    """The real application with DB-backed stores swapped for in-memory ones."""
    app = create_app()
    app.dependency_overrides[get_credential_store] = lambda: credentials
    app.dependency_overrides[get_session_store] = lambda: sessions
    app.dependency_overrides[get_token_service] = lambda: token_service
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
