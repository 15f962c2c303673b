"""Settings validation tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from onsite_auth.settings import Settings


def test_secret_required_outside_debug(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    with pytest.raises(ValidationError, match="JWT_SECRET is required"):
        Settings(_env_file=None)


def test_debug_generates_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.jwt_secret) >= 32
    assert settings.jwt_secret != Settings(_env_file=None, debug=True).jwt_secret


def test_short_secret_rejected():
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, jwt_secret="too-short")


def test_non_hmac_algorithm_rejected():
    with pytest.raises(ValidationError, match="HMAC"):
        Settings(_env_file=None, jwt_secret="x" * 32, jwt_algorithm="RS256")


def test_defaults(monkeypatch):
    for name in ("SESSION_TTL_HOURS", "BCRYPT_ROUNDS", "SESSION_PURGE_INTERVAL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None, jwt_secret="x" * 32)
    assert settings.session_ttl_hours == 24
    assert settings.bcrypt_rounds == 12
    assert settings.jwt_algorithm == "HS256"
    assert settings.session_purge_interval_seconds == 6 * 60 * 60


def test_bcrypt_rounds_bounds():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_secret="x" * 32, bcrypt_rounds=3)


def test_log_level_is_case_insensitive():
    settings = Settings(_env_file=None, jwt_secret="x" * 32, log_level="debug")
    assert settings.log_level == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError, match="log_level"):
        Settings(_env_file=None, jwt_secret="x" * 32, log_level="FOO")
