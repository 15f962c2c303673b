"""Token service tests."""

from __future__ import annotations

import base64
import json
import uuid
from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import pytest

from onsite_auth.auth.models import Role
from onsite_auth.auth.tokens import TokenService
from onsite_auth.errors import ExpiredTokenError, InvalidTokenError, Unauthorized

TTL = timedelta(hours=24)


def _mint(service: TokenService, **kwargs) -> tuple[str, datetime]:
    params = {"user_id": uuid.uuid4(), "role": Role.ADMIN, "company": "Acme", "ttl": TTL}
    params.update(kwargs)
    return service.mint(**params)


def test_mint_and_verify_round_trip(token_service: TokenService):
    uid = uuid.uuid4()
    token, expires_at = token_service.mint(uid, Role.MEMBER, "Acme", TTL)
    claims = token_service.verify(token)
    assert claims.user_id == uid
    assert claims.role is Role.MEMBER
    assert claims.company == "Acme"
    assert claims.expires_at == expires_at.replace(microsecond=0)


def test_mint_expiry_is_issue_time_plus_ttl(token_service: TokenService):
    now = datetime.now(UTC)
    _token, expires_at = _mint(token_service, now=now)
    assert expires_at == now + TTL


def test_each_token_is_unique(token_service: TokenService):
    uid = uuid.uuid4()
    now = datetime.now(UTC)
    first, _ = token_service.mint(uid, Role.ADMIN, "Acme", TTL, now=now)
    second, _ = token_service.mint(uid, Role.ADMIN, "Acme", TTL, now=now)
    assert first != second
    assert token_service.verify(first).token_id != token_service.verify(second).token_id


def test_token_is_signed_jwt(token_service: TokenService):
    token, _ = _mint(token_service)
    header = pyjwt.get_unverified_header(token)
    assert header["alg"] == "HS256"


def test_every_single_bit_mutation_fails(token_service: TokenService):
    token, _ = _mint(token_service)
    for i, ch in enumerate(token):
        for bit in (1, 2, 4, 8, 16, 32, 64):
            mutated = token[:i] + chr(ord(ch) ^ bit) + token[i + 1 :]
            with pytest.raises(InvalidTokenError):
                token_service.verify(mutated)


def test_unsigned_base64_payload_is_rejected(token_service: TokenService):
    payload = {"userId": str(uuid.uuid4()), "role": "admin", "company": "Acme"}
    forged = base64.b64encode(json.dumps(payload).encode()).decode()
    with pytest.raises(InvalidTokenError):
        token_service.verify(forged)


def test_alg_none_token_is_rejected(token_service: TokenService):
    now = datetime.now(UTC)
    forged = pyjwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "role": "admin",
            "company": "Acme",
            "jti": "x",
            "iat": now,
            "exp": now + TTL,
            "type": "access",
        },
        key=None,
        algorithm="none",
    )
    with pytest.raises(InvalidTokenError):
        token_service.verify(forged)


def test_token_from_other_secret_is_rejected(token_service: TokenService):
    other = TokenService("another-secret-entirely-0123456789abcdef")
    token, _ = _mint(other)
    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_expired_token_is_rejected(token_service: TokenService):
    token, _ = _mint(token_service, ttl=timedelta(seconds=-1))
    with pytest.raises(ExpiredTokenError, match="expired"):
        token_service.verify(token)


def test_wrong_token_type_is_rejected(token_service: TokenService):
    now = datetime.now(UTC)
    token = pyjwt.encode(
        {
            "sub": str(uuid.uuid4()),
            "role": "admin",
            "company": "Acme",
            "jti": "x",
            "iat": now,
            "exp": now + TTL,
            "type": "refresh",
        },
        "unit-test-signing-secret-0123456789abcdef",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_missing_claims_are_rejected(token_service: TokenService):
    token = pyjwt.encode(
        {"sub": str(uuid.uuid4()), "role": "admin"},
        "unit-test-signing-secret-0123456789abcdef",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        token_service.verify(token)


def test_malformed_subject_is_rejected(token_service: TokenService):
    now = datetime.now(UTC)
    token = pyjwt.encode(
        {
            "sub": "not-a-uuid",
            "role": "admin",
            "company": "Acme",
            "jti": "x",
            "iat": now,
            "exp": now + TTL,
            "type": "access",
        },
        "unit-test-signing-secret-0123456789abcdef",
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError, match="Malformed"):
        token_service.verify(token)


@pytest.mark.parametrize("garbage", ["", "not.a.token", "a.b", "....", "Bearer x"])
def test_garbage_is_rejected(token_service: TokenService, garbage: str):
    with pytest.raises(Unauthorized):
        token_service.verify(garbage)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService("")
