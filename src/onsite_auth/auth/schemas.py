"""Validated input models for the registration and login flows."""

from __future__ import annotations

import re
from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, Field, field_validator

from onsite_auth.auth.passwords import MAX_PASSWORD_BYTES
from onsite_auth.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8

ModelT = TypeVar("ModelT", bound=BaseModel)


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class RegisterRequest(BaseModel):
    full_name: str = Field(alias="fullName")
    email: str
    company: str
    password: str

    model_config = {"populate_by_name": True}

    @field_validator("full_name", "company")
    @classmethod
    def required_text(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        v = _not_blank(v)
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_policy(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_required(cls, v: str) -> str:
        return _not_blank(v).lower()

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be blank")
        return v


def describe_errors(errors: list[dict[str, Any]]) -> str:
    """Flatten pydantic error dicts into one human-readable sentence."""
    parts = []
    for err in errors:
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


def parse_input(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a raw payload, raising the service's ValidationError on failure."""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(describe_errors(exc.errors())) from exc
