"""Credential and session store interfaces plus in-memory implementations."""

from __future__ import annotations

from onsite_auth.auth.store.base import CredentialStore, SessionStore, token_digest
from onsite_auth.auth.store.memory import InMemoryCredentialStore, InMemorySessionStore

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "InMemorySessionStore",
    "SessionStore",
    "token_digest",
]
