from __future__ import annotations

from .store import (
    ACCESS_TOKEN_KEY,
    CREDENTIAL_KEYS,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    CredentialStore,
    MemoryCredentialStore,
    SqliteCredentialStore,
    open_credential_store,
)

__all__ = [
    "ACCESS_TOKEN_KEY",
    "CREDENTIAL_KEYS",
    "REFRESH_TOKEN_KEY",
    "USER_KEY",
    "CredentialStore",
    "MemoryCredentialStore",
    "SqliteCredentialStore",
    "open_credential_store",
]
