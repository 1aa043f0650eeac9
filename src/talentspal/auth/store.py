from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from sqlitedict import SqliteDict  # type: ignore

from talentspal.config import get_settings
from talentspal.utils.log import logger

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"

CREDENTIAL_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)


@runtime_checkable
class CredentialStore(Protocol):
    """
    Persisted string key-value state holding tokens and the cached user record.

    Values are plain strings; the `user` record is stored JSON-serialized.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCredentialStore:
    """Process-local store. Used by tests and short-lived scripts."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        for k in CREDENTIAL_KEYS:
            self._data.pop(k, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class SqliteCredentialStore:
    """
    Store persisted across process runs (the CLI's equivalent of browser localStorage).
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _db(self) -> SqliteDict:
        # Open/close per operation (avoids cross-thread SQLite handle issues)
        return SqliteDict(str(self.db_path), tablename="credentials", autocommit=True)

    def get(self, key: str) -> str | None:
        with self._lock, self._db() as db:
            v = db.get(key)
        return None if v is None else str(v)

    def set(self, key: str, value: str) -> None:
        with self._lock, self._db() as db:
            db[key] = str(value)

    def delete(self, key: str) -> None:
        with self._lock, self._db() as db:
            if key in db:
                del db[key]

    def clear(self) -> None:
        with self._lock, self._db() as db:
            for k in CREDENTIAL_KEYS:
                if k in db:
                    del db[k]


def get_user(store: CredentialStore) -> dict[str, Any] | None:
    raw = store.get(USER_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("credential_user_record_corrupt")
        return None
    return data if isinstance(data, dict) else None


def set_user(store: CredentialStore, user: dict[str, Any]) -> None:
    store.set(USER_KEY, json.dumps(user, sort_keys=True, separators=(",", ":")))


def open_credential_store(kind: str | None = None) -> CredentialStore:
    """
    Build the configured store (CREDENTIAL_STORE=memory|sqlite).

    If TALENTSPAL_ACCESS_TOKEN / TALENTSPAL_REFRESH_TOKEN are set and the store
    holds no token yet, they seed it.
    """
    s = get_settings()
    kind = str(kind or s.credential_store).strip().lower()
    store: CredentialStore
    if kind == "memory":
        store = MemoryCredentialStore()
    else:
        store = SqliteCredentialStore(s.resolved_state_dir() / str(s.credential_db_name))

    for key, secret in (
        (ACCESS_TOKEN_KEY, s.secret.access_token),
        (REFRESH_TOKEN_KEY, s.secret.refresh_token),
    ):
        if secret is None or store.get(key):
            continue
        raw = secret.get_secret_value()
        if raw:
            store.set(key, raw)
            logger.info("credential_store_seeded", key=key, store=kind)
    return store
