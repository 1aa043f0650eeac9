from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator

import pytest

# Logging is configured on first import of talentspal.utils.log (at collection time).
os.environ.setdefault("TALENTSPAL_LOG_DIR", tempfile.mkdtemp(prefix="talentspal_logs_"))

from talentspal.config import get_settings  # noqa: E402

API_BASE = "http://api.test/api"


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    root = tmp_path_factory.mktemp("tp_test")
    (root / "_state").mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("APP_ROOT", str(root))
    monkeypatch.setenv("TALENTSPAL_STATE_DIR", str(root / "_state"))
    monkeypatch.setenv("API_BASE_URL", API_BASE)
    monkeypatch.delenv("REFRESH_MODE", raising=False)
    monkeypatch.delenv("REFRESH_TRIGGER_PHRASES", raising=False)
    monkeypatch.delenv("CREDENTIAL_STORE", raising=False)
    monkeypatch.delenv("TALENTSPAL_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("TALENTSPAL_REFRESH_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
