from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from .public_config import PublicConfig
from .secret_config import SecretConfig

REFRESH_MODES = {"bail", "shared"}
CREDENTIAL_STORES = {"memory", "sqlite"}


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Merged settings view (dot-access).

    Precedence:
      - secrets override public when names overlap
    """

    public: PublicConfig
    secret: SecretConfig

    def __getattr__(self, name: str) -> Any:
        if hasattr(self.secret, name):
            return getattr(self.secret, name)
        return getattr(self.public, name)

    def cors_origin_list(self) -> list[str]:
        return self.public.cors_origin_list()

    def refresh_trigger_list(self) -> list[str]:
        return self.public.refresh_trigger_list()

    def upload_mime_prefix_list(self) -> list[str]:
        return self.public.upload_mime_prefix_list()

    def resolved_state_dir(self) -> Path:
        if self.public.state_dir is not None:
            return Path(self.public.state_dir).resolve()
        return (Path(self.public.app_root) / "_state").resolve()


def _secret_value(secret: SecretStr | None) -> str:
    try:
        return secret.get_secret_value() if secret else ""
    except Exception:
        return ""


def _validate(s: Settings) -> None:
    mode = str(s.public.refresh_mode or "").strip().lower()
    if mode not in REFRESH_MODES:
        raise ConfigError(
            f"REFRESH_MODE must be one of {sorted(REFRESH_MODES)} (got {s.public.refresh_mode!r})"
        )
    store = str(s.public.credential_store or "").strip().lower()
    if store not in CREDENTIAL_STORES:
        raise ConfigError(
            f"CREDENTIAL_STORE must be one of {sorted(CREDENTIAL_STORES)} "
            f"(got {s.public.credential_store!r})"
        )
    if not str(s.public.api_base_url or "").strip():
        raise ConfigError("API_BASE_URL must not be empty")


def get_safe_config_report() -> dict[str, Any]:
    """
    Deterministic, non-sensitive config report.

    - Public values are included (paths are stringified)
    - Secret values are NEVER included; only SET/UNSET markers
    """
    s = get_settings()

    pub = s.public.model_dump()
    pub_s: dict[str, Any] = {}
    for k, v in pub.items():
        pub_s[k] = str(v) if hasattr(v, "__fspath__") else v

    sec: dict[str, str] = {}
    for k in sorted(s.secret.model_fields.keys()):
        v = getattr(s.secret, k, None)
        if v is None:
            sec[k] = "UNSET"
        elif isinstance(v, SecretStr):
            sec[k] = "SET" if _secret_value(v) else "UNSET"
        else:
            sec[k] = "SET" if str(v).strip() else "UNSET"

    return {
        "public": pub_s,
        "secrets": sec,
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    public = PublicConfig()
    secret = SecretConfig()
    s = Settings(public=public, secret=secret)
    _validate(s)
    return s
