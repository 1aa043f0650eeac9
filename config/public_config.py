from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_app_root() -> Path:
    """
    Default application root.

    Historically, this project assumes the current working directory unless
    APP_ROOT is set.
    """
    env = os.environ.get("APP_ROOT")
    if env:
        return Path(env).resolve()
    return Path.cwd().resolve()


class PublicConfig(BaseSettings):
    """
    Non-sensitive config with safe defaults.

    Loaded from (in order):
      - process env
      - optional `.env` file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- core paths ---
    app_root: Path = Field(default_factory=_default_app_root, alias="APP_ROOT")
    log_dir: Path = Field(
        default_factory=lambda: (Path.cwd() / "logs").resolve(), alias="TALENTSPAL_LOG_DIR"
    )
    # Runtime-only state directory (credential DB). If unset, defaults to "<APP_ROOT>/_state".
    state_dir: Path | None = Field(default=None, alias="TALENTSPAL_STATE_DIR")
    credential_db_name: str = Field(default="credentials.db", alias="CREDENTIAL_DB_NAME")

    # --- remote API ---
    api_base_url: str = Field(
        default="http://localhost:5000/api",
        alias=AliasChoices("API_BASE_URL", "NEXT_PUBLIC_API_URL"),
    )
    request_timeout_sec: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SEC")

    # --- token refresh behavior ---
    refresh_mode: str = Field(default="bail", alias="REFRESH_MODE")  # bail|shared
    # Comma-separated substrings of a 401 `message` that mean "access token expired".
    refresh_trigger_phrases: str = Field(
        default="Invalid or expired token", alias="REFRESH_TRIGGER_PHRASES"
    )
    credential_store: str = Field(default="sqlite", alias="CREDENTIAL_STORE")  # memory|sqlite

    # --- logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, alias="LOG_MAX_BYTES")
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    # --- gateway server ---
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=5000, alias="PORT")

    # --- gateway middleware ---
    env: str = Field(default="development", alias=AliasChoices("ENV", "APP_ENV", "NODE_ENV"))
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")
    gzip_min_bytes: int = Field(default=1024, alias="GZIP_MIN_BYTES")
    gzip_level: int = Field(default=6, alias="GZIP_LEVEL")
    static_max_age_sec: int = Field(default=31536000, alias="STATIC_MAX_AGE_SEC")
    max_upload_mb: int = Field(default=5, alias="MAX_UPLOAD_MB")
    upload_allowed_mime_prefixes: str = Field(
        default="image/", alias="UPLOAD_ALLOWED_MIME_PREFIXES"
    )

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in (self.cors_origins or "").split(",") if o.strip()]

    def refresh_trigger_list(self) -> list[str]:
        return [p.strip() for p in (self.refresh_trigger_phrases or "").split(",") if p.strip()]

    def upload_mime_prefix_list(self) -> list[str]:
        return [
            p.strip().lower()
            for p in (self.upload_allowed_mime_prefixes or "").split(",")
            if p.strip()
        ]
