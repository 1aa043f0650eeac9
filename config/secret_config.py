from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecretConfig(BaseSettings):
    """
    Sensitive config.

    This module is safe to commit: it contains *no* secrets, only loading logic.
    Real secret values should come from:
      - environment variables (preferred for headless use)
      - optional local `.env.secrets` file (developer convenience)
    """

    model_config = SettingsConfigDict(
        env_file=".env.secrets",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Optional headless bootstrap: seed the credential store on first use.
    access_token: SecretStr | None = Field(default=None, alias="TALENTSPAL_ACCESS_TOKEN")
    # Sent as the `refreshToken` cookie when calling the refresh endpoint.
    refresh_token: SecretStr | None = Field(default=None, alias="TALENTSPAL_REFRESH_TOKEN")
