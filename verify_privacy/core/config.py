from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when required tenant or auth settings are missing or invalid."""


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="verify-privacy", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    version: str = Field(default="0.9.5")

    # Verify tenant
    tenant_url: str = Field(default="", validation_alias="VERIFY_TENANT_URL")
    access_token: str = Field(default="", validation_alias="VERIFY_ACCESS_TOKEN")

    # DPCM transport
    request_timeout_seconds: int = Field(default=30, validation_alias="VERIFY_TIMEOUT_SECONDS")
    max_retries: int = Field(default=3, validation_alias="VERIFY_MAX_RETRIES")
    retry_backoff_seconds: float = Field(
        default=1.0, validation_alias="VERIFY_RETRY_BACKOFF_SECONDS"
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    def tenant_config(self) -> dict[str, str]:
        """Return the tenant configuration mapping expected by ``Privacy``."""
        return {"tenantUrl": self.tenant_url}

    def auth_config(self) -> dict[str, str]:
        """Return the auth mapping expected by ``Privacy``."""
        return {"accessToken": self.access_token}


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


def has_value(source: Mapping[str, Any] | None, key: str) -> bool:
    """Return True when ``source`` holds a non-empty value for ``key``."""
    if not isinstance(source, Mapping):
        return False
    value = source.get(key)
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def require(source: Mapping[str, Any] | None, key: str, message: str) -> str:
    if not has_value(source, key):
        raise ConfigurationError(message)
    return str(source[key])  # type: ignore[index]
