"""
Configuration Management Module

Settings are read from LANEFUL_* environment variables (or a local .env file):

- LANEFUL_BASE_URL        endpoint URL, e.g. https://your-endpoint.send.laneful.net
- LANEFUL_AUTH_TOKEN      API token used as a Bearer credential
- LANEFUL_WEBHOOK_SECRET  shared secret for webhook signatures
- LANEFUL_TIMEOUT         request timeout in seconds
- LANEFUL_ENVIRONMENT     development / staging / production / testing
- LANEFUL_LOG_LEVEL       loguru level name
"""

import warnings
from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class EnvironmentEnum(str, Enum):
    """Application environment types"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LanefulSettings(BaseSettings):
    """SDK configuration"""

    base_url: Optional[str] = Field(
        default=None,
        description="Laneful API endpoint URL",
    )
    auth_token: Optional[SecretStr] = Field(
        default=None,
        description="API authentication token",
    )
    webhook_secret: Optional[SecretStr] = Field(
        default=None,
        description="HMAC secret for webhook verification",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        le=300.0,
        description="HTTP request timeout in seconds",
    )
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(default="INFO", description="Log level name")

    @field_validator("base_url", mode="before")
    @classmethod
    def strip_base_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: Any) -> Any:
        """Case-insensitive environment parsing"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @model_validator(mode="after")
    def warn_weak_webhook_secret(self) -> "LanefulSettings":
        if self.webhook_secret is not None:
            secret = self.webhook_secret.get_secret_value()
            if len(secret) < 16:
                warnings.warn("Weak webhook_secret detected. Use at least 16 characters.")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.PRODUCTION

    model_config = SettingsConfigDict(
        env_prefix="LANEFUL_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache()
def get_settings() -> LanefulSettings:
    """Return the process-wide settings instance (cached)."""
    return LanefulSettings()
