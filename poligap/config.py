"""Configuration management for the PoliGap validation service.

This module uses Pydantic Settings to load configuration from environment
variables. Pipeline thresholds (size ceiling, timeouts, keyword scores) are
fixed constants in their service modules.
"""

import logging
import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_RATE_LIMIT_PATTERN = re.compile(r"^\d+\s*/\s*(second|minute|hour|day)$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)"
    )

    # Rate limiting
    trusted_proxies: str = Field(
        default="",
        description="Comma-separated proxy IPs whose X-Forwarded-For is trusted"
    )
    validate_rate_limit: str = Field(
        default="10/minute",
        description="slowapi limit for POST /api/documents/validate"
    )

    # CORS
    cors_allow_origins: str = Field(
        default="*",
        description="Comma-separated origins allowed to call the API"
    )

    # Upload sessions
    max_sessions: int = Field(
        default=1000,
        ge=1,
        description="Upload sessions kept for stale-result detection"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that LOG_LEVEL names a standard logging level."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name (got: {v})")
        return level

    @field_validator("validate_rate_limit")
    @classmethod
    def validate_rate_limit_format(cls, v: str) -> str:
        """Validate the limit looks like '10/minute'."""
        limit = v.strip()
        if not _RATE_LIMIT_PATTERN.match(limit):
            raise ValueError(
                "VALIDATE_RATE_LIMIT must look like '<count>/<second|minute|hour|day>' "
                f"(got: {v})"
            )
        return limit

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance.

    Returns:
        Settings: Validated application settings

    Raises:
        ValueError: If an environment variable holds an invalid value
    """
    return Settings()
