"""Environment-based configuration using pydantic-settings.

Provides default retry policy values and logging options from environment
variables. Supports .env files and nested configuration.

Example:
    >>> from retrier.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    5

    # Or with environment variables:
    # RETRIER_RETRY_MAX_ATTEMPTS=8
    # RETRIER_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_DELAY = 0.2
DEFAULT_MAX_DELAY = 1.0


class RetrySettings(BaseSettings):
    """Default retry policy values."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIER_RETRY_",
        extra="ignore",
    )

    max_attempts: PositiveInt = Field(default=DEFAULT_MAX_ATTEMPTS, description="Invocations per run, including the first")
    initial_delay: PositiveFloat = Field(default=DEFAULT_INITIAL_DELAY, description="First backoff in seconds")
    max_delay: PositiveFloat = Field(default=DEFAULT_MAX_DELAY, description="Cap on any single backoff in seconds")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRIER_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"
    include_timestamps: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrierSettings(BaseSettings):
    """Root settings.

    Loads configuration from environment variables with RETRIER_ prefix.

    Example environment variables:
        RETRIER_RETRY_MAX_ATTEMPTS=3
        RETRIER_RETRY_INITIAL_DELAY=0.5
        RETRIER_LOG_LEVEL=INFO
        RETRIER_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrierSettings:
    """Get the global settings instance (cached)."""
    return RetrierSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
