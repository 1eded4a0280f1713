"""Configuration management using pydantic-settings."""

from .settings import (
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    LoggingSettings,
    RetrierSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_INITIAL_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_DELAY",
    "LoggingSettings",
    "RetrierSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
