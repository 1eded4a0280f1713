"""Foundation - configuration shared by the runtime.

Contains: environment settings and the default policy values.
"""

from __future__ import annotations

from .config import (
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
    "DEFAULT_INITIAL_DELAY", "DEFAULT_MAX_ATTEMPTS", "DEFAULT_MAX_DELAY",
    "RetrierSettings", "RetrySettings", "LoggingSettings",
    "get_settings", "clear_settings_cache",
]
