"""Tests for environment settings and logging setup."""

from __future__ import annotations

import io
import json
import logging

import pytest

from retrier import Err, RetryPolicy, configure_logging
from retrier.foundation.config import LoggingSettings, RetrierSettings, clear_settings_cache, get_settings


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reset cached settings and the retrier logger around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    logger = logging.getLogger("retrier")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_defaults_without_environment() -> None:
    settings = RetrierSettings()
    assert (settings.retry.max_attempts, settings.retry.initial_delay, settings.retry.max_delay) == (5, 0.2, 1.0)
    assert settings.logging.format == "text"


def test_retry_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRIER_RETRY_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("RETRIER_RETRY_INITIAL_DELAY", "0.5")
    monkeypatch.setenv("RETRIER_RETRY_MAX_DELAY", "4")

    policy = RetryPolicy.from_settings()
    assert (policy.max_attempts, policy.initial_delay, policy.max_delay) == (3, 0.5, 4.0)


def test_from_settings_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRIER_RETRY_MAX_ATTEMPTS", "3")
    assert RetryPolicy.from_settings(max_attempts=7).max_attempts == 7


def test_get_settings_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_settings()
    monkeypatch.setenv("RETRIER_RETRY_MAX_ATTEMPTS", "9")
    assert get_settings() is first
    clear_settings_cache()
    assert get_settings().retry.max_attempts == 9


def test_log_level_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRIER_LOG_LEVEL", "debug")
    assert LoggingSettings().level == "DEBUG"


def test_configure_logging_json() -> None:
    out = io.StringIO()
    configure_logging(level="INFO", format="json", output=out)

    RetryPolicy(max_attempts=2, initial_delay=0.001, max_delay=0.002).run(lambda: Err("down"))

    entries = [json.loads(line) for line in out.getvalue().splitlines()]
    assert entries
    assert entries[0]["logger"] == "retrier.retry"
    assert "Attempt 1/2 failed" in entries[0]["event"]
    assert all("timestamp" in e for e in entries)


def test_configure_logging_text_from_settings() -> None:
    out = io.StringIO()
    settings = LoggingSettings(level="INFO", format="text", include_timestamps=False)
    configure_logging(settings=settings, output=out)

    RetryPolicy(max_attempts=2, initial_delay=0.001, max_delay=0.002).run(lambda: Err("down"))

    assert "[INFO] retrier.retry: Giving up after 2 attempts" in out.getvalue()


def test_configure_logging_replaces_handler() -> None:
    configure_logging(format="text", output=io.StringIO())
    configure_logging(format="text", output=io.StringIO())
    assert len(logging.getLogger("retrier").handlers) == 1


def test_configure_logging_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging(format="xml")
