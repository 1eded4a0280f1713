"""Retrier - retry policies with jittered exponential backoff.

Runs an operation until it succeeds, returns a terminal failure, exhausts its
attempt budget, or is cancelled. Operations report failure by returning a
value, never by having it classified for them.

Quick Start:
    >>> from retrier import RetryPolicy, Result, Ok, Err, mark_terminal
    >>>
    >>> def fetch() -> Result[str, str]:
    ...     resp = requests.get("https://example.com")
    ...     if resp.status_code >= 500:
    ...         return Err(f"retryable HTTP status: {resp.status_code}")
    ...     if resp.status_code != 200:
    ...         return mark_terminal(f"non-retryable HTTP status: {resp.status_code}")
    ...     return Ok(resp.text)
    >>>
    >>> policy = RetryPolicy(max_attempts=5, initial_delay=0.05, max_delay=0.5)
    >>> result = policy.run(fetch)

With cancellation:
    >>> from retrier import CancelToken
    >>> token = CancelToken.with_timeout(2.0)
    >>> result = policy.run_cancellable(token, lambda tok: fetch_with_timeout(tok.remaining()))

Asyncio:
    >>> result = await policy.arun(async_fetch)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation.config import (
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    RetrierSettings,
    get_settings,
)
from .monads import Err, Ok, Result, Terminal, mark_terminal
from .runtime import (
    CancelToken,
    ExponentialBackoff,
    JitterSource,
    RetryPolicy,
    configure_logging,
    execute_with_retry,
    execute_with_retry_sync,
    new_policy,
)

__all__ = [
    "__version__",
    # Policy & loop
    "RetryPolicy", "new_policy", "execute_with_retry", "execute_with_retry_sync",
    # Backoff
    "ExponentialBackoff", "JitterSource",
    # Results
    "Result", "Ok", "Err", "Terminal", "mark_terminal",
    # Cancellation
    "CancelToken",
    # Config & logging
    "RetrierSettings", "get_settings", "configure_logging",
    "DEFAULT_MAX_ATTEMPTS", "DEFAULT_INITIAL_DELAY", "DEFAULT_MAX_DELAY",
]
