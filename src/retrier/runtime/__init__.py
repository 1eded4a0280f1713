"""Runtime - retry execution, cancellation, observability.

Contains: retry policies and loop, backoff, cancellation tokens, logging setup.
"""

from __future__ import annotations

from .concurrency import CancelToken
from .observability import configure_logging
from .retry import (
    ExponentialBackoff,
    JitterSource,
    RetryPolicy,
    execute_with_retry,
    execute_with_retry_sync,
    new_policy,
)

__all__ = [
    # Retry
    "RetryPolicy", "new_policy", "ExponentialBackoff", "JitterSource",
    "execute_with_retry", "execute_with_retry_sync",
    # Concurrency
    "CancelToken",
    # Observability
    "configure_logging",
]
