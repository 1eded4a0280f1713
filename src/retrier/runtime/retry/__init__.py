"""Retry policies with jittered exponential backoff.

Example:
    >>> from retrier.runtime.retry import RetryPolicy
    >>> from retrier.monads import Ok, Err, mark_terminal
    >>>
    >>> def get_status() -> Result[int, str]:
    ...     resp = http.get(url)
    ...     if resp.status_code >= 500:
    ...         return Err(f"retryable HTTP status: {resp.status_code}")
    ...     if resp.status_code != 200:
    ...         return mark_terminal(f"non-retryable HTTP status: {resp.status_code}")
    ...     return Ok(resp.status_code)
    >>>
    >>> RetryPolicy(max_attempts=5, initial_delay=0.05, max_delay=0.05).run(get_status)
"""

from .backoff import ExponentialBackoff, JitterSource
from .policy import (
    RetryPolicy,
    execute_with_retry,
    execute_with_retry_sync,
    new_policy,
)

__all__ = [
    # Backoff
    "ExponentialBackoff",
    "JitterSource",
    # Policy
    "RetryPolicy",
    "new_policy",
    # Execution
    "execute_with_retry",
    "execute_with_retry_sync",
]
