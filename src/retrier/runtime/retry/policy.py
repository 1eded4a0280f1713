"""Retry policy configuration and the retry loop.

The loop invokes an operation until it returns Ok, returns a Terminal
failure, has failed max_attempts times, or the run's CancelToken fires
during a backoff wait. It always hands back the caller's own values:
the success, the last failure, or the unwrapped terminal failure.

Optimizations:
- Frozen for immutability and hashability, shareable across threads
- Per-run JitterSource so concurrent runs share no mutable state
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Awaitable
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from retrier.foundation.config import (
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY,
    RetrierSettings,
    get_settings,
)
from retrier.monads import Result

from .backoff import ExponentialBackoff, JitterSource

if TYPE_CHECKING:
    from retrier.runtime.concurrency import CancelToken


logger = logging.getLogger("retrier.retry")

T = TypeVar("T")
E = TypeVar("E")

Operation = Callable[[], Result[T, E]]
AsyncOperation = Callable[[], Awaitable[Result[T, E]] | Result[T, E]]


class RetryPolicy(BaseModel):
    """Immutable retry configuration.

    Any non-positive argument is replaced by its default, so a policy is never
    degenerate. Delays are seconds and may be given as timedelta.

    Attributes:
        max_attempts: Invocations per run, including the first (default 5)
        initial_delay: Base delay after the first failure (default 0.2s)
        max_delay: Upper bound on any single wait (default 1.0s)
        on_retry: Optional hook called as on_retry(attempt, failure, delay) before each wait

    Example:
        >>> policy = RetryPolicy(max_attempts=3, initial_delay=0.1, max_delay=2.0)
        >>> result = policy.run(lambda: fetch_quote("ACME"))
        >>> result.unwrap_or(None)
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Policy",
            "description": "Attempt budget and backoff bounds for a retry run",
            "examples": [{"max_attempts": 5, "initial_delay": 0.2, "max_delay": 1.0}],
        },
    )

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: Annotated[float, Field(allow_inf_nan=False)] = DEFAULT_INITIAL_DELAY
    max_delay: Annotated[float, Field(allow_inf_nan=False)] = DEFAULT_MAX_DELAY
    on_retry: Callable[[int, object, float], None] | None = Field(default=None, exclude=True, repr=False)

    @field_validator("initial_delay", "max_delay", mode="before")
    @classmethod
    def _accept_timedelta(cls, v: float | timedelta) -> float:
        return v.total_seconds() if isinstance(v, timedelta) else v

    @field_validator("max_attempts")
    @classmethod
    def _default_attempts(cls, v: int) -> int:
        return v if v > 0 else DEFAULT_MAX_ATTEMPTS

    @field_validator("initial_delay")
    @classmethod
    def _default_initial(cls, v: float) -> float:
        return v if v > 0 else DEFAULT_INITIAL_DELAY

    @field_validator("max_delay")
    @classmethod
    def _default_max(cls, v: float) -> float:
        return v if v > 0 else DEFAULT_MAX_DELAY

    @classmethod
    def from_settings(cls, settings: RetrierSettings | None = None, **overrides: object) -> RetryPolicy:
        """Build a policy from RETRIER_RETRY_* environment defaults."""
        s = (settings or get_settings()).retry
        values: dict[str, object] = {
            "max_attempts": s.max_attempts, "initial_delay": s.initial_delay, "max_delay": s.max_delay,
        }
        return cls(**{**values, **overrides})

    @property
    def backoff(self) -> ExponentialBackoff:
        return ExponentialBackoff(initial=self.initial_delay, max_delay=self.max_delay)

    def normalized(self) -> RetryPolicy:
        """Return self, or a validated copy if built without validation (model_construct)."""
        attempts, initial, ceiling = self.max_attempts, self.initial_delay, self.max_delay
        if _usable(attempts, int) and _usable(initial, float) and _usable(ceiling, float):
            return self
        return RetryPolicy(
            max_attempts=attempts if _usable(attempts, int) else 0,
            initial_delay=initial if _usable(initial, float) else 0,
            max_delay=ceiling if _usable(ceiling, float) else 0,
            on_retry=self.on_retry if callable(self.on_retry) else None,
        )

    def next_delay(self, attempt: int, jitter: JitterSource | None = None) -> float:
        """Delay in seconds after the `attempt`-th failure (1-based), within [0, max_delay]."""
        return self.backoff.delay(attempt, jitter or JitterSource())

    def run(self, operation: Operation[T, E], *, jitter: JitterSource | None = None) -> Result[T, E]:
        """Run operation until success, terminal failure or exhausted attempts."""
        return execute_with_retry_sync(operation, self, jitter=jitter)

    def run_cancellable(
        self,
        token: CancelToken,
        operation: Callable[[CancelToken], Result[T, E]],
        *,
        jitter: JitterSource | None = None,
    ) -> Result[T, E]:
        """Like run(), and also stops when token fires. Operation receives the token.

        The operation is responsible for honoring the token while it runs; the
        loop only stops waiting and stops starting new attempts.
        """
        return execute_with_retry_sync(lambda: operation(token), self, token=token, jitter=jitter)

    async def arun(self, operation: AsyncOperation[T, E], *, jitter: JitterSource | None = None) -> Result[T, E]:
        """Async run(). Operation may be a coroutine function or a plain callable."""
        return await execute_with_retry(operation, self, jitter=jitter)

    async def arun_cancellable(
        self,
        token: CancelToken,
        operation: Callable[[CancelToken], Awaitable[Result[T, E]] | Result[T, E]],
        *,
        jitter: JitterSource | None = None,
    ) -> Result[T, E]:
        """Async run_cancellable()."""
        return await execute_with_retry(lambda: operation(token), self, token=token, jitter=jitter)


def new_policy(max_attempts: int = 0, initial_delay: float = 0, max_delay: float = 0) -> RetryPolicy:
    """Build a RetryPolicy, substituting defaults (5, 0.2s, 1.0s) for non-positive arguments."""
    return RetryPolicy(max_attempts=max_attempts, initial_delay=initial_delay, max_delay=max_delay)


def _usable(value: object, kind: type) -> bool:
    """Positive finite number of the given kind (int also counts as float); bool never does."""
    if isinstance(value, bool) or not isinstance(value, (int, float) if kind is float else int):
        return False
    return math.isfinite(value) and value > 0


def _checked(result: object) -> Result[T, E]:
    if not isinstance(result, Result):
        raise TypeError(f"Retried operation must return a Result, got {type(result).__name__}")
    return result


def _before_wait(policy: RetryPolicy, attempt: int, result: Result[T, E], delay: float) -> None:
    failure = result.unwrap_err()
    logger.info(f"Attempt {attempt}/{policy.max_attempts} failed ({failure!r}), retrying in {delay:.3f}s")
    if policy.on_retry:
        policy.on_retry(attempt, failure, delay)


def _stop(result: Result[T, E], attempt: int, policy: RetryPolicy) -> Result[T, E] | None:
    """Decide whether a failed attempt ends the run. Returns the final result or None to continue."""
    if result.is_terminal():
        logger.debug(f"Attempt {attempt} returned a terminal failure, stopping")
        return result.into_retryable()
    if attempt >= policy.max_attempts:
        logger.info(f"Giving up after {attempt} attempts: {result.unwrap_err()!r}")
        return result
    return None


def execute_with_retry_sync(
    operation: Operation[T, E],
    policy: RetryPolicy,
    *,
    token: CancelToken | None = None,
    jitter: JitterSource | None = None,
) -> Result[T, E]:
    """Execute operation with retry policy on the calling thread.

    Args:
        operation: Zero-argument callable returning Ok, Err or Terminal
        policy: Retry policy configuration
        token: Optional cancellation token raced against each backoff wait
        jitter: Jitter source (default: a fresh one for this run)

    Returns:
        The Ok result, the last Err, or the unwrapped Terminal failure as Err
    """
    policy = policy.normalized()
    jitter = jitter or JitterSource()
    attempt = 0

    while True:
        result = _checked(operation())
        if result.is_ok():
            return result
        attempt += 1
        if (final := _stop(result, attempt, policy)) is not None:
            return final
        if token is not None and token.cancelled:
            logger.info(f"Cancelled after {attempt} attempts ({token.reason})")
            return result

        delay = policy.next_delay(attempt, jitter)
        _before_wait(policy, attempt, result, delay)

        if token is None:
            time.sleep(delay)
        elif token.wait(delay):
            logger.info(f"Cancelled during backoff after {attempt} attempts ({token.reason})")
            return result


async def execute_with_retry(
    operation: AsyncOperation[T, E],
    policy: RetryPolicy,
    *,
    token: CancelToken | None = None,
    jitter: JitterSource | None = None,
) -> Result[T, E]:
    """Execute operation with retry policy in the current task.

    Asyncio version of execute_with_retry_sync(). The operation may return a
    Result or an awaitable of one. Task cancellation propagates as usual.
    """
    policy = policy.normalized()
    jitter = jitter or JitterSource()
    attempt = 0

    while True:
        outcome = operation()
        result = _checked(await outcome if inspect.isawaitable(outcome) else outcome)
        if result.is_ok():
            return result
        attempt += 1
        if (final := _stop(result, attempt, policy)) is not None:
            return final
        if token is not None and token.cancelled:
            logger.info(f"Cancelled after {attempt} attempts ({token.reason})")
            return result

        delay = policy.next_delay(attempt, jitter)
        _before_wait(policy, attempt, result, delay)

        if token is None:
            await asyncio.sleep(delay)
        elif await token.wait_async(delay):
            logger.info(f"Cancelled during backoff after {attempt} attempts ({token.reason})")
            return result
