"""Backoff delay calculation for retry runs.

Provides:
- JitterSource: lock-guarded random generator, one per run by default
- ExponentialBackoff: doubling delay with full jitter, capped at max_delay

Jitter scheme: for attempt n the base is initial * 2**(n-1) and the delay is
drawn uniformly in [base, 2*base), then capped. Once the base reaches the cap
(or would overflow a float) the delay is drawn in [max_delay/2, max_delay],
so callers stay desynchronized even at the ceiling.
"""

from __future__ import annotations

import logging
import math
import random
import secrets
import sys
import threading
from dataclasses import dataclass, field

from retrier.foundation.config import DEFAULT_INITIAL_DELAY, DEFAULT_MAX_DELAY

logger = logging.getLogger("retrier.backoff")

# Exponents above log2(float_max) - log2(initial) - 2 would overflow initial * 2**exp * 2
_LOG2_FLOAT_MAX = math.log2(sys.float_info.max)


@dataclass(slots=True, eq=False)
class JitterSource:
    """Random generator that serializes draws with a lock.

    The retry loop creates one per run, seeded from the OS, so concurrent runs
    never contend. A single instance may still be shared across threads
    (e.g. a seeded source injected in tests); draws never race.

    Example:
        >>> jitter = JitterSource(seed=7)
        >>> 1.0 <= jitter.uniform(1.0, 2.0) <= 2.0
        True
    """

    seed: int | None = None
    _rng: random.Random = field(init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed if self.seed is not None else secrets.randbits(64))

    def uniform(self, low: float, high: float) -> float:
        """Draw from [low, high)."""
        with self._lock:
            r = self._rng.random()
        return low + (high - low) * r


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff with full jitter and an upper bound.

    Attributes:
        initial: Base delay of the first retry in seconds. Values <= 0 fall back to max_delay.
        max_delay: Upper bound on any single delay. Values <= 0 fall back to the default.
    """

    initial: float = DEFAULT_INITIAL_DELAY
    max_delay: float = DEFAULT_MAX_DELAY

    def delay(self, attempt: int, jitter: JitterSource) -> float:
        """Delay in seconds to wait after the `attempt`-th failed invocation (1-based).

        Always within [0, max_delay]; never raises for large attempt numbers.
        """
        ceiling = self.max_delay if self.max_delay > 0 else DEFAULT_MAX_DELAY
        initial = self.initial if self.initial > 0 else ceiling
        exponent = max(attempt, 1) - 1

        if exponent > _LOG2_FLOAT_MAX - math.log2(initial) - 2:
            logger.debug(f"Backoff exponent {exponent} would overflow, using jitter near {ceiling:.3f}s")
            return jitter.uniform(ceiling / 2, ceiling)

        base = math.ldexp(initial, exponent)
        if base >= ceiling:
            return jitter.uniform(ceiling / 2, ceiling)
        return min(jitter.uniform(base, 2 * base), ceiling)
