"""Tests for backoff delay calculation and the jitter source."""

from __future__ import annotations

import threading

import pytest

from retrier.runtime.retry import ExponentialBackoff, JitterSource, RetryPolicy

LARGE_ATTEMPTS = [1, 2, 10, 63, 64, 100, 1023, 1024, 1100, 5000, 10**6, 10**18]


@pytest.fixture
def jitter() -> JitterSource:
    return JitterSource(seed=1234)


def test_delay_within_full_jitter_window(jitter: JitterSource) -> None:
    """Below the cap, attempt n waits in [initial*2**(n-1), initial*2**n)."""
    backoff = ExponentialBackoff(initial=0.01, max_delay=100.0)

    for attempt in range(1, 8):
        base = 0.01 * 2 ** (attempt - 1)
        for _ in range(50):
            assert base <= backoff.delay(attempt, jitter) < 2 * base


def test_delay_grows_until_cap(jitter: JitterSource) -> None:
    backoff = ExponentialBackoff(initial=0.01, max_delay=100.0)
    # Windows for attempts n and n+2 do not overlap, so growth is strict
    assert backoff.delay(1, jitter) < backoff.delay(3, jitter) < backoff.delay(5, jitter)


def test_delay_near_cap_is_jittered(jitter: JitterSource) -> None:
    backoff = ExponentialBackoff(initial=0.05, max_delay=0.05)
    delays = {backoff.delay(3, jitter) for _ in range(20)}

    assert all(0.025 <= d <= 0.05 for d in delays)
    assert len(delays) > 1


@pytest.mark.parametrize("attempt", LARGE_ATTEMPTS)
@pytest.mark.parametrize(
    ("initial", "max_delay"),
    [(0.5, 0.001), (0.2, 1.0), (1e-300, 1e300), (5e-324, 1.0), (1e300, 1e308)],
)
def test_delay_bounded_for_any_attempt(jitter: JitterSource, attempt: int, initial: float, max_delay: float) -> None:
    """Overflowing exponents degrade to a bounded value instead of raising."""
    delay = ExponentialBackoff(initial=initial, max_delay=max_delay).delay(attempt, jitter)
    assert 0 <= delay <= max_delay


def test_zero_initial_uses_max_delay_as_base(jitter: JitterSource) -> None:
    backoff = ExponentialBackoff(initial=0.0, max_delay=0.4)

    for attempt in (1, 2, 50):
        assert 0.2 <= backoff.delay(attempt, jitter) <= 0.4


def test_non_positive_bounds_never_spin(jitter: JitterSource) -> None:
    backoff = ExponentialBackoff(initial=0.0, max_delay=0.0)
    assert backoff.delay(1, jitter) > 0


def test_attempt_below_one_treated_as_first(jitter: JitterSource) -> None:
    backoff = ExponentialBackoff(initial=0.01, max_delay=1.0)

    for attempt in (0, -5):
        assert 0.01 <= backoff.delay(attempt, jitter) < 0.02


def test_policy_next_delay_respects_max_delay() -> None:
    policy = RetryPolicy(max_attempts=3, initial_delay=0.5, max_delay=0.75)
    for attempt in LARGE_ATTEMPTS:
        assert 0 <= policy.next_delay(attempt) <= 0.75


def test_seeded_sources_are_reproducible() -> None:
    backoff = ExponentialBackoff(initial=0.01, max_delay=10.0)
    a, b = JitterSource(seed=99), JitterSource(seed=99)

    assert [backoff.delay(n, a) for n in range(1, 10)] == [backoff.delay(n, b) for n in range(1, 10)]


def test_unseeded_sources_differ() -> None:
    a, b = JitterSource(), JitterSource()
    assert [a.uniform(0, 1) for _ in range(5)] != [b.uniform(0, 1) for _ in range(5)]


def test_shared_source_safe_across_threads() -> None:
    jitter = JitterSource(seed=7)
    backoff = ExponentialBackoff(initial=0.001, max_delay=0.01)
    results: list[float] = []
    lock = threading.Lock()

    def draw() -> None:
        local = [backoff.delay(n % 20 + 1, jitter) for n in range(500)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=draw) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8 * 500
    assert all(0 <= d <= 0.01 for d in results)


def test_default_backoff_matches_policy_defaults() -> None:
    assert ExponentialBackoff() == RetryPolicy().backoff
