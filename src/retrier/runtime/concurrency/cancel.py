"""Cancellation token shared between a caller and a retry run.

A CancelToken can be cancelled explicitly or expire at a deadline. It is safe
to cancel from any thread, and can be awaited from threads (wait) and from
asyncio tasks (wait_async). Waiting is always a race between the timeout and
cancellation, never a plain sleep.

Example:
    >>> token = CancelToken.with_timeout(2.0)
    >>> result = policy.run_cancellable(token, lambda tok: fetch(timeout=tok.remaining()))

    >>> # From another thread
    >>> token = CancelToken()
    >>> threading.Timer(0.5, token.cancel).start()
    >>> token.wait(10.0)  # returns True after ~0.5s
    True
"""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(slots=True, eq=False)
class CancelToken:
    """Thread-safe abort signal with optional deadline.

    Attributes:
        deadline: time.monotonic() value after which the token counts as cancelled
        reason: Why the token was cancelled (None while active)
    """

    deadline: float | None = None
    reason: str | None = field(default=None, init=False)
    _event: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _callbacks: list[Callable[[], None]] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def with_timeout(cls, seconds: float) -> CancelToken:
        """Token that cancels itself `seconds` from now."""
        return cls(deadline=time.monotonic() + max(seconds, 0.0))

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    def remaining(self) -> float | None:
        """Seconds until the deadline, 0.0 once passed, None without a deadline."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def cancel(self, reason: str = "cancelled") -> bool:
        """Cancel the token and fire callbacks. Returns False if it was already cancelled."""
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return True

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run callback on cancellation, immediately if already cancelled.

        Deadline expiry fires callbacks lazily, the first time it is observed.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _bound(self, timeout: float | None) -> float | None:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return remaining if timeout is None else min(timeout, remaining)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or until timeout elapses.

        Returns:
            True if the token is cancelled when the wait ends
        """
        self._event.wait(self._bound(timeout))
        return self.cancelled

    async def wait_async(self, timeout: float | None = None) -> bool:
        """Asyncio counterpart of wait(). Cancellation from any thread wakes the waiter."""
        if self.cancelled:
            return True
        loop = asyncio.get_running_loop()
        fired: asyncio.Future[None] = loop.create_future()

        def _resolve() -> None:
            if not fired.done():
                fired.set_result(None)

        def _wake() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve)

        self.add_callback(_wake)
        try:
            await asyncio.wait({fired}, timeout=self._bound(timeout))
        finally:
            self.remove_callback(_wake)
            fired.cancel()
        return self.cancelled
