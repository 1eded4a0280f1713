"""Concurrency primitives used by the retry loop.

Provides:
    - CancelToken: thread-safe abort signal with deadline, awaitable from threads and asyncio
"""

from .cancel import CancelToken

__all__ = ["CancelToken"]
