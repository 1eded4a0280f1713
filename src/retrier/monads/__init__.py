"""Result values returned by retried operations.

Example:
    >>> from retrier.monads import Ok, Err, mark_terminal
    >>>
    >>> def charge(card: str) -> Result[str, str]:
    ...     resp = gateway.charge(card)
    ...     if resp.declined:
    ...         return mark_terminal(f"declined: {resp.reason}")
    ...     if not resp.ok:
    ...         return Err(f"gateway unavailable: {resp.status}")
    ...     return Ok(resp.receipt_id)
"""

from .result import (
    Err,
    Ok,
    Result,
    Terminal,
    mark_terminal,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Terminal",
    "mark_terminal",
]
