"""Result type returned by retried operations.

A three-way discriminated union:
- Ok: the operation succeeded, stop and return the value
- Err: an ordinary failure, retry while the attempt budget lasts
- Terminal: a failure that must not be retried, stop and return it unwrapped

Operations tell the retry loop what to do purely through the variant they
return; the loop never inspects the failure value itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar, cast

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Failure type
U = TypeVar("U")  # Mapped success type
F = TypeVar("F")  # Mapped failure type


class Result(Generic[T, E]):
    """Success (Ok), retryable failure (Err) or terminal failure (Terminal).

    Examples:
        >>> Ok(42).map(lambda x: x * 2).unwrap()
        84
        >>> Err("boom").is_terminal()
        False
        >>> mark_terminal("bad request").is_terminal()
        True

    Notes:
        - Uses __slots__, immutable (all operations return a new Result)
        - Terminal is a kind of Err: is_err() is True for both
    """

    __slots__ = ("_value", "_is_ok", "_terminal")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool, terminal: bool = False) -> None:
        """Private constructor. Use Ok(), Err() or Terminal() instead."""
        self._value: T | E = value
        self._is_ok: bool = is_ok
        self._terminal: bool = terminal and not is_ok

    # ─────────────────────────────────────────────────────────────────
    # Variant Checks
    # ─────────────────────────────────────────────────────────────────

    def is_ok(self) -> bool:
        return self._is_ok

    def is_err(self) -> bool:
        """True for both retryable and terminal failures."""
        return not self._is_ok

    def is_terminal(self) -> bool:
        """True only for failures marked as non-retryable."""
        return self._terminal

    def is_retryable(self) -> bool:
        return not self._is_ok and not self._terminal

    # ─────────────────────────────────────────────────────────────────
    # Value Extraction
    # ─────────────────────────────────────────────────────────────────

    def unwrap(self) -> T:
        """Extract Ok value.

        Raises:
            RuntimeError: If Result is a failure
        """
        if self._is_ok:
            return cast(T, self._value)
        raise RuntimeError(f"Called unwrap() on {self._variant()} value: {self._value}")

    def unwrap_err(self) -> E:
        """Extract the failure value (retryable or terminal).

        Raises:
            RuntimeError: If Result is Ok
        """
        if not self._is_ok:
            return cast(E, self._value)
        raise RuntimeError(f"Called unwrap_err() on Ok value: {self._value}")

    def unwrap_or(self, default: T) -> T:
        return cast(T, self._value) if self._is_ok else default

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        return cast(T, self._value) if self._is_ok else f(cast(E, self._value))

    def expect(self, msg: str) -> T:
        """Extract Ok value with custom panic message."""
        if self._is_ok:
            return cast(T, self._value)
        raise RuntimeError(f"{msg}: {self._value}")

    def ok(self) -> T | None:
        return cast(T, self._value) if self._is_ok else None

    def err(self) -> E | None:
        return cast(E, self._value) if not self._is_ok else None

    # ─────────────────────────────────────────────────────────────────
    # Combinators
    # ─────────────────────────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Map function over Ok value, failures pass through with their kind kept."""
        if self._is_ok:
            return Ok(f(cast(T, self._value)))
        return Result(cast(E, self._value), is_ok=False, terminal=self._terminal)

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Map function over the failure value. A terminal failure stays terminal."""
        if not self._is_ok:
            return Result(f(cast(E, self._value)), is_ok=False, terminal=self._terminal)
        return Ok(cast(T, self._value))

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain an operation that can itself fail (monadic bind)."""
        if self._is_ok:
            return f(cast(T, self._value))
        return Result(cast(E, self._value), is_ok=False, terminal=self._terminal)

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return self.flat_map(f)

    def inspect_err(self, f: Callable[[E], None]) -> Result[T, E]:
        """Call function with the failure value for side effects, return self."""
        if not self._is_ok:
            f(cast(E, self._value))
        return self

    def into_retryable(self) -> Result[T, E]:
        """Strip the terminal tag: Terminal(e) becomes Err(e), anything else is returned as is."""
        return Err(cast(E, self._value)) if self._terminal else self

    def match(
        self,
        *,
        ok: Callable[[T], U],
        err: Callable[[E], U],
        terminal: Callable[[E], U] | None = None,
    ) -> U:
        """Case analysis over the variants. Without `terminal`, terminal failures go to `err`."""
        if self._is_ok:
            return ok(cast(T, self._value))
        if self._terminal and terminal is not None:
            return terminal(cast(E, self._value))
        return err(cast(E, self._value))

    # ─────────────────────────────────────────────────────────────────
    # Dunder Methods
    # ─────────────────────────────────────────────────────────────────

    def _variant(self) -> str:
        return "Ok" if self._is_ok else ("Terminal" if self._terminal else "Err")

    def __bool__(self) -> bool:
        return self._is_ok

    def __repr__(self) -> str:
        return f"{self._variant()}({self._value!r})"

    def __str__(self) -> str:
        return repr(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (
            self._is_ok == other._is_ok
            and self._terminal == other._terminal
            and self._value == other._value
        )

    def __hash__(self) -> int:
        return hash((self._is_ok, self._terminal, self._value))

    def __iter__(self) -> Iterator[T]:
        """Yield the Ok value (0 or 1 element)."""
        if self._is_ok:
            yield cast(T, self._value)


# ═════════════════════════════════════════════════════════════════════════════
# Constructor Functions
# ═════════════════════════════════════════════════════════════════════════════


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct the success variant."""
    return Result(value, is_ok=True)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct a retryable failure."""
    return Result(error, is_ok=False)


def Terminal(error: E | Result[T, E]) -> Result[T, E]:  # noqa: N802
    """Construct a failure the retry loop must not retry.

    A failed Result is re-tagged rather than nested; an already terminal one is
    returned unchanged.

    Raises:
        ValueError: If given an Ok result; success cannot be terminal
    """
    if isinstance(error, Result):
        if error.is_ok():
            raise ValueError("Cannot mark an Ok result as terminal")
        return error if error.is_terminal() else Result(error.unwrap_err(), is_ok=False, terminal=True)
    return Result(error, is_ok=False, terminal=True)


def mark_terminal(failure: E | Result[T, E]) -> Result[T, E]:
    """Mark a failure as terminal so the retry loop stops and returns it as is.

    Accepts a raw failure value or an existing failed Result. Marking an
    already terminal Result returns it unchanged (never double-wrapped).

    Raises:
        ValueError: If given an Ok result; success cannot be terminal

    Example:
        >>> def fetch() -> Result[bytes, str]:
        ...     status = call_api()
        ...     if status >= 500:
        ...         return Err(f"server error {status}")
        ...     if status != 200:
        ...         return mark_terminal(f"client error {status}")
        ...     return Ok(body)
    """
    return Terminal(failure)
