"""Fill-once memo cell with a re-entrancy guard.

A ``Lazy`` moves through three states: UNFILLED -> FILLING -> FILLED. Asking
for the value while it is FILLING means the fill function depends on itself
(or another thread is mid-computation); that is a programming error and
raises ``ReentrantFillError`` instead of recursing or blocking.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ReentrantFillError(RuntimeError):
    """Raised when a Lazy value is requested while it is being computed."""


class FillState(str, Enum):
    UNFILLED = "unfilled"
    FILLING = "filling"
    FILLED = "filled"


class Lazy(Generic[T]):
    """A value computed at most once."""

    __slots__ = ("_state", "_value", "_lock")

    def __init__(self) -> None:
        self._state = FillState.UNFILLED
        self._value: T | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> FillState:
        return self._state

    @property
    def filled(self) -> bool:
        return self._state is FillState.FILLED

    def _begin_fill(self) -> bool:
        """Claim the cell for filling. Returns False if already filled."""
        with self._lock:
            if self._state is FillState.FILLED:
                return False
            if self._state is FillState.FILLING:
                raise ReentrantFillError("Lazy value requested while it is being computed")
            self._state = FillState.FILLING
            return True

    def get(self, fill: Callable[[], T]) -> T:
        """Return the value, calling ``fill`` the first time only."""
        if self._begin_fill():
            try:
                value = fill()
            except BaseException:
                with self._lock:
                    self._state = FillState.UNFILLED
                raise
            with self._lock:
                self._value = value
                self._state = FillState.FILLED
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> bool:
        """Fill the cell directly. Returns False if it was already filled."""
        if not self._begin_fill():
            return False
        with self._lock:
            self._value = value
            self._state = FillState.FILLED
        return True
