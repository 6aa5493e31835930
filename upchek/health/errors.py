"""Error types for the health engine.

A non-zero script exit code is not an error: it is a normal CheckResult
with ``success == False``.
"""

from __future__ import annotations


class UpchekError(Exception):
    """Base class for upchek errors."""


class ExecutionError(UpchekError):
    """Raised when a script cannot be invoked; aborts the current cycle."""


class FetchError(UpchekError):
    """Raised when a peer's results cannot be fetched or decoded."""

    def __init__(self, addr: str, detail: str, status_code: int | None = None) -> None:
        self.addr = addr
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{addr}: {detail}")
