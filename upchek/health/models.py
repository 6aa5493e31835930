"""Health engine value types — check results, peer state, snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single executed script."""

    name: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class TimestampedResult:
    """A CheckResult plus the wall-clock time its run started."""

    result: CheckResult
    last_run: datetime = field(default_factory=utcnow)

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def exit_code(self) -> int:
        return self.result.exit_code

    @property
    def stdout(self) -> str:
        return self.result.stdout

    @property
    def stderr(self) -> str:
        return self.result.stderr

    @property
    def success(self) -> bool:
        return self.result.success


@dataclass(frozen=True)
class PeerState:
    """Latest known state of one remote peer.

    ``results`` always holds the last *successful* fetch. ``error`` holds the
    failure of the most recent cycle, or None if that cycle succeeded.
    """

    results: tuple[TimestampedResult, ...] = ()
    error: str | None = None
    last_fetch: datetime | None = None
    last_success: datetime | None = None
    latency_seconds: float | None = None
    consecutive_failures: int = 0

    @property
    def fetched(self) -> bool:
        return self.last_fetch is not None


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time, immutable view of the ResultStore."""

    local: tuple[TimestampedResult, ...] = ()
    peers: Mapping[str, PeerState] = field(default_factory=lambda: MappingProxyType({}))
    peer_addrs: tuple[str, ...] = ()
    taken_at: datetime = field(default_factory=utcnow)

    def peer(self, addr: str) -> PeerState:
        return self.peers.get(addr) or PeerState()
