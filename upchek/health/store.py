"""In-memory result store shared by the scheduler, pollers and HTTP layer.

Only the most recent local cycle and the most recent state per peer are kept.
All mutation goes through ``replace_local`` and ``update_peer``; readers get
an immutable ``Snapshot``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from types import MappingProxyType

from .models import PeerState, Snapshot, TimestampedResult, utcnow

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or a single writer; waiting writers go first."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ResultStore:
    """Thread-safe holder of local results and per-peer state."""

    def __init__(self, peer_addrs: Iterable[str] = ()) -> None:
        self._lock = ReadWriteLock()
        self._peer_addrs = tuple(dict.fromkeys(peer_addrs))
        self._local: tuple[TimestampedResult, ...] = ()
        self._peers: dict[str, PeerState] = {addr: PeerState() for addr in self._peer_addrs}

    @property
    def peer_addrs(self) -> tuple[str, ...]:
        return self._peer_addrs

    def replace_local(self, results: Iterable[TimestampedResult]) -> None:
        """Swap the entire local result sequence in one step."""
        new = tuple(results)
        with self._lock.write():
            self._local = new
        logger.debug("Local results replaced: %d checks", len(new))

    def update_peer(
        self,
        addr: str,
        results: Iterable[TimestampedResult] | None,
        error: str | None,
        *,
        latency_seconds: float | None = None,
        at: datetime | None = None,
    ) -> PeerState:
        """Record the outcome of one fetch cycle for ``addr``.

        With ``error`` set, previous results are kept and the failure is
        recorded. Otherwise ``results`` replace the old ones and any earlier
        error is cleared.
        """
        now = at or utcnow()
        with self._lock.write():
            prev = self._peers.get(addr) or PeerState()
            if error is not None:
                state = PeerState(
                    results=prev.results,
                    error=error,
                    last_fetch=now,
                    last_success=prev.last_success,
                    latency_seconds=prev.latency_seconds,
                    consecutive_failures=prev.consecutive_failures + 1,
                )
            else:
                state = PeerState(
                    results=tuple(results or ()),
                    error=None,
                    last_fetch=now,
                    last_success=now,
                    latency_seconds=latency_seconds,
                    consecutive_failures=0,
                )
            self._peers[addr] = state
        return state

    def snapshot(self) -> Snapshot:
        """Return a consistent, immutable view of everything stored."""
        with self._lock.read():
            local = self._local
            peers = dict(self._peers)
        addrs = self._peer_addrs + tuple(a for a in peers if a not in self._peer_addrs)
        return Snapshot(local=local, peers=MappingProxyType(peers), peer_addrs=addrs)
