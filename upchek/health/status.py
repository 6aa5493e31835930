"""Derived health status over a single Snapshot.

Every field is computed lazily, once, and cached for the lifetime of the
DerivedStatus. A DerivedStatus belongs to the request that built it and is
never shared across tasks.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .lazy import Lazy
from .models import PeerState, Snapshot


def peer_is_ok(state: PeerState) -> bool:
    """A peer is ok iff its last fetch succeeded and every result passed."""
    if state.error is not None:
        return False
    return all(r.success for r in state.results)


class DerivedStatus:
    """Local / remote / global health for one Snapshot."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self._local_ok: Lazy[bool] = Lazy()
        self._peer_ok: Lazy[Mapping[str, bool]] = Lazy()
        self._remote_ok: Lazy[bool] = Lazy()
        self._global_ok: Lazy[bool] = Lazy()

    @property
    def local_ok(self) -> bool:
        return self._local_ok.get(lambda: all(r.success for r in self.snapshot.local))

    @property
    def peer_ok(self) -> Mapping[str, bool]:
        return self._peer_ok.get(self._compute_peer_ok)

    @property
    def remote_ok(self) -> bool:
        return self._remote_ok.get(lambda: all(self.peer_ok.values()))

    @property
    def global_ok(self) -> bool:
        return self._global_ok.get(lambda: self.local_ok and self.remote_ok)

    def _compute_peer_ok(self) -> Mapping[str, bool]:
        snap = self.snapshot
        return MappingProxyType({addr: peer_is_ok(snap.peer(addr)) for addr in snap.peer_addrs})

    def failing_checks(self) -> list[str]:
        """Names of local checks whose last run failed."""
        return [r.name for r in self.snapshot.local if not r.success]

    def to_dict(self) -> dict[str, Any]:
        snap = self.snapshot
        peers: dict[str, Any] = {}
        for addr in snap.peer_addrs:
            state = snap.peer(addr)
            peers[addr] = {
                "ok": self.peer_ok[addr],
                "error": state.error,
                "last_fetch": state.last_fetch.isoformat() if state.last_fetch else None,
                "last_success": state.last_success.isoformat() if state.last_success else None,
                "latency_seconds": state.latency_seconds,
                "consecutive_failures": state.consecutive_failures,
                "checks": len(state.results),
                "failing": [r.name for r in state.results if not r.success],
            }
        return {
            "local_ok": self.local_ok,
            "remote_ok": self.remote_ok,
            "global_ok": self.global_ok,
            "local": {
                "checks": len(snap.local),
                "failing": self.failing_checks(),
            },
            "peers": peers,
            "taken_at": snap.taken_at.isoformat(),
        }
