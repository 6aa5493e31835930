"""Health engine — wires the result store, local scheduler and peer pollers.

The engine owns the single shutdown signal every background task observes.
It is the only object the HTTP layer talks to.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from upchek.remote.client import PeerClient
from upchek.remote.poller import PeerPoller

from .models import Snapshot
from .scheduler import DEFAULT_INTERVAL, LocalScheduler
from .status import DerivedStatus
from .store import ResultStore

logger = logging.getLogger(__name__)


class HealthEngine:
    """Runs local checks and peer polling against one shared ResultStore."""

    def __init__(
        self,
        scripts_dir: Path | str,
        peers: Iterable[str] = (),
        interval: float = DEFAULT_INTERVAL,
        client: PeerClient | None = None,
    ) -> None:
        self.shutdown = threading.Event()
        self.store = ResultStore(peers)
        self.scheduler = LocalScheduler(scripts_dir, self.store, self.shutdown, interval)
        self.client = client or PeerClient()
        self.pollers = [
            PeerPoller(addr, self.client, self.store, self.shutdown, interval)
            for addr in self.store.peer_addrs
        ]
        self._started = False

    @property
    def peer_addrs(self) -> tuple[str, ...]:
        return self.store.peer_addrs

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.shutdown.clear()
        await self.scheduler.start()
        for poller in self.pollers:
            await poller.start()
        logger.info(
            "Health engine started: dir=%s peers=%d",
            self.scheduler.directory, len(self.pollers),
        )

    async def stop(self) -> None:
        """Signal shutdown and wait for every task to exit."""
        self.shutdown.set()
        for poller in self.pollers:
            await poller.stop()
        await self.scheduler.stop()
        await self.client.close()
        self._started = False
        logger.info("Health engine stopped")

    def snapshot(self) -> Snapshot:
        return self.store.snapshot()

    def status(self) -> DerivedStatus:
        """Derived status over a fresh snapshot."""
        return DerivedStatus(self.store.snapshot())
