"""Background poller — periodically fetches one peer's results into the store.

One PeerPoller runs per configured peer, each in its own task, so a slow or
unreachable peer never delays the others.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time

from upchek.health.errors import FetchError
from upchek.health.models import PeerState
from upchek.health.store import ResultStore
from upchek.remote.client import PeerClient

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0


class PeerPoller:
    """Polls a single peer's /api/v1/results on a fixed interval."""

    def __init__(
        self,
        addr: str,
        client: PeerClient,
        store: ResultStore,
        shutdown: threading.Event | None = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.addr = addr
        self.client = client
        self.store = store
        self.shutdown = shutdown or threading.Event()
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._running = False

    def __repr__(self) -> str:
        return f"PeerPoller({self.addr})"

    async def start(self) -> None:
        """Start the background polling loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._poll_loop(), name=f"upchek-peer-{self.addr}")
        logger.info("Peer poller started: %s (interval=%ss)", self.addr, self.interval)

    async def stop(self) -> None:
        """Stop the poller, abandoning any in-flight request."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Peer poller stopped: %s", self.addr)

    async def _poll_loop(self) -> None:
        while self._running and not self.shutdown.is_set():
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unexpected error polling %s", self.addr)
            if self.shutdown.is_set():
                break
            await asyncio.sleep(self.interval)

    async def poll_once(self) -> PeerState:
        """Fetch once and record the outcome; only cancellation propagates."""
        t0 = time.perf_counter()
        try:
            results = await self.client.fetch_results(self.addr)
        except FetchError as e:
            state = self.store.update_peer(self.addr, None, e.detail)
            if state.consecutive_failures == 1:
                logger.warning("Failed to fetch remote results from %s: %s", self.addr, e.detail)
            else:
                logger.debug(
                    "Peer %s still failing (%d consecutive): %s",
                    self.addr, state.consecutive_failures, e.detail,
                )
            return state
        except asyncio.CancelledError:
            raise
        except Exception as e:
            detail = f"{type(e).__name__}: {e}"
            state = self.store.update_peer(self.addr, None, detail)
            logger.exception("Unexpected error fetching remote results from %s", self.addr)
            return state

        latency = time.perf_counter() - t0
        state = self.store.update_peer(self.addr, results, None, latency_seconds=latency)
        logger.debug(
            "Fetched remote results: addr=%s count=%d duration=%.0fms",
            self.addr, len(results), latency * 1000,
        )
        return state
