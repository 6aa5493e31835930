"""Local scheduler — runs every executable script in a directory on an interval.

Scripts run one after another in a worker thread so the event loop stays
free for HTTP requests. Each completed pass replaces the store's local
results wholesale; a pass that hits an ExecutionError leaves the previous
results in place.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .errors import ExecutionError
from .executor import is_executable, run_script
from .models import TimestampedResult, utcnow
from .store import ResultStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30.0


class _AnyEvent:
    """Reads as set once any of the wrapped events is set."""

    def __init__(self, *events: threading.Event) -> None:
        self._events = events

    def is_set(self) -> bool:
        return any(e.is_set() for e in self._events)


class LocalScheduler:
    """Periodically executes local health-check scripts."""

    def __init__(
        self,
        directory: Path | str,
        store: ResultStore,
        shutdown: threading.Event | None = None,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.directory = Path(directory)
        self.store = store
        self.shutdown = shutdown or threading.Event()
        self.interval = interval
        self._executor: ThreadPoolExecutor | None = None
        self._cycle_cancel: threading.Event | None = None
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self.cycles = 0
        self.last_error: str | None = None

    async def start(self) -> None:
        """Start the scheduling loop; the first cycle runs immediately."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="upchek-local-scheduler")
        logger.info("Local scheduler started (dir=%s, interval=%ss)", self.directory, self.interval)

    async def stop(self) -> None:
        """Stop the loop and kill any in-flight script."""
        self._running = False
        if self._cycle_cancel is not None:
            self._cycle_cancel.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        logger.info("Local scheduler stopped")

    def _list_scripts(self) -> list[Path]:
        try:
            entries = sorted(self.directory.iterdir())
        except OSError as e:
            raise ExecutionError(f"reading directory {self.directory}: {e}") from e

        scripts = []
        for entry in entries:
            if not is_executable(entry):
                logger.debug("Skipping non-executable file: %s", entry.name)
                continue
            scripts.append(entry)
        return scripts

    def _run_all(self, cancel: _AnyEvent) -> list[TimestampedResult]:
        """Blocking body of one cycle; runs in the worker thread."""
        results = []
        for script in self._list_scripts():
            started = utcnow()
            t0 = time.perf_counter()
            result = run_script(script, cancel)
            logger.debug(
                "Ran %s: exit=%d (%.0fms)",
                script.name, result.exit_code, (time.perf_counter() - t0) * 1000,
            )
            results.append(TimestampedResult(result=result, last_run=started))
        return results

    async def run_cycle(self) -> list[TimestampedResult]:
        """Run every script once and publish the results.

        Raises ExecutionError without touching the store if any script could
        not be run.
        """
        loop = asyncio.get_running_loop()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="upchek-script")
        self._cycle_cancel = threading.Event()
        cancel = _AnyEvent(self.shutdown, self._cycle_cancel)
        results = await loop.run_in_executor(self._executor, self._run_all, cancel)
        self.store.replace_local(results)
        self.cycles += 1
        failing = sum(1 for r in results if not r.success)
        logger.debug("Local cycle done: %d checks, %d failing", len(results), failing)
        return results

    async def _loop(self) -> None:
        while self._running and not self.shutdown.is_set():
            try:
                await self.run_cycle()
                self.last_error = None
            except asyncio.CancelledError:
                raise
            except ExecutionError as e:
                self.last_error = str(e)
                logger.error("Failed to run scripts: %s", e)
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                logger.exception("Unexpected error in local cycle")

            if self.shutdown.is_set():
                break
            await asyncio.sleep(self.interval)
