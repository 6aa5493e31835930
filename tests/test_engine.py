"""End-to-end tests for the health engine wiring."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from upchek.health.engine import HealthEngine
from upchek.remote.client import PeerClient

pytestmark = pytest.mark.asyncio

GOOD_PEER = [{"Name": "foo", "ExitCode": 0, "Stdout": "", "Stderr": "", "LastRun": 1741397010}]


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "healthy":
        return httpx.Response(200, json=GOOD_PEER)
    return httpx.Response(500, text="internal server error")


async def _settle(engine: HealthEngine, timeout: float = 5.0) -> None:
    """Wait until the first local cycle and every peer fetch have landed."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        snap = engine.snapshot()
        if engine.scheduler.cycles and all(snap.peer(a).fetched for a in snap.peer_addrs):
            return
        await asyncio.sleep(0.02)
    raise AssertionError("engine did not settle")


async def test_global_status(scripts_dir: Path, write_script) -> None:
    write_script("good.sh", "exit 0")
    client = PeerClient(transport=httpx.MockTransport(_handler))
    engine = HealthEngine(scripts_dir, peers=["healthy", "broken"], interval=3600, client=client)
    await engine.start()
    try:
        await _settle(engine)
        status = engine.status()
    finally:
        await engine.stop()

    assert status.local_ok
    assert dict(status.peer_ok) == {"healthy": True, "broken": False}
    assert not status.remote_ok
    assert not status.global_ok


async def test_all_healthy(scripts_dir: Path, write_script) -> None:
    write_script("good.sh", "exit 0")
    client = PeerClient(transport=httpx.MockTransport(_handler))
    engine = HealthEngine(scripts_dir, peers=["healthy"], interval=3600, client=client)
    await engine.start()
    try:
        await _settle(engine)
        assert engine.status().global_ok
    finally:
        await engine.stop()


async def test_stop_abandons_running_script(scripts_dir: Path, write_script) -> None:
    write_script("slow.sh", "sleep 30")
    client = PeerClient(transport=httpx.MockTransport(_handler))
    engine = HealthEngine(scripts_dir, interval=3600, client=client)
    await engine.start()
    await asyncio.sleep(0.2)
    await asyncio.wait_for(engine.stop(), timeout=5)
    assert engine.shutdown.is_set()
    assert engine.snapshot().local == ()


async def test_each_snapshot_is_fresh(scripts_dir: Path) -> None:
    engine = HealthEngine(scripts_dir, client=PeerClient(transport=httpx.MockTransport(_handler)))
    try:
        first = engine.status()
        assert first.global_ok
        engine.store.replace_local([])
        assert engine.status() is not first
        assert engine.snapshot() is not engine.snapshot()
    finally:
        await engine.client.close()
