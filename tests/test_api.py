"""Tests for the FastAPI routes."""

from __future__ import annotations

import time
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from upchek.api.server import create_app
from upchek.health.engine import HealthEngine
from upchek.remote.client import PeerClient

from .conftest import FIXED_TIME, make_result


def _offline_client() -> PeerClient:
    return PeerClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))


@pytest.fixture
def engine(scripts_dir: Path) -> HealthEngine:
    """Engine with one configured peer; background tasks are not started."""
    return HealthEngine(scripts_dir, peers=["peer"], client=_offline_client())


@pytest.fixture
def client(engine: HealthEngine) -> TestClient:
    return TestClient(create_app(engine, run_engine=False))


class TestHealthz:
    def test_good_script_is_ok(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("good.sh")])
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.text == "ok\n"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_bad_script_is_unhealthy(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("bad.sh", 1, stderr="boom")])
        resp = client.get("/healthz")
        assert resp.status_code == 503
        assert resp.text == "unhealthy\n"

    def test_verbose_lists_checks(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("good.sh"), make_result("bad.sh", 1, stderr="boom")])
        engine.store.update_peer("peer", [make_result("foo")], None)
        resp = client.get("/healthz?verbose")
        assert resp.status_code == 503
        lines = resp.text.splitlines()
        assert "[+]good.sh ok" in lines
        assert "[-]bad.sh failed" in lines
        assert "[+]peer:peer ok" in lines
        assert lines[-1] == "unhealthy"

    def test_no_results_is_ok(self, client: TestClient) -> None:
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.text == "ok\n"

    def test_peer_error_makes_global_unhealthy(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("good.sh")])
        engine.store.update_peer("peer", None, "unexpected status 500")
        resp = client.get("/healthz?verbose=1")
        assert resp.status_code == 503
        assert "[-]peer:peer failed" in resp.text


class TestResultsEndpoint:
    def test_results_json(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("good.sh", stdout="fine\n")])
        resp = client.get("/api/v1/results")
        assert resp.status_code == 200
        assert resp.json() == [{
            "Name": "good.sh",
            "ExitCode": 0,
            "Stdout": "fine\n",
            "Stderr": "",
            "LastRun": FIXED_TIME.timestamp(),
        }]

    def test_results_empty(self, client: TestClient) -> None:
        assert client.get("/api/v1/results").json() == []

    def test_results_exclude_peers(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.update_peer("peer", [make_result("foo")], None)
        assert client.get("/api/v1/results").json() == []


class TestStatusEndpoint:
    def test_status(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("good.sh")])
        engine.store.update_peer("peer", None, "unexpected status 500")
        data = client.get("/api/v1/status").json()
        assert data["local_ok"] is True
        assert data["remote_ok"] is False
        assert data["global_ok"] is False
        assert data["peers"]["peer"]["ok"] is False
        assert data["peers"]["peer"]["error"] == "unexpected status 500"


class TestIndex:
    def test_renders_results(self, engine: HealthEngine, client: TestClient) -> None:
        engine.store.replace_local([make_result("bad.sh", 1, stderr="<boom>")])
        engine.store.update_peer("peer", None, "connection refused")
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "bad.sh" in resp.text
        assert "&lt;boom&gt;" in resp.text
        assert "<boom>" not in resp.text
        assert "connection refused" in resp.text
        assert "unhealthy" in resp.text

    def test_unfetched_peer(self, client: TestClient) -> None:
        resp = client.get("/")
        assert "Not fetched yet." in resp.text


class TestLifespan:
    def test_engine_runs_on_startup(self, scripts_dir: Path, write_script) -> None:
        write_script("good.sh", "echo fine")
        engine = HealthEngine(scripts_dir, client=_offline_client(), interval=3600)
        with TestClient(create_app(engine)) as client:
            deadline = time.monotonic() + 5
            data = client.get("/api/v1/results").json()
            while not data and time.monotonic() < deadline:
                time.sleep(0.05)
                data = client.get("/api/v1/results").json()
            assert [r["Name"] for r in data] == ["good.sh"]
            assert client.get("/healthz").status_code == 200
        assert engine.shutdown.is_set()
