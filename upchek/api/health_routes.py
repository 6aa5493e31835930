"""HTTP routes for the health engine.

Endpoints:
  GET /                 — HTML dashboard
  GET /api/v1/results   — local results as JSON (the format peers poll)
  GET /api/v1/status    — derived local / remote / global status
  GET /healthz          — 200 "ok" or 503 "unhealthy"; ?verbose lists checks
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from upchek.api.render import render_healthz, render_index
from upchek.health.engine import HealthEngine
from upchek.remote.models import dump_results

logger = logging.getLogger(__name__)

health_router = APIRouter()


def _engine(request: Request) -> HealthEngine:
    return request.app.state.engine


@health_router.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    status = _engine(request).status()
    return HTMLResponse(render_index(status))


@health_router.get("/api/v1/results")
def results(request: Request) -> list[dict[str, Any]]:
    """Latest local results in script filename order."""
    snap = _engine(request).snapshot()
    return dump_results(snap.local)


@health_router.get("/api/v1/status")
def status(request: Request) -> dict[str, Any]:
    return _engine(request).status().to_dict()


@health_router.get("/healthz", response_class=PlainTextResponse)
def healthz(request: Request) -> PlainTextResponse:
    verbose = "verbose" in request.query_params
    status = _engine(request).status()
    if not status.global_ok:
        logger.debug(
            "Reporting unhealthy: local_ok=%s remote_ok=%s",
            status.local_ok, status.remote_ok,
        )
    return PlainTextResponse(
        render_healthz(status, verbose=verbose),
        status_code=200 if status.global_ok else 503,
    )
