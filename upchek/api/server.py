"""FastAPI server for upchek."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from upchek import __version__
from upchek.api.health_routes import health_router
from upchek.config import Settings, settings
from upchek.health.engine import HealthEngine

logger = logging.getLogger(__name__)


def build_engine(cfg: Settings | None = None) -> HealthEngine:
    cfg = cfg or settings
    return HealthEngine(
        scripts_dir=cfg.scripts_dir,
        peers=cfg.peer_addrs,
        interval=cfg.interval_seconds,
    )


def create_app(engine: HealthEngine | None = None, run_engine: bool = True) -> FastAPI:
    """Create the app around ``engine`` (built from settings if omitted).

    With ``run_engine=False`` the lifespan does not start background tasks;
    the store is served as-is.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        eng: HealthEngine = app.state.engine
        if run_engine:
            try:
                await eng.start()
            except Exception:
                logger.exception("Health engine failed to start")
        yield
        if run_engine:
            await eng.stop()

    app = FastAPI(
        title="upchek",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.engine = engine or build_engine()
    app.include_router(health_router)
    return app
