"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection (shared across all
requests via ``request.app.state.db``), initialises the schema and seeds the
link store if it is empty.  When the scheduler is enabled it then starts a
:class:`~refhub.health.scheduler.Scheduler`, which runs one link check
immediately and then on the configured wall-clock cadence.  On shutdown the
scheduler is stopped (an in-flight pass is not awaited) and the connection
closed.

A store that cannot be opened is fatal: the lifespan raises
:class:`~refhub.db.StoreUnavailableError` and the server does not start.

Routers
-------
    /          — liveness message
    /api       — link listing, summary, manual scan trigger
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from refhub.config import settings
from refhub.db import get_connection, init_db
from refhub.health.scanner import run_scheduled_scan
from refhub.health.scheduler import Scheduler
from refhub.seed import seed_if_empty

from refhub.api.routers import links as links_router

logger = logging.getLogger(__name__)


def build_scheduler() -> Scheduler:
    """Return a scheduler wired to the scan driver and current settings."""
    return Scheduler(
        run_scheduled_scan,
        timezone=settings.scan_timezone,
        interval_minutes=settings.scan_interval_minutes,
        run_on_start=settings.scan_on_startup,
    )


def create_app(
    enable_scheduler: Optional[bool] = None,
    db_path: Optional[Path] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    Args:
        enable_scheduler: Start periodic link checks with the app.  Defaults
            to ``settings.scheduler_enabled``.
        db_path: Override the DB path (``":memory:"`` in tests).
    """
    scheduler_on = settings.scheduler_enabled if enable_scheduler is None else enable_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Open and seed the DB on startup; stop the scheduler and close on shutdown."""
        conn = get_connection(db_path)
        init_db(conn)
        logger.info("Link store connected.")
        seed_if_empty(conn)
        app.state.db = conn

        scheduler = build_scheduler() if scheduler_on else None
        app.state.scheduler = scheduler
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                scheduler.stop(timeout=1.0)
            conn.close()

    app = FastAPI(
        title="Reference Hub API",
        description=(
            "Read interface for the Reference Hub link monitor. Lists the "
            "monitored reference documents with their latest health verdict "
            "and link-rot warning."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # The original frontend is served from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    def root() -> str:
        return "Reference Hub backend is running and connected to its link store."

    app.include_router(links_router.router, prefix="/api", tags=["links"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn refhub.api.app:app
app = create_app()
