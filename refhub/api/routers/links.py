"""Monitored-link endpoints.

Routes
------
GET   /api/links            All links sorted by (category, title)
                            (optional ?category= and ?warning= filters)
GET   /api/links/summary    Counts per status kind, scan state
POST  /api/scan             Start a link-check pass now
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from refhub.db.links import list_links, status_counts
from refhub.health.models import StatusKind

logger = logging.getLogger(__name__)

router = APIRouter()

_READ_FAILED = "Failed to retrieve links from database."


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class LinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    title: str
    category: str
    status: str
    status_kind: StatusKind = Field(alias="statusKind")
    last_checked: Optional[datetime] = Field(alias="lastChecked")
    link_rot_warning: bool = Field(alias="linkRotWarning")


class SummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    warnings: int
    by_kind: dict[str, int] = Field(alias="byKind")
    scan_running: bool = Field(alias="scanRunning")


class ScanResponse(BaseModel):
    started: bool
    detail: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/links", response_model=list[LinkResponse])
def get_links(
    request: Request,
    category: Optional[str] = None,
    warning: Optional[bool] = None,
) -> list[dict[str, Any]]:
    """Return every monitored link with its latest verdict."""
    conn = request.app.state.db
    try:
        links = list_links(conn, category=category, warning=warning)
    except sqlite3.Error as exc:
        logger.error("Error fetching links: %s", exc)
        raise HTTPException(status_code=500, detail=_READ_FAILED) from exc
    return [link.to_wire() for link in links]


@router.get("/links/summary", response_model=SummaryResponse)
def get_summary(request: Request) -> dict[str, Any]:
    """Return link counts per status kind."""
    conn = request.app.state.db
    try:
        counts = status_counts(conn)
        flagged = len(list_links(conn, warning=True))
    except sqlite3.Error as exc:
        logger.error("Error summarising links: %s", exc)
        raise HTTPException(status_code=500, detail=_READ_FAILED) from exc

    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "total": sum(counts.values()),
        "warnings": flagged,
        "byKind": counts,
        "scanRunning": bool(scheduler and scheduler.is_running),
    }


@router.post("/scan", response_model=ScanResponse, status_code=202)
def start_scan(request: Request) -> dict[str, Any]:
    """Start a link-check pass unless one is already running."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Scheduler is disabled.")

    if not scheduler.trigger():
        raise HTTPException(status_code=409, detail="A link check is already running.")
    return {"started": True, "detail": "Link check started."}
