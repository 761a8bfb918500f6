"""Scan driver: one sequential health-check pass over every monitored link.

Probing is strictly one link at a time.  A failing link, or a failed write
for one record, never aborts the rest of the pass.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Callable, Optional

import httpx

from refhub.db import get_connection, init_db
from refhub.db.links import list_links, save_check
from refhub.health.classifier import classify
from refhub.health.models import LinkStatus, ScanSummary
from refhub.health.probe import build_client, probe_url

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_link(url: str, client: Optional[httpx.Client] = None) -> LinkStatus:
    """Probe and classify *url*.  Never raises."""
    try:
        return classify(probe_url(url, client=client))
    except Exception:
        logger.exception("Unexpected error while checking %s", url)
        return LinkStatus.unknown()


def run_scan(
    conn: sqlite3.Connection,
    client: Optional[httpx.Client] = None,
    clock: Optional[Clock] = None,
) -> ScanSummary:
    """Check every link in the store and write each verdict back.

    Args:
        conn: Open DB connection used for both the listing and the writes.
        client: Shared HTTP client.  One is built (and closed) for the pass
            when omitted.
        clock: Returns the timestamp stored as ``last_checked``.  Defaults to
            the current UTC time.

    Returns:
        A :class:`~refhub.health.models.ScanSummary` for the pass.
    """
    now = clock or _utc_now
    summary = ScanSummary(started_at=now())
    logger.info("--- Starting periodic link check at %s ---", summary.started_at.isoformat())

    links = list_links(conn)
    owns_client = client is None
    if client is None:
        client = build_client()

    try:
        for link in links:
            status = check_link(link.url, client=client)

            try:
                save_check(conn, link.url, status, checked_at=now())
            except (sqlite3.Error, ValueError) as exc:
                summary.failed_writes += 1
                logger.error("Could not save status for %s: %s", link.url, exc)
                continue

            summary.checked += 1
            if status.warning:
                summary.warnings += 1
            logger.info("[%-25s] %s: %s", status.label, link.title, link.url)
    finally:
        if owns_client:
            client.close()

    summary.finished_at = now()
    logger.info(
        "--- Link check complete. %d checked, %d warnings, %d failed writes. ---",
        summary.checked,
        summary.warnings,
        summary.failed_writes,
    )
    return summary


def run_scheduled_scan() -> ScanSummary:
    """Run one pass on a dedicated connection, closing it afterwards.

    This is the job the scheduler runs inside the API process, so the pass
    never shares a connection with request handlers.
    """
    conn = get_connection()
    try:
        init_db(conn)
        return run_scan(conn)
    finally:
        conn.close()
