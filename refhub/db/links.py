"""CRUD operations for the ``links`` table."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Iterable, Optional

from refhub.db.models import MonitoredLink, SeedLink
from refhub.health.models import LinkStatus, StatusKind


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_link(row: sqlite3.Row) -> MonitoredLink:
    status = LinkStatus(
        kind=StatusKind(row["status_kind"]),
        code=row["status_code"],
        detail=row["status_detail"],
    )
    return MonitoredLink(
        url=row["url"],
        title=row["title"],
        category=row["category"],
        status=status,
        last_checked=_parse_timestamp(row["last_checked"]),
        link_rot_warning=bool(row["link_rot_warning"]),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def list_links(
    conn: sqlite3.Connection,
    category: Optional[str] = None,
    warning: Optional[bool] = None,
) -> list[MonitoredLink]:
    """Return all links ordered by ``(category, title)``.

    Args:
        conn: Open DB connection.
        category: Only return links in this category.
        warning: Only return links whose ``link_rot_warning`` equals this.
    """
    clauses: list[str] = []
    params: list[object] = []
    if category is not None:
        clauses.append("category = ?")
        params.append(category)
    if warning is not None:
        clauses.append("link_rot_warning = ?")
        params.append(int(warning))

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = conn.execute(
        f"SELECT * FROM links {where} ORDER BY category ASC, title ASC",  # noqa: S608
        params,
    ).fetchall()
    return [_row_to_link(r) for r in rows]


def get_link(conn: sqlite3.Connection, url: str) -> Optional[MonitoredLink]:
    """Fetch a single link by URL.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM links WHERE url = ?", (url,)).fetchone()
    return _row_to_link(row) if row else None


def count_links(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT COUNT(*) FROM links").fetchone()
    return row[0] if row else 0


def create_link(
    conn: sqlite3.Connection,
    url: str,
    title: str,
    category: str,
) -> MonitoredLink:
    """Insert a new link in the ``Pending Check`` state and return it.

    Raises:
        ValueError: If a link with the same URL already exists.
    """
    if get_link(conn, url) is not None:
        raise ValueError(f"Link already exists: {url!r}")

    pending = LinkStatus.pending()
    with conn:
        conn.execute(
            """
            INSERT INTO links (url, title, category, status_kind, link_rot_warning)
            VALUES (?, ?, ?, ?, ?)
            """,
            (url, title, category, pending.kind.value, int(pending.warning)),
        )

    return get_link(conn, url)  # type: ignore[return-value]


def insert_links_if_empty(
    conn: sqlite3.Connection,
    links: Iterable[SeedLink],
) -> int:
    """Bulk-insert *links* only when the table holds no rows.

    The emptiness check and the inserts share one transaction, so a second
    caller never seeds twice.

    Returns:
        The number of rows inserted (0 when the table was already populated).
    """
    pending = LinkStatus.pending()
    rows = [
        (link.url, link.title, link.category, pending.kind.value, int(pending.warning))
        for link in links
    ]
    with conn:
        conn.execute("BEGIN IMMEDIATE")
        if count_links(conn) > 0:
            return 0
        conn.executemany(
            """
            INSERT INTO links (url, title, category, status_kind, link_rot_warning)
            VALUES (?, ?, ?, ?, ?)
            """,
            rows,
        )
    return len(rows)


def save_check(
    conn: sqlite3.Connection,
    url: str,
    status: LinkStatus,
    checked_at: datetime,
) -> MonitoredLink:
    """Record the result of one probe.

    Status columns, ``last_checked`` and ``link_rot_warning`` are written by a
    single ``UPDATE`` so readers never see one without the others.  The
    warning flag is always taken from ``status.warning``.

    Raises:
        ValueError: If *url* is not a monitored link.
        sqlite3.Error: On any storage failure.
    """
    with conn:
        cursor = conn.execute(
            """
            UPDATE links
               SET status_kind = ?,
                   status_code = ?,
                   status_detail = ?,
                   last_checked = ?,
                   link_rot_warning = ?
             WHERE url = ?
            """,
            (
                status.kind.value,
                status.code,
                status.detail,
                checked_at.isoformat(),
                int(status.warning),
                url,
            ),
        )
    if cursor.rowcount == 0:
        raise ValueError(f"Link not found: {url!r}")

    return get_link(conn, url)  # type: ignore[return-value]


def status_counts(conn: sqlite3.Connection) -> dict[str, int]:
    """Return ``{status_kind: count}`` for every kind currently stored."""
    rows = conn.execute(
        "SELECT status_kind, COUNT(*) AS n FROM links GROUP BY status_kind"
    ).fetchall()
    return {r["status_kind"]: r["n"] for r in rows}
