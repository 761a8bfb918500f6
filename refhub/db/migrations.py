"""Database initialisation.

``init_db(conn)`` is idempotent — safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from refhub.config import settings
from refhub.db.connection import StoreUnavailableError


def _read_schema() -> str:
    return settings.schema_path.read_text(encoding="utf-8")


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``links`` table and its indexes.

    Every DDL statement uses ``IF NOT EXISTS`` so calling this repeatedly on
    the same database is safe.

    Raises:
        StoreUnavailableError: If the schema cannot be applied.
    """
    try:
        conn.executescript(_read_schema())
    except (sqlite3.Error, OSError) as exc:
        raise StoreUnavailableError(f"Cannot initialise link store: {exc}") from exc
