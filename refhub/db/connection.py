"""SQLite connection factory.

Usage::

    from refhub.db.connection import get_connection

    with get_connection() as conn:
        cursor = conn.execute("SELECT 1")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from refhub.config import settings


class StoreUnavailableError(RuntimeError):
    """The link store could not be opened or initialised.

    This is the only fatal condition at startup: the process must exit rather
    than retry.
    """


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Steps performed on every new connection:
    1. Enable ``PRAGMA foreign_keys = ON``.
    2. Switch to WAL journal mode so the API can read while a scan writes.

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.

    Returns:
        A configured :class:`sqlite3.Connection` with ``row_factory`` set to
        :class:`sqlite3.Row` so columns can be accessed by name.

    Raises:
        StoreUnavailableError: If the database file cannot be opened.
    """
    path = db_path or settings.db_path

    try:
        # Create parent directory if needed (no-op for `:memory:`)
        if db_path is None:
            settings.ensure_workspace()
        elif str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(path), check_same_thread=False)
        conn.row_factory = sqlite3.Row

        # PRAGMAs
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
    except (sqlite3.Error, OSError) as exc:
        raise StoreUnavailableError(f"Cannot open link store at {path}: {exc}") from exc

    return conn
