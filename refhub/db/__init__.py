"""Database layer package.

Public re-exports so callers can write::

    from refhub.db import get_connection, init_db
    from refhub.db import links
"""

from refhub.db.connection import StoreUnavailableError, get_connection
from refhub.db.migrations import init_db
from refhub.db import links

__all__ = ["get_connection", "init_db", "links", "StoreUnavailableError"]
