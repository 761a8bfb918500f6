"""Initial set of monitored reference documents.

Loaded once, on first startup, when the link store is empty.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Sequence

from refhub.db.links import count_links, insert_links_if_empty
from refhub.db.models import SeedLink

logger = logging.getLogger(__name__)

SEED_LINKS: tuple[SeedLink, ...] = (
    SeedLink(
        url="https://ipindia.gov.in/writereaddata/portal/ipoact/1_31_1_patent-act-1970-11march2015.pdf",
        title="The Patents Act, 1970 (As amended)",
        category="Patents",
    ),
    SeedLink(
        url="https://ipindia.gov.in/",
        title="Copyright Act, 1957",
        category="Copyright",
    ),
    SeedLink(
        url="https://ipindia.gov.in/this-link-is-broken-on-purpose.html",
        title="Trademarks Act, 1999",
        category="Trademarks",
    ),
    SeedLink(
        url="https://www.indiacode.nic.in/bitstream/123456789/1981/5/A1999-48.pdf",
        title="Geographical Indications of Goods (Registration and Protection) Act, 1999",
        category="GI",
    ),
)


def seed_if_empty(
    conn: sqlite3.Connection,
    links: Sequence[SeedLink] = SEED_LINKS,
) -> int:
    """Insert *links* if the store has no records yet.

    Returns:
        Number of links inserted; 0 when the store was already populated.
    """
    inserted = insert_links_if_empty(conn, links)
    if inserted:
        logger.info("Database seeded with %d initial links.", inserted)
    else:
        logger.info(
            "Database already contains %d links. Skipping seed.", count_links(conn)
        )
    return inserted
