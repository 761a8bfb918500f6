"""Process-wide logging configuration.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the entry points (``refhub serve``, ``refhub scan``).
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Calling this again only adjusts the level; handlers are never duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(getattr(h, "_refhub", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._refhub = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level)
