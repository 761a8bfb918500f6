"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from refhub.health.models import LinkStatus


@dataclass
class MonitoredLink:
    url: str
    title: str
    category: str
    status: LinkStatus = field(default_factory=LinkStatus.pending)
    last_checked: datetime | None = None
    link_rot_warning: bool = False

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase record shape served by the read API."""
        return {
            "url": self.url,
            "title": self.title,
            "category": self.category,
            "status": self.status.label,
            "statusKind": self.status.kind.value,
            "lastChecked": self.last_checked,
            "linkRotWarning": self.link_rot_warning,
        }


@dataclass(frozen=True)
class SeedLink:
    url: str
    title: str
    category: str
