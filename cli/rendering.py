"""Utilities for rendering link tables in the CLI."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from refhub.db.models import MonitoredLink
from refhub.health.models import LinkStatus, StatusKind

_ICONS = {
    StatusKind.PENDING: "⏳",
    StatusKind.OK: "✅",
    StatusKind.SOFT_404: "⚠️",
    StatusKind.FAILED: "❌",
    StatusKind.TIMEOUT: "⌛",
    StatusKind.NETWORK_ERROR: "🔌",
    StatusKind.UNKNOWN: "❓",
}


def status_icon(status: LinkStatus) -> str:
    return _ICONS.get(status.kind, "•")


def format_checked(value: Optional[datetime]) -> str:
    """Return a short local-time rendering of *value*, or ``never``."""
    if value is None:
        return "never"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def render_links_table(links: List[MonitoredLink]) -> str:
    """Render *links* as a plain-text table, grouped by category.

    Args:
        links: Links, already sorted by (category, title).

    Returns:
        The table as a single string (no trailing newline).
    """
    if not links:
        return "No links found."

    status_width = max(len(link.status.label) for link in links)
    lines: List[str] = []
    current_category = None
    for link in links:
        if link.category != current_category:
            if current_category is not None:
                lines.append("")
            lines.append(f"[{link.category.upper()}]")
            current_category = link.category
        lines.append(
            f"  {status_icon(link.status)} {link.status.label:<{status_width}}  "
            f"{format_checked(link.last_checked):<16}  {link.title}"
        )
        lines.append(f"      {link.url}")
    return "\n".join(lines)
