"""Turns a probe outcome into a :class:`~refhub.health.models.LinkStatus`."""

from __future__ import annotations

from typing import Optional

from refhub.health.models import (
    LinkStatus,
    NetworkError,
    ProbeOutcome,
    Responded,
    ServerError,
    StatusKind,
    TimedOut,
)

# Many document hosts answer 200 with an HTML "not found" page.  Matching is
# case-sensitive and English-only.
SOFT_404_MARKERS = ("Error 404", "page not found")

NETWORK_MESSAGE_LIMIT = 50


def _looks_like_soft_404(body: Optional[str]) -> bool:
    if not body:
        return False
    return any(marker in body for marker in SOFT_404_MARKERS)


def classify(outcome: ProbeOutcome) -> LinkStatus:
    """Classify a single probe outcome.

    Pure function: no I/O, no clock.  Anything it does not recognise maps to
    ``Unknown Error`` rather than raising.
    """
    if isinstance(outcome, Responded):
        code = outcome.status_code
        if 200 <= code < 400:
            if _looks_like_soft_404(outcome.body):
                return LinkStatus(StatusKind.SOFT_404, code=code)
            return LinkStatus(StatusKind.OK, code=code)
        if 400 <= code < 500:
            return LinkStatus(StatusKind.FAILED, code=code)
        return LinkStatus.unknown()

    if isinstance(outcome, ServerError):
        return LinkStatus(StatusKind.FAILED, code=outcome.status_code)

    if isinstance(outcome, TimedOut):
        return LinkStatus(StatusKind.TIMEOUT)

    if isinstance(outcome, NetworkError):
        message = (outcome.message or "")[:NETWORK_MESSAGE_LIMIT]
        return LinkStatus(StatusKind.NETWORK_ERROR, detail=message)

    return LinkStatus.unknown()
