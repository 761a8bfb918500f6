"""Data models for the link-health pipeline.

Probe outcomes are what :func:`~refhub.health.probe.probe_url` returns; a
:class:`LinkStatus` is what the classifier turns them into and what the
store persists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


# ---------------------------------------------------------------------------
# Probe outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Responded:
    """The server answered with a status code in [200, 500)."""

    status_code: int
    body: Optional[str] = None


@dataclass(frozen=True)
class TimedOut:
    """The request did not complete within the probe timeout."""


@dataclass(frozen=True)
class NetworkError:
    """No usable response: DNS, TLS, connection reset, too many redirects."""

    message: str


@dataclass(frozen=True)
class ServerError:
    """The server answered with a status code >= 500."""

    status_code: int


ProbeOutcome = Union[Responded, TimedOut, NetworkError, ServerError]


# ---------------------------------------------------------------------------
# Link status
# ---------------------------------------------------------------------------

class StatusKind(str, Enum):
    PENDING = "pending"
    OK = "ok"
    SOFT_404 = "soft_404"
    FAILED = "failed"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"


# Kinds that do not raise a link-rot warning.
_HEALTHY_KINDS = frozenset({StatusKind.PENDING, StatusKind.OK})


@dataclass(frozen=True)
class LinkStatus:
    """Tagged status of a monitored link.

    ``code`` carries the HTTP status for ``OK``/``SOFT_404``/``FAILED``;
    ``detail`` carries the (already truncated) message for ``NETWORK_ERROR``.
    """

    kind: StatusKind
    code: Optional[int] = None
    detail: Optional[str] = None

    @classmethod
    def pending(cls) -> "LinkStatus":
        return cls(StatusKind.PENDING)

    @classmethod
    def unknown(cls) -> "LinkStatus":
        return cls(StatusKind.UNKNOWN)

    @property
    def warning(self) -> bool:
        """``True`` iff this status signals link rot."""
        return self.kind not in _HEALTHY_KINDS

    @property
    def label(self) -> str:
        """Human-readable status string used on the wire and in logs."""
        if self.kind is StatusKind.PENDING:
            return "Pending Check"
        if self.kind is StatusKind.OK:
            return f"OK (Code: {self.code})"
        if self.kind is StatusKind.SOFT_404:
            return f"Soft 404 (Code: {self.code})"
        if self.kind is StatusKind.FAILED:
            return f"Failed (Code: {self.code})"
        if self.kind is StatusKind.TIMEOUT:
            return "Timeout Error"
        if self.kind is StatusKind.NETWORK_ERROR:
            return f"Network Error: {self.detail or ''}..."
        return "Unknown Error"

    def __str__(self) -> str:
        return self.label


@dataclass
class ScanSummary:
    """Totals for one scan pass."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    checked: int = 0
    warnings: int = 0
    failed_writes: int = 0
