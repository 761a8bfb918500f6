"""Single-shot HTTP probe used by the link scanner.

``probe_url`` never raises for HTTP status codes or transport failures; it
returns one of the outcome dataclasses from :mod:`refhub.health.models`.
"""

from __future__ import annotations

from time import monotonic
from typing import Optional

import httpx

from refhub.config import settings
from refhub.health.models import (
    NetworkError,
    ProbeOutcome,
    Responded,
    ServerError,
    TimedOut,
)

_TEXTUAL_HINTS = ("html", "xml", "json", "javascript")


class _DeadlineExceeded(Exception):
    """Raised internally when a probe overruns its total time budget."""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.probe_user_agent,
        "Accept": settings.probe_accept,
    }


def _is_textual(content_type: Optional[str]) -> bool:
    """Return ``True`` if a body with *content_type* should be inspected.

    A missing header is treated as textual; binary payloads such as PDFs are
    classified on status code alone.
    """
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type.startswith("text/"):
        return True
    return any(hint in media_type for hint in _TEXTUAL_HINTS)


def _read_text(response: httpx.Response, deadline: float) -> str:
    chunks: list[bytes] = []
    for chunk in response.iter_bytes():
        chunks.append(chunk)
        if monotonic() > deadline:
            raise _DeadlineExceeded()
    encoding = response.charset_encoding or "utf-8"
    try:
        return b"".join(chunks).decode(encoding, errors="replace")
    except LookupError:
        return b"".join(chunks).decode("utf-8", errors="replace")


def _describe(exc: Exception) -> str:
    message = str(exc).strip()
    return message or type(exc).__name__


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def build_client(timeout: Optional[float] = None) -> httpx.Client:
    """Return an ``httpx.Client`` configured for link probing.

    Browser-like headers, at most ``settings.probe_max_redirects`` redirect
    hops, every phase bounded by *timeout* (``settings.probe_timeout`` when
    omitted).  Redirects are followed by :func:`probe_url` itself so each hop
    only gets what is left of the total budget.
    """
    return httpx.Client(
        headers=_default_headers(),
        timeout=settings.probe_timeout if timeout is None else timeout,
        follow_redirects=False,
        max_redirects=settings.probe_max_redirects,
    )


def _open(client: httpx.Client, url: str, deadline: float) -> httpx.Response:
    """Send the GET, following redirects by hand within *deadline*.

    Returns the final, still-streaming response.  The caller closes it.
    """
    request = client.build_request("GET", url)
    for _ in range(client.max_redirects + 1):
        remaining = deadline - monotonic()
        if remaining <= 0:
            raise _DeadlineExceeded()
        request.extensions["timeout"] = httpx.Timeout(remaining).as_dict()
        response = client.send(request, stream=True, follow_redirects=False)
        if response.next_request is None:
            return response
        response.close()
        request = response.next_request
    raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def probe_url(
    url: str,
    client: Optional[httpx.Client] = None,
    timeout: Optional[float] = None,
) -> ProbeOutcome:
    """Issue exactly one GET against *url* and describe what happened.

    Args:
        url: Absolute URL to probe.
        client: Shared client (see :func:`build_client`).  A throwaway client
            is created and closed when omitted.
        timeout: Total time budget in seconds, covering every redirect hop
            and the body read.  Defaults to ``settings.probe_timeout``.

    Returns:
        ``Responded`` for codes in [200, 500), ``ServerError`` for >= 500,
        ``TimedOut`` when the budget is exhausted, ``NetworkError`` for any
        other transport failure.
    """
    budget = settings.probe_timeout if timeout is None else timeout
    owns_client = client is None
    if client is None:
        client = build_client(budget)

    deadline = monotonic() + budget
    try:
        response = _open(client, url, deadline)
        try:
            if monotonic() > deadline:
                raise _DeadlineExceeded()
            status_code = response.status_code
            if status_code >= 500:
                return ServerError(status_code)
            body = None
            if _is_textual(response.headers.get("content-type")):
                body = _read_text(response, deadline)
            return Responded(status_code, body)
        finally:
            response.close()
    except (_DeadlineExceeded, httpx.TimeoutException):
        return TimedOut()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return NetworkError(_describe(exc))
    finally:
        if owns_client:
            client.close()
