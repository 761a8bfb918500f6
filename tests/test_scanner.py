"""Tests for the scan driver.

Every test seeds an in-memory store with four links and mocks their hosts
with ``respx``; a fixed clock stands in for ``datetime.now``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Generator
from unittest.mock import patch

import httpx
import pytest
import respx

from refhub.db.connection import get_connection
from refhub.db.links import get_link, list_links, save_check
from refhub.db.migrations import init_db
from refhub.db.models import SeedLink
from refhub.health.models import LinkStatus, StatusKind
from refhub.health.scanner import check_link, run_scan
from refhub.seed import seed_if_empty

_NOW = datetime(2026, 10, 19, 4, 30, tzinfo=timezone.utc)

_LINKS = [
    SeedLink("https://docs.example.com/patents.pdf", "Patents Act", "Patents"),
    SeedLink("https://docs.example.com/copyright", "Copyright Act", "Copyright"),
    SeedLink("https://docs.example.com/trademarks", "Trademarks Act", "Trademarks"),
    SeedLink("https://slow.example.com/gi", "GI Act", "GI"),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    seed_if_empty(connection, _LINKS)
    yield connection
    connection.close()


def _mock_hosts() -> None:
    """Register one route per link (must be called inside ``respx.mock``)."""
    respx.get(_LINKS[0].url).mock(
        return_value=httpx.Response(
            200, content=b"%PDF-1.7", headers={"Content-Type": "application/pdf"}
        )
    )
    respx.get(_LINKS[1].url).mock(
        return_value=httpx.Response(200, html="<html>Error 404</html>")
    )
    respx.get(_LINKS[2].url).mock(return_value=httpx.Response(404, text="Not Found"))
    respx.get(_LINKS[3].url).mock(side_effect=httpx.ReadTimeout("timed out"))


def _clock() -> datetime:
    return _NOW


# ---------------------------------------------------------------------------
# run_scan
# ---------------------------------------------------------------------------

class TestRunScan:
    def test_classifies_and_saves_every_link(self, conn: sqlite3.Connection) -> None:
        with respx.mock:
            _mock_hosts()
            summary = run_scan(conn, clock=_clock)

        assert summary.checked == 4
        assert summary.warnings == 3
        assert summary.failed_writes == 0

        labels = {l.url: l.status.label for l in list_links(conn)}
        assert labels == {
            _LINKS[0].url: "OK (Code: 200)",
            _LINKS[1].url: "Soft 404 (Code: 200)",
            _LINKS[2].url: "Failed (Code: 404)",
            _LINKS[3].url: "Timeout Error",
        }

    def test_soft_404_page(self, conn: sqlite3.Connection) -> None:
        with respx.mock:
            _mock_hosts()
            run_scan(conn, clock=_clock)

        link = get_link(conn, _LINKS[1].url)
        assert link is not None
        assert link.status.label == "Soft 404 (Code: 200)"
        assert link.link_rot_warning is True

    def test_timeout_updates_last_checked(self, conn: sqlite3.Connection) -> None:
        with respx.mock:
            _mock_hosts()
            run_scan(conn, clock=_clock)

        link = get_link(conn, _LINKS[3].url)
        assert link is not None
        assert link.status.label == "Timeout Error"
        assert link.link_rot_warning is True
        assert link.last_checked == _NOW

    def test_warning_always_matches_status(self, conn: sqlite3.Connection) -> None:
        with respx.mock:
            _mock_hosts()
            run_scan(conn, clock=_clock)

        for link in list_links(conn):
            assert link.link_rot_warning is link.status.warning

    def test_write_failure_skips_only_that_link(self, conn: sqlite3.Connection) -> None:
        broken_url = _LINKS[2].url

        def flaky_save(c, url, status, checked_at):
            if url == broken_url:
                raise sqlite3.OperationalError("database is locked")
            return save_check(c, url, status, checked_at)

        with respx.mock:
            _mock_hosts()
            with patch("refhub.health.scanner.save_check", side_effect=flaky_save):
                summary = run_scan(conn, clock=_clock)

        assert summary.checked == 3
        assert summary.failed_writes == 1
        for link in list_links(conn):
            if link.url == broken_url:
                assert link.last_checked is None
                assert link.status == LinkStatus.pending()
            else:
                assert link.last_checked == _NOW

    def test_unexpected_probe_error_becomes_unknown(self, conn: sqlite3.Connection) -> None:
        with patch("refhub.health.scanner.probe_url", side_effect=RuntimeError("boom")):
            summary = run_scan(conn, clock=_clock)

        assert summary.checked == 4
        for link in list_links(conn):
            assert link.status.kind is StatusKind.UNKNOWN
            assert link.link_rot_warning is True

    def test_links_checked_in_order_and_logged(
        self, conn: sqlite3.Connection, caplog: pytest.LogCaptureFixture
    ) -> None:
        with respx.mock:
            _mock_hosts()
            with caplog.at_level(logging.INFO, logger="refhub.health.scanner"):
                run_scan(conn, clock=_clock)

        progress = [r.getMessage() for r in caplog.records if r.getMessage().startswith("[")]
        assert [line.split("] ", 1)[1] for line in progress] == [
            f"{l.title}: {l.url}" for l in list_links(conn)
        ]
        assert progress[0].startswith("[Soft 404 (Code: 200)")

    def test_empty_store(self) -> None:
        connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
        init_db(connection)
        try:
            summary = run_scan(connection, clock=_clock)
        finally:
            connection.close()
        assert summary.checked == 0
        assert summary.finished_at == _NOW


class TestCheckLink:
    def test_never_raises(self) -> None:
        with patch("refhub.health.scanner.probe_url", side_effect=ValueError("bad")):
            assert check_link("https://x") == LinkStatus.unknown()

    def test_network_error(self) -> None:
        with respx.mock:
            respx.get("https://down.example.com/").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            status = check_link("https://down.example.com/")
        assert status.label == "Network Error: Connection refused..."
