"""Tests for the wall-clock scheduler.

Jobs are plain callables gated on ``threading.Event`` so a pass can be held
open while further triggers arrive.  No test sleeps for a full slot: the
timer test uses a clock positioned just before the next hour.
"""

from __future__ import annotations

import sqlite3
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from refhub.db.connection import get_connection
from refhub.db.links import list_links, save_check
from refhub.db.migrations import init_db
from refhub.db.models import SeedLink
from refhub.health.models import Responded
from refhub.health.scanner import run_scan
from refhub.health.scheduler import Scheduler
from refhub.seed import seed_if_empty

_IST = ZoneInfo("Asia/Kolkata")


def _noop() -> None:
    return None


# ---------------------------------------------------------------------------
# next_fire_time
# ---------------------------------------------------------------------------

class TestNextFireTime:
    def test_next_hour_on_the_hour(self) -> None:
        scheduler = Scheduler(_noop, timezone="Asia/Kolkata")
        now = datetime(2026, 10, 19, 10, 17, 42, tzinfo=_IST)
        assert scheduler.next_fire_time(now) == datetime(2026, 10, 19, 11, 0, tzinfo=_IST)

    def test_exactly_on_slot_moves_to_next(self) -> None:
        scheduler = Scheduler(_noop, timezone="Asia/Kolkata")
        now = datetime(2026, 10, 19, 11, 0, 0, tzinfo=_IST)
        assert scheduler.next_fire_time(now) == datetime(2026, 10, 19, 12, 0, tzinfo=_IST)

    def test_rolls_over_midnight(self) -> None:
        scheduler = Scheduler(_noop, timezone="Asia/Kolkata")
        now = datetime(2026, 10, 19, 23, 30, tzinfo=_IST)
        assert scheduler.next_fire_time(now) == datetime(2026, 10, 20, 0, 0, tzinfo=_IST)

    def test_anchored_to_configured_zone(self) -> None:
        """04:47 UTC is 10:17 in Kolkata; the next slot is 11:00 IST (05:30 UTC)."""
        scheduler = Scheduler(_noop, timezone="Asia/Kolkata")
        now = datetime(2026, 10, 19, 4, 47, tzinfo=timezone.utc)
        fire_at = scheduler.next_fire_time(now)
        assert fire_at.astimezone(timezone.utc) == datetime(2026, 10, 19, 5, 30, tzinfo=timezone.utc)

    def test_custom_interval(self) -> None:
        scheduler = Scheduler(_noop, timezone="UTC", interval_minutes=15)
        now = datetime(2026, 10, 19, 10, 17, tzinfo=timezone.utc)
        assert scheduler.next_fire_time(now) == datetime(
            2026, 10, 19, 10, 30, tzinfo=ZoneInfo("UTC")
        )

    @pytest.mark.parametrize("interval", [0, -5, 24 * 60 + 1])
    def test_invalid_interval(self, interval: int) -> None:
        with pytest.raises(ValueError):
            Scheduler(_noop, interval_minutes=interval)


# ---------------------------------------------------------------------------
# trigger / overlap
# ---------------------------------------------------------------------------

class TestTrigger:
    def test_overlapping_triggers_are_dropped(self) -> None:
        release = threading.Event()
        calls: list[int] = []

        def job() -> None:
            calls.append(1)
            release.wait(5)

        scheduler = Scheduler(job)
        assert scheduler.trigger() is True
        assert scheduler.is_running is True
        assert scheduler.trigger() is False
        assert scheduler.trigger() is False

        release.set()
        assert scheduler.wait(5) is True
        assert calls == [1]
        assert scheduler.passes_run == 1
        assert scheduler.beats_skipped == 2

    def test_dropped_triggers_counted_across_threads(self) -> None:
        release = threading.Event()
        scheduler = Scheduler(lambda: release.wait(5))
        assert scheduler.trigger() is True

        def hammer() -> None:
            for _ in range(50):
                scheduler.trigger()

        threads = [threading.Thread(target=hammer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        release.set()
        assert scheduler.wait(5) is True
        assert scheduler.beats_skipped == 400
        assert scheduler.passes_run == 1

    def test_idle_again_after_pass(self) -> None:
        scheduler = Scheduler(_noop)
        assert scheduler.trigger() is True
        assert scheduler.wait(5) is True
        assert scheduler.trigger() is True
        assert scheduler.wait(5) is True
        assert scheduler.passes_run == 2

    def test_failing_job_returns_to_idle(self) -> None:
        def job() -> None:
            raise RuntimeError("store exploded")

        scheduler = Scheduler(job)
        assert scheduler.trigger() is True
        assert scheduler.wait(5) is True
        assert scheduler.is_running is False
        assert scheduler.passes_run == 1

    def test_dropped_trigger_makes_no_store_writes(self) -> None:
        """Two triggers during a running pass: one pass, one write per link."""
        conn = get_connection(db_path=":memory:")  # type: ignore[arg-type]
        init_db(conn)
        seed_if_empty(
            conn,
            [
                SeedLink("https://x.example/1", "One", "A"),
                SeedLink("https://x.example/2", "Two", "A"),
                SeedLink("https://x.example/3", "Three", "B"),
                SeedLink("https://x.example/4", "Four", "B"),
            ],
        )
        started = threading.Event()
        release = threading.Event()

        def job() -> None:
            started.set()
            release.wait(5)
            run_scan(conn)

        try:
            with patch(
                "refhub.health.scanner.probe_url", return_value=Responded(200, "ok")
            ), patch("refhub.health.scanner.save_check", wraps=save_check) as spy:
                scheduler = Scheduler(job)
                assert scheduler.trigger() is True
                assert started.wait(5)
                assert scheduler.trigger() is False
                assert scheduler.trigger() is False
                release.set()
                assert scheduler.wait(5) is True

            assert spy.call_count == 4
            assert all(l.status.label == "OK (Code: 200)" for l in list_links(conn))
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_start_runs_initial_pass(self) -> None:
        ran = threading.Event()
        scheduler = Scheduler(ran.set, run_on_start=True)
        scheduler.start()
        try:
            assert ran.wait(5)
            assert scheduler.wait(5) is True
            assert scheduler.passes_run == 1
        finally:
            scheduler.stop(timeout=5)
        assert scheduler.is_started is False

    def test_start_without_initial_pass(self) -> None:
        scheduler = Scheduler(_noop, run_on_start=False)
        scheduler.start()
        try:
            assert scheduler.is_started is True
            assert scheduler.passes_run == 0
        finally:
            scheduler.stop(timeout=5)

    def test_double_start_rejected(self) -> None:
        scheduler = Scheduler(_noop, run_on_start=False)
        scheduler.start()
        try:
            with pytest.raises(RuntimeError):
                scheduler.start()
        finally:
            scheduler.stop(timeout=5)

    def test_timer_fires_on_the_hour(self) -> None:
        base = datetime(2026, 10, 19, 10, 59, 59, 800000, tzinfo=_IST)
        t0 = time.monotonic()

        def clock() -> datetime:
            return base + timedelta(seconds=time.monotonic() - t0)

        fired = threading.Event()
        scheduler = Scheduler(
            fired.set, timezone="Asia/Kolkata", run_on_start=False, clock=clock
        )
        scheduler.start()
        try:
            assert fired.wait(5)
            assert scheduler.wait(5) is True
            assert scheduler.passes_run == 1
        finally:
            scheduler.stop(timeout=5)
