"""Wall-clock scheduler for link-check passes.

A :class:`Scheduler` owns a timer thread that fires at fixed wall-clock
slots in a configured time zone (every hour on the hour by default) and a
worker thread per pass.  At most one pass runs at a time: a trigger that
arrives while a pass is still running is dropped, not queued.

Usage::

    scheduler = Scheduler(run_scheduled_scan, timezone="Asia/Kolkata")
    scheduler.start()      # fires one pass immediately, then hourly
    ...
    scheduler.stop()
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_MINUTES_PER_DAY = 24 * 60


class Scheduler:
    """Runs *job* once at start-up and then on a wall-clock cadence.

    Args:
        job: Zero-argument callable performing one full pass.
        timezone: IANA zone name the cadence is anchored to.
        interval_minutes: Slot length, counted from local midnight.  ``60``
            fires at every hour on the hour.
        run_on_start: Fire one pass as soon as :meth:`start` is called.
        clock: Returns the current aware time; used by tests.
        name: Prefix for thread names and log lines.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        timezone: str = "UTC",
        interval_minutes: int = 60,
        run_on_start: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
        name: str = "link-scan",
    ) -> None:
        if not 1 <= interval_minutes <= _MINUTES_PER_DAY:
            raise ValueError(
                f"interval_minutes must be between 1 and {_MINUTES_PER_DAY}, "
                f"got {interval_minutes}"
            )
        self._job = job
        self._tz = ZoneInfo(timezone)
        self.interval_minutes = interval_minutes
        self.run_on_start = run_on_start
        self.name = name
        self._clock = clock or (lambda: datetime.now(dt_timezone.utc))

        self._pass_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer: Optional[threading.Thread] = None
        self._worker: Optional[threading.Thread] = None

        self.passes_run = 0
        self.beats_skipped = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """``True`` while a pass is in progress."""
        return self._pass_lock.locked()

    @property
    def is_started(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    # ------------------------------------------------------------------
    # Cadence
    # ------------------------------------------------------------------
    def next_fire_time(self, now: Optional[datetime] = None) -> datetime:
        """Return the first slot strictly after *now*, in the scheduler's zone."""
        local = (now or self._clock()).astimezone(self._tz)
        minute_of_day = local.hour * 60 + local.minute
        next_minute = (minute_of_day // self.interval_minutes + 1) * self.interval_minutes

        if next_minute >= _MINUTES_PER_DAY:
            tomorrow = local.date() + timedelta(days=1)
            return datetime(tomorrow.year, tomorrow.month, tomorrow.day, tzinfo=self._tz)
        return local.replace(
            hour=next_minute // 60,
            minute=next_minute % 60,
            second=0,
            microsecond=0,
        )

    def _seconds_until(self, fire_at: datetime) -> float:
        now = self._clock().astimezone(dt_timezone.utc)
        return (fire_at.astimezone(dt_timezone.utc) - now).total_seconds()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the timer thread (and the start-up pass, if enabled)."""
        if self.is_started:
            raise RuntimeError(f"Scheduler {self.name!r} is already started")

        self._stop_event.clear()
        self._timer = threading.Thread(
            target=self._run_timer, name=f"{self.name}-timer", daemon=True
        )
        self._timer.start()
        logger.info(
            "Automatic link check scheduled every %d minutes (%s).",
            self.interval_minutes,
            self._tz.key,
        )
        if self.run_on_start:
            self.trigger()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop firing new passes.

        An in-flight pass is not awaited; it finishes (or dies with the
        process) on its own.
        """
        self._stop_event.set()
        if self._timer is not None:
            self._timer.join(timeout)
            self._timer = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current pass (if any) finishes.

        Returns:
            ``True`` if no pass is running when this returns.
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
        return not self.is_running

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------
    def trigger(self) -> bool:
        """Start one pass now unless one is already running.

        Returns:
            ``True`` if a pass was started, ``False`` if the trigger was
            dropped because a pass is still in progress.
        """
        if not self._pass_lock.acquire(blocking=False):
            with self._stats_lock:
                self.beats_skipped += 1
            logger.warning("Previous link check still running; skipping this trigger.")
            return False

        worker = threading.Thread(
            target=self._run_pass, name=f"{self.name}-pass", daemon=True
        )
        self._worker = worker
        try:
            worker.start()
        except RuntimeError:
            self._pass_lock.release()
            raise
        return True

    def _run_pass(self) -> None:
        try:
            self._job()
        except Exception:
            logger.exception("Link check pass failed")
        finally:
            with self._stats_lock:
                self.passes_run += 1
            self._pass_lock.release()

    def _run_timer(self) -> None:
        while not self._stop_event.is_set():
            fire_at = self.next_fire_time()
            delay = self._seconds_until(fire_at)
            if self._stop_event.wait(max(delay, 0.0)):
                break
            # Event.wait can return a little early; never fire before the slot.
            if self._seconds_until(fire_at) > 0:
                continue
            logger.info("Scheduled task triggered: running link check.")
            self.trigger()
