"""
Background reminder poller.

Runs the reminder scan on a fixed interval with APScheduler and delivers due
reminders through the injected notifiers. The event list is owned by the
poller and replaced through `set_events`; nothing is read from global state.
"""

import os
import logging
import threading
from datetime import datetime, timezone, tzinfo
from typing import Callable, Iterable, List, Optional, Set

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dotenv import load_dotenv

from backend.calendar_service.models import CalendarEvent
from backend.calendar_service.reminders import (
    InAppNotifier,
    SystemNotifier,
    dispatch_reminders,
    due_reminders,
)

load_dotenv()

POLL_INTERVAL_SECONDS = int(os.getenv("REMINDER_POLL_SECONDS", 60))
JOB_ID = "reminder_scan"

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReminderPoller:
    """
    Periodic reminder scan.

    With `dedupe` on (the default) each event id is notified at most once,
    even if it stays inside the reminder window for more than one tick.
    With `dedupe` off every tick re-fires whatever is in the window.
    """

    def __init__(
        self,
        fallback: InAppNotifier,
        system: Optional[SystemNotifier] = None,
        interval_seconds: int = POLL_INTERVAL_SECONDS,
        dedupe: bool = True,
        clock: Callable[[], datetime] = utc_now,
        tz: Optional[tzinfo] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.fallback = fallback
        self.system = system
        self.interval_seconds = interval_seconds
        self.dedupe = dedupe
        self.clock = clock
        self.tz = tz
        self.scheduler = scheduler or BackgroundScheduler()

        self._lock = threading.Lock()
        self._events: List[CalendarEvent] = []
        self._notified: Set[int] = set()

    def set_events(self, events: Iterable[CalendarEvent]) -> None:
        """Replace the scanned events, forgetting ids that are gone."""
        events = list(events)
        with self._lock:
            self._events = events
            self._notified &= {e.id for e in events}

    def tick(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        """
        Run one scan and deliver its reminders.

        Returns:
            list: The events notified in this tick.
        """
        now = now or self.clock()
        with self._lock:
            due = due_reminders(now, self._events)
            if self.dedupe:
                due = [e for e in due if e.id not in self._notified]

        if not due:
            return []

        logger.info(f"{len(due)} reminder(s) due at {now.isoformat()}")
        delivered = dispatch_reminders(due, self.system, self.fallback, self.tz)

        # Only delivered reminders count as notified
        if self.dedupe:
            with self._lock:
                self._notified.update(e.id for e in delivered)
        return delivered

    def start(self) -> None:
        self.scheduler.add_job(
            self.tick,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Reminder poller started (every {self.interval_seconds}s)")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Reminder poller stopped")
