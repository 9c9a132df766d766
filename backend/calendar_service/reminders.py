"""
Reminder decision logic.

`due_reminders` is a pure check run once per polling tick: an event is due
when its reminder moment (event time minus its offset) is now or at most one
whole minute ahead. Nothing here remembers what already fired; a caller that
ticks again while an event is still inside the window gets it again.

Delivery is handled by `dispatch_reminders` through injected notifiers, so the
decision logic can be tested without a real notification system.
"""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, List, Optional, Protocol

from backend.calendar_service.models import CalendarEvent
from backend.calendar_service.placement import local_time

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Event Reminder"
REMINDER_WINDOW_MINUTES = 1
MAX_REMINDER_MINUTES = 525600  # one year

# Notification permission states
PERMISSION_DEFAULT = "default"
PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"


class NotificationError(Exception):
    """A notification channel failed to show a message."""


class SystemNotifier(Protocol):
    """Operating-system notifications, gated by a permission state."""

    @property
    def permission(self) -> str: ...

    def request_permission(self) -> None: ...

    def show(self, title: str, body: str) -> None: ...


class InAppNotifier(Protocol):
    """Transient in-app message; always available."""

    def show(self, body: str) -> None: ...


def fire_time(event: CalendarEvent) -> datetime:
    return event.date - timedelta(minutes=event.reminder_time)


def is_due(event: CalendarEvent, now: datetime) -> bool:
    """
    True if the event's reminder belongs to the tick running at `now`.

    The reminder moment must not be in the past, and the whole minutes
    between `now` and it must not exceed the window. An offset reaching
    before the earliest representable date never fires.
    """
    try:
        fire_at = fire_time(event)
    except OverflowError:
        return False
    if fire_at < now:
        return False
    whole_minutes = int((fire_at - now).total_seconds() // 60)
    return whole_minutes <= REMINDER_WINDOW_MINUTES


def due_reminders(now: datetime, events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """
    Select the events whose reminder fires in this tick.

    Args:
        now: Current time; must be aware if the event dates are aware.
        events: Events to scan. Not modified.

    Returns:
        list: Due events, in input order.
    """
    return [event for event in events if is_due(event, now)]


def format_clock(value: datetime) -> str:
    """12-hour clock time without a leading zero, e.g. '9:05 AM'."""
    return value.strftime("%I:%M %p").lstrip("0")


def reminder_message(event: CalendarEvent, tz: Optional[tzinfo] = None) -> str:
    """
    Notification body naming the event and its local start time.
    """
    return f"Upcoming event: {event.title} at {format_clock(local_time(event.date, tz))}"


def dispatch_reminders(
    due: Iterable[CalendarEvent],
    system: Optional[SystemNotifier],
    fallback: InAppNotifier,
    tz: Optional[tzinfo] = None,
) -> List[CalendarEvent]:
    """
    Deliver one notification per due event.

    System notifications are used when permission is granted. An undetermined
    permission is requested without waiting for the answer; until it is
    granted the in-app message is used. Without a system notifier, or when
    permission is denied, the in-app path is always taken. A system
    notification that fails to show is replaced by the in-app message.

    Returns:
        list: The events whose reminder was delivered.
    """
    delivered: List[CalendarEvent] = []
    for event in due:
        body = reminder_message(event, tz)

        if system is not None and system.permission == PERMISSION_DEFAULT:
            system.request_permission()

        shown = False
        if system is not None and system.permission == PERMISSION_GRANTED:
            try:
                system.show(REMINDER_TITLE, body)
                shown = True
            except NotificationError:
                logger.exception("System notification failed for event %s", event.id)

        if not shown:
            fallback.show(body)

        logger.debug("Reminder delivered for event %s", event.id)
        delivered.append(event)
    return delivered
