"""
Groups events by calendar day for the month view.
"""

from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from backend.calendar_service.models import CalendarEvent


def local_time(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert an event timestamp to the viewer's local time.

    Naive datetimes are already local and are returned unchanged. With `tz`
    unset, the system's local timezone is used.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(tz)


def sort_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """
    Events in ascending time order. Equal times keep their input order.
    """
    return sorted(events, key=lambda e: e.date)


def place_events(
    grid: Sequence[date],
    events: Iterable[CalendarEvent],
    tz: Optional[tzinfo] = None,
) -> Dict[date, List[CalendarEvent]]:
    """
    Bucket events into the grid cells they fall on.

    Args:
        grid: Dates from `build_month_grid`.
        events: The owner's events, in any order.
        tz: Timezone used to decide an event's calendar day (system local by default).

    Returns:
        dict: One entry per grid date, each holding that day's events sorted
        by time. Events outside the grid are left out.
    """
    buckets: Dict[date, List[CalendarEvent]] = {day: [] for day in grid}
    for event in sort_events(events):
        day = local_time(event.date, tz).date()
        if day in buckets:
            buckets[day].append(event)
    return buckets


def events_for_day(
    events: Iterable[CalendarEvent],
    day: date,
    tz: Optional[tzinfo] = None,
) -> List[CalendarEvent]:
    """
    The events on a single local day, sorted by time.
    """
    return [e for e in sort_events(events) if local_time(e.date, tz).date() == day]
