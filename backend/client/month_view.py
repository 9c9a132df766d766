"""
Plain-text rendering of the calendar: month grid, agenda list, and day detail.
"""

import calendar
from datetime import date, tzinfo
from typing import Iterable, List, Optional

from backend.calendar_service.grid import build_month_grid, weekday_labels
from backend.calendar_service.models import CalendarEvent
from backend.calendar_service.placement import events_for_day, local_time, place_events, sort_events
from backend.calendar_service.reminders import format_clock

CELL_WIDTH = 7
NO_EVENTS = "No events scheduled"


def _cell(day: date, month: int, count: int, today: Optional[date]) -> str:
    label = f"{day.day:>2}"
    if day.month != month:
        label = f"({day.day})"
    if day == today:
        label = f"[{day.day}]"
    marker = f"*{count}" if count else ""
    return f"{label}{marker}".ljust(CELL_WIDTH)


def render_month(
    reference: date,
    events: Iterable[CalendarEvent],
    week_start: int = calendar.SUNDAY,
    tz: Optional[tzinfo] = None,
    today: Optional[date] = None,
) -> str:
    """
    Render the 6-week grid for the month of `reference`.

    Days outside the month are shown in parentheses, today in brackets,
    and `*N` marks a day with N events.
    """
    grid = build_month_grid(reference, week_start)
    placed = place_events(grid, events, tz)

    lines = [reference.strftime("%B %Y"), "".join(label.ljust(CELL_WIDTH) for label in weekday_labels(week_start))]
    for row in range(0, len(grid), 7):
        week = grid[row:row + 7]
        lines.append("".join(_cell(day, reference.month, len(placed[day]), today) for day in week).rstrip())
    return "\n".join(lines)


def describe_event(event: CalendarEvent, tz: Optional[tzinfo] = None, with_date: bool = True) -> List[str]:
    when = local_time(event.date, tz)
    stamp = f"{when:%b} {when.day}, {when.year} {format_clock(when)}" if with_date else format_clock(when)
    lines = [f"{stamp}  {event.title}"]
    if event.description:
        lines.append(f"    {event.description}")
    if event.reminder_time > 0:
        lines.append(f"    Reminder {event.reminder_time} minutes before")
    return lines


def render_agenda(events: Iterable[CalendarEvent], tz: Optional[tzinfo] = None) -> str:
    """All events in time order, as shown in the sidebar."""
    ordered = sort_events(events)
    if not ordered:
        return NO_EVENTS
    lines: List[str] = []
    for event in ordered:
        lines.extend(describe_event(event, tz))
    return "\n".join(lines)


def render_day(day: date, events: Iterable[CalendarEvent], tz: Optional[tzinfo] = None) -> str:
    """The events of one day, with times only."""
    lines = [f"Events for {day:%B} {day.day}, {day.year}"]
    todays = events_for_day(events, day, tz)
    if not todays:
        lines.append(NO_EVENTS)
    for event in todays:
        lines.extend(describe_event(event, tz, with_date=False))
    return "\n".join(lines)
