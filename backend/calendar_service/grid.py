"""
Month grid generation for the calendar view.

A month is always shown as 6 full weeks (42 cells), starting on the configured
week-start day. Six rows are enough for any month under either convention.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import List, Union

GRID_DAYS = 42

SUPPORTED_WEEK_STARTS = (calendar.SUNDAY, calendar.MONDAY)

_WEEK_START_NAMES = {
    "sunday": calendar.SUNDAY,
    "monday": calendar.MONDAY,
}


def _as_date(reference: Union[date, datetime]) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def _check_week_start(week_start: int) -> None:
    if week_start not in SUPPORTED_WEEK_STARTS:
        raise ValueError(f"week_start must be calendar.SUNDAY or calendar.MONDAY, got {week_start!r}")


def parse_week_start(name: str) -> int:
    """
    Map a configuration value ("sunday" / "monday") to a weekday constant.

    Raises:
        ValueError: For any other name.
    """
    try:
        return _WEEK_START_NAMES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported week start: {name!r}") from None


def build_month_grid(reference: Union[date, datetime], week_start: int = calendar.SUNDAY) -> List[date]:
    """
    Build the 42 consecutive dates displayed for the month containing `reference`.

    Args:
        reference: Any day within the target month.
        week_start: calendar.SUNDAY or calendar.MONDAY.

    Returns:
        list[date]: 42 dates; the first one falls on `week_start` and the whole
        target month is a contiguous run inside the list.

    Raises:
        ValueError: If week_start is not supported.
    """
    _check_week_start(week_start)

    first = _as_date(reference).replace(day=1)
    start_offset = (first.weekday() - week_start) % 7
    grid_start = first - timedelta(days=start_offset)

    return [grid_start + timedelta(days=i) for i in range(GRID_DAYS)]


def shift_month(reference: Union[date, datetime], months: int) -> date:
    """
    Move to the first day of the month `months` away from `reference`.

    Used for previous/next month navigation; negative values go back.
    """
    ref = _as_date(reference)
    index = ref.year * 12 + (ref.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def weekday_labels(week_start: int = calendar.SUNDAY) -> List[str]:
    """
    Short weekday headers in grid column order, e.g. ["Sun", "Mon", ...].
    """
    _check_week_start(week_start)
    return [calendar.day_abbr[(week_start + i) % 7] for i in range(7)]
