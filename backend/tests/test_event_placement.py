from datetime import date, datetime, timedelta, timezone

from backend.calendar_service.grid import build_month_grid
from backend.calendar_service.models import CalendarEvent
from backend.calendar_service.placement import events_for_day, place_events, sort_events

UTC = timezone.utc
EST = timezone(timedelta(hours=-5))


def make_event(event_id, when, title=None):
    return CalendarEvent(id=event_id, owner=1, title=title or f"event {event_id}", date=when)


def test_every_grid_date_has_a_bucket():
    grid = build_month_grid(date(2024, 6, 1))

    placed = place_events(grid, [], tz=UTC)

    assert list(placed) == grid
    assert all(bucket == [] for bucket in placed.values())


def test_events_are_bucketed_by_day_in_time_order():
    grid = build_month_grid(date(2024, 6, 1))
    late = make_event(1, datetime(2024, 6, 10, 18, 0, tzinfo=UTC))
    early = make_event(2, datetime(2024, 6, 10, 8, 0, tzinfo=UTC))
    other = make_event(3, datetime(2024, 6, 11, 8, 0, tzinfo=UTC))

    placed = place_events(grid, [late, early, other], tz=UTC)

    assert placed[date(2024, 6, 10)] == [early, late]
    assert placed[date(2024, 6, 11)] == [other]


def test_same_time_keeps_input_order():
    grid = build_month_grid(date(2024, 6, 1))
    when = datetime(2024, 6, 10, 9, 0, tzinfo=UTC)
    first, second = make_event(1, when), make_event(2, when)

    assert place_events(grid, [second, first], tz=UTC)[date(2024, 6, 10)] == [second, first]


def test_day_is_decided_in_local_time():
    grid = build_month_grid(date(2024, 6, 1))
    # 02:00 UTC on the 11th is still the evening of the 10th in UTC-5
    event = make_event(1, datetime(2024, 6, 11, 2, 0, tzinfo=UTC))

    placed = place_events(grid, [event], tz=EST)

    assert placed[date(2024, 6, 10)] == [event]
    assert placed[date(2024, 6, 11)] == []


def test_naive_dates_are_treated_as_local():
    grid = build_month_grid(date(2024, 6, 1))
    event = make_event(1, datetime(2024, 6, 11, 2, 0))

    assert place_events(grid, [event], tz=EST)[date(2024, 6, 11)] == [event]


def test_each_event_lands_in_at_most_one_bucket():
    grid = build_month_grid(date(2024, 6, 1))
    inside = [make_event(i, datetime(2024, 6, 1, 9, 0, tzinfo=UTC) + timedelta(days=i)) for i in range(20)]
    outside = [
        make_event(100, datetime(2024, 1, 1, 9, 0, tzinfo=UTC)),
        make_event(101, datetime(2024, 12, 1, 9, 0, tzinfo=UTC)),
    ]

    placed = place_events(grid, inside + outside, tz=UTC)

    flattened = [e for bucket in placed.values() for e in bucket]
    assert sorted(e.id for e in flattened) == list(range(20))


def test_placement_is_idempotent():
    grid = build_month_grid(date(2024, 6, 1))
    events = [make_event(i, datetime(2024, 6, 3, 9, 0, tzinfo=UTC) + timedelta(hours=7 * i)) for i in range(10)]

    assert place_events(grid, events, tz=UTC) == place_events(grid, events, tz=UTC)


def test_events_for_day():
    a = make_event(1, datetime(2024, 6, 10, 15, 0, tzinfo=UTC))
    b = make_event(2, datetime(2024, 6, 10, 9, 0, tzinfo=UTC))
    c = make_event(3, datetime(2024, 6, 12, 9, 0, tzinfo=UTC))

    assert events_for_day([a, b, c], date(2024, 6, 10), tz=UTC) == [b, a]
    assert events_for_day([a, b, c], date(2024, 6, 11), tz=UTC) == []


def test_sort_events():
    a = make_event(1, datetime(2024, 6, 10, 15, 0, tzinfo=UTC))
    b = make_event(2, datetime(2024, 6, 9, 15, 0, tzinfo=UTC))

    assert sort_events([a, b]) == [b, a]
