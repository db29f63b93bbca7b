from datetime import date, datetime

import pytest

from familyhub.models.calendar_event import CalendarEvent
from familyhub.services.calendar_service import (
    CalendarInputError,
    build_month_grid,
    grid_range_utc,
    month_grid_days,
    parse_month,
    resolve_event_window,
    to_local,
)


@pytest.mark.parametrize(
    "reference",
    [date(2025, 2, 1), date(2025, 3, 1), date(2025, 6, 1), date(2026, 2, 1), date(2024, 2, 1)],
)
def test_month_grid_covers_whole_weeks(reference: date) -> None:
    days = month_grid_days(reference)

    assert len(days) % 7 == 0
    assert days[0].isoweekday() == 7
    assert days[-1].isoweekday() == 6
    assert days[0] <= reference
    assert date(reference.year, reference.month, 1) in days
    assert all((later - earlier).days == 1 for earlier, later in zip(days, days[1:]))
    in_month = [day for day in days if day.month == reference.month]
    assert in_month[0].day == 1
    assert (in_month[-1] - in_month[0]).days + 1 == len(in_month)


def test_month_grid_for_february_2026_is_exactly_four_weeks() -> None:
    # 1 Feb 2026 is a Sunday and 28 Feb a Saturday.
    days = month_grid_days(date(2026, 2, 1))
    assert days[0] == date(2026, 2, 1)
    assert days[-1] == date(2026, 2, 28)
    assert len(days) == 28


def test_build_month_grid_marks_today_and_buckets_by_local_day() -> None:
    late_evening = CalendarEvent(
        title="Dinner",
        # 02:30 UTC on the 11th is 22:30 on the 10th in New York.
        start_time=datetime(2025, 3, 11, 2, 30),
        end_time=datetime(2025, 3, 11, 3, 30),
    )
    grid = build_month_grid(
        date(2025, 3, 1),
        [late_evening],
        timezone_name="America/New_York",
        today=date(2025, 3, 10),
    )

    by_day = {grid_day.day: grid_day for grid_day in grid}
    assert by_day[date(2025, 3, 10)].is_today is True
    assert [event.title for event in by_day[date(2025, 3, 10)].events] == ["Dinner"]
    assert by_day[date(2025, 3, 11)].events == []
    assert by_day[date(2025, 2, 23)].in_month is False
    assert sum(1 for grid_day in grid if grid_day.is_today) == 1


def test_grid_range_spans_leading_and_trailing_days() -> None:
    start, end = grid_range_utc(date(2025, 3, 1), "UTC")
    assert start == datetime(2025, 2, 23, 0, 0)
    assert end.date() == date(2025, 4, 5)


def test_timed_event_defaults_to_one_hour() -> None:
    start, end = resolve_event_window(
        start="2025-03-10T09:00",
        end=None,
        all_day=False,
        timezone_name="UTC",
    )
    assert start == datetime(2025, 3, 10, 9, 0)
    assert end == datetime(2025, 3, 10, 10, 0)


def test_timed_event_is_stored_as_utc_and_read_back_in_family_zone() -> None:
    start, _ = resolve_event_window(
        start="2025-03-10T09:00",
        end="2025-03-10T10:30",
        all_day=False,
        timezone_name="America/New_York",
    )
    # Daylight saving started on 9 March 2025, so New York is UTC-4.
    assert start == datetime(2025, 3, 10, 13, 0)
    assert to_local(start, "America/New_York").isoformat() == "2025-03-10T09:00:00-04:00"


def test_all_day_event_spans_the_whole_local_day() -> None:
    start, end = resolve_event_window(
        start="2025-03-10",
        end=None,
        all_day=True,
        timezone_name="UTC",
    )
    assert start == datetime(2025, 3, 10, 0, 0)
    assert end == datetime(2025, 3, 10, 23, 59)

    _, multi_day_end = resolve_event_window(
        start="2025-03-10T08:00",
        end="2025-03-12",
        all_day=True,
        timezone_name="UTC",
    )
    assert multi_day_end == datetime(2025, 3, 12, 23, 59)


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(CalendarInputError):
        resolve_event_window(
            start="2025-03-10T10:00",
            end="2025-03-10T09:00",
            all_day=False,
            timezone_name="UTC",
        )


def test_unparseable_start_is_rejected() -> None:
    with pytest.raises(CalendarInputError):
        resolve_event_window(start="next tuesday", end=None, all_day=False, timezone_name="UTC")


def test_parse_month() -> None:
    today = date(2025, 3, 18)
    assert parse_month(None, today=today) == date(2025, 3, 1)
    assert parse_month("2024-12", today=today) == date(2024, 12, 1)
    with pytest.raises(CalendarInputError):
        parse_month("2024-13", today=today)
    with pytest.raises(CalendarInputError):
        parse_month("march", today=today)
