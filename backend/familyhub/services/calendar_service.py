"""Calendar range queries, wall-clock conversion and the month grid."""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.models.calendar_event import CalendarEvent

# Sunday-first weeks.
WEEK_START = calendar.SUNDAY

ALL_DAY_START = time(0, 0)
ALL_DAY_END = time(23, 59)
DEFAULT_EVENT_DURATION = timedelta(hours=1)


class CalendarInputError(ValueError):
    pass


@dataclass
class GridDay:
    day: date
    in_month: bool
    is_today: bool
    events: list[CalendarEvent] = field(default_factory=list)


def to_utc_naive(local_value: datetime, timezone_name: str) -> datetime:
    """Interpret a naive wall-clock value in ``timezone_name`` and return naive UTC."""
    if local_value.tzinfo is None:
        local_value = local_value.replace(tzinfo=ZoneInfo(timezone_name))
    return local_value.astimezone(UTC).replace(tzinfo=None)


def to_local(utc_naive: datetime, timezone_name: str) -> datetime:
    return utc_naive.replace(tzinfo=UTC).astimezone(ZoneInfo(timezone_name))


def local_day_bounds(day: date, timezone_name: str) -> tuple[datetime, datetime]:
    start = to_utc_naive(datetime.combine(day, time.min), timezone_name)
    end = to_utc_naive(datetime.combine(day, time.max), timezone_name)
    return start, end


def _parse_wall_clock(value: str, *, all_day: bool, field_name: str) -> datetime | date:
    text = str(value or "").strip()
    if not text:
        raise CalendarInputError(f"{field_name} is required.")
    try:
        if all_day:
            return date.fromisoformat(text[:10])
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise CalendarInputError(f"Invalid {field_name}") from exc


def resolve_event_window(
    *,
    start: str,
    end: str | None,
    all_day: bool,
    timezone_name: str,
) -> tuple[datetime, datetime]:
    """Turn submitted wall-clock values into a naive-UTC ``(start, end)`` pair.

    All-day events take dates: the window runs from 00:00 on the start date to
    23:59 on the end date (the start date when no end is given). Timed events
    without an end last one hour.
    """
    if all_day:
        start_day = _parse_wall_clock(start, all_day=True, field_name="start")
        end_day = (
            _parse_wall_clock(end, all_day=True, field_name="end") if end else start_day
        )
        start_local = datetime.combine(start_day, ALL_DAY_START)
        end_local = datetime.combine(end_day, ALL_DAY_END)
    else:
        start_local = _parse_wall_clock(start, all_day=False, field_name="start")
        end_local = (
            _parse_wall_clock(end, all_day=False, field_name="end")
            if end
            else start_local + DEFAULT_EVENT_DURATION
        )

    start_utc = to_utc_naive(start_local, timezone_name)
    end_utc = to_utc_naive(end_local, timezone_name)
    if end_utc < start_utc:
        raise CalendarInputError("Event end must not be before its start.")
    return start_utc, end_utc


def parse_month(value: str | None, *, today: date) -> date:
    if not value:
        return today.replace(day=1)
    try:
        year, month = (int(part) for part in value.split("-", 1))
        return date(year, month, 1)
    except ValueError as exc:
        raise CalendarInputError("month must look like YYYY-MM") from exc


def month_grid_days(reference: date) -> list[date]:
    """Every day of the weeks that intersect ``reference``'s month.

    Starts on the week boundary on or before the 1st and ends on the week
    boundary on or after the last day, so the length is a multiple of 7.
    """
    weeks = calendar.Calendar(firstweekday=WEEK_START).monthdatescalendar(
        reference.year, reference.month
    )
    return [day for week in weeks for day in week]


def bucket_events_by_day(
    events: Iterable[CalendarEvent],
    timezone_name: str,
) -> dict[date, list[CalendarEvent]]:
    grouped: dict[date, list[CalendarEvent]] = defaultdict(list)
    for event in events:
        grouped[to_local(event.start_time, timezone_name).date()].append(event)
    return dict(grouped)


def build_month_grid(
    reference: date,
    events: Iterable[CalendarEvent],
    *,
    timezone_name: str,
    today: date,
) -> list[GridDay]:
    by_day = bucket_events_by_day(events, timezone_name)
    return [
        GridDay(
            day=day,
            in_month=day.month == reference.month,
            is_today=day == today,
            events=by_day.get(day, []),
        )
        for day in month_grid_days(reference)
    ]


def grid_range_utc(reference: date, timezone_name: str) -> tuple[datetime, datetime]:
    days = month_grid_days(reference)
    start, _ = local_day_bounds(days[0], timezone_name)
    _, end = local_day_bounds(days[-1], timezone_name)
    return start, end


def month_range_utc(reference: date, timezone_name: str) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    start, _ = local_day_bounds(reference.replace(day=1), timezone_name)
    _, end = local_day_bounds(reference.replace(day=last_day), timezone_name)
    return start, end


async def list_events_in_range(
    session: AsyncSession,
    *,
    family_id: UUID,
    range_start: datetime,
    range_end: datetime,
    limit: int | None = None,
) -> list[CalendarEvent]:
    stmt = (
        select(CalendarEvent)
        .where(
            CalendarEvent.family_id == family_id,
            CalendarEvent.start_time >= range_start,
            CalendarEvent.start_time <= range_end,
        )
        .order_by(CalendarEvent.start_time.asc())
    )
    if limit:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_family_event(
    session: AsyncSession,
    *,
    family_id: UUID,
    event_id: UUID,
) -> CalendarEvent | None:
    result = await session.execute(
        select(CalendarEvent).where(
            CalendarEvent.id == event_id,
            CalendarEvent.family_id == family_id,
        )
    )
    return result.scalar_one_or_none()
