from datetime import UTC, date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.deps import ensure_palette_color, get_family_context, parse_uuid, today_for_timezone
from familyhub.api.members import to_member_summary
from familyhub.core.db import get_session
from familyhub.models.calendar_event import CalendarEvent
from familyhub.models.member import DEFAULT_MEMBER_COLOR, Member
from familyhub.schemas.calendar import (
    EventCreateRequest,
    EventDeleteResponse,
    EventListResponse,
    EventResponse,
    EventUpdateRequest,
    MonthGridDayResponse,
    MonthGridResponse,
)
from familyhub.services.calendar_service import (
    CalendarInputError,
    build_month_grid,
    get_family_event,
    grid_range_utc,
    list_events_in_range,
    local_day_bounds,
    month_range_utc,
    parse_month,
    resolve_event_window,
    to_local,
)
from familyhub.services.member_service import FamilyContext, load_members_by_id

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _clean_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _wall_clock(value: datetime, timezone_name: str, *, all_day: bool) -> str:
    local_value = to_local(value, timezone_name)
    return local_value.strftime("%Y-%m-%d" if all_day else "%Y-%m-%dT%H:%M")


def _input_error(exc: CalendarInputError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


def to_event_response(
    event: CalendarEvent,
    members_by_id: dict,
    timezone_name: str,
) -> EventResponse:
    creator: Member | None = members_by_id.get(event.created_by)
    return EventResponse(
        id=str(event.id),
        family_id=str(event.family_id),
        title=event.title,
        description=event.description,
        location=event.location,
        start_time=to_local(event.start_time, timezone_name).isoformat(),
        end_time=to_local(event.end_time, timezone_name).isoformat(),
        all_day=event.all_day,
        recurrence_rule=event.recurrence_rule,
        recurrence_end_date=str(event.recurrence_end_date) if event.recurrence_end_date else None,
        color=event.color,
        display_color=event.color or (creator.color if creator else DEFAULT_MEMBER_COLOR),
        created_by=str(event.created_by),
        creator=to_member_summary(creator) if creator else None,
        created_at=event.created_at.isoformat(),
        updated_at=event.updated_at.isoformat(),
    )


async def to_event_responses(
    session: AsyncSession,
    events: list[CalendarEvent],
    timezone_name: str,
) -> list[EventResponse]:
    members_by_id = await load_members_by_id(session, (event.created_by for event in events))
    return [to_event_response(event, members_by_id, timezone_name) for event in events]


@router.get("/events", response_model=EventListResponse)
async def list_events(
    month: str | None = Query(default=None),
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> EventListResponse:
    timezone_name = context.family.timezone
    if start or end:
        if not (start and end) or end < start:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="start and end must both be given with start <= end",
            )
        range_start, _ = local_day_bounds(start, timezone_name)
        _, range_end = local_day_bounds(end, timezone_name)
    else:
        try:
            reference = parse_month(month, today=today_for_timezone(timezone_name))
        except CalendarInputError as exc:
            raise _input_error(exc) from exc
        range_start, range_end = month_range_utc(reference, timezone_name)

    events = await list_events_in_range(
        session,
        family_id=context.family.id,
        range_start=range_start,
        range_end=range_end,
    )
    return EventListResponse(
        range_start=to_local(range_start, timezone_name).isoformat(),
        range_end=to_local(range_end, timezone_name).isoformat(),
        items=await to_event_responses(session, events, timezone_name),
    )


@router.get("/grid", response_model=MonthGridResponse)
async def month_grid(
    month: str | None = Query(default=None),
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> MonthGridResponse:
    timezone_name = context.family.timezone
    today = today_for_timezone(timezone_name)
    try:
        reference = parse_month(month, today=today)
    except CalendarInputError as exc:
        raise _input_error(exc) from exc

    range_start, range_end = grid_range_utc(reference, timezone_name)
    events = await list_events_in_range(
        session,
        family_id=context.family.id,
        range_start=range_start,
        range_end=range_end,
    )
    members_by_id = await load_members_by_id(session, (event.created_by for event in events))
    grid = build_month_grid(reference, events, timezone_name=timezone_name, today=today)
    return MonthGridResponse(
        month=reference.strftime("%Y-%m"),
        timezone=timezone_name,
        days=[
            MonthGridDayResponse(
                date=grid_day.day.isoformat(),
                in_month=grid_day.in_month,
                is_today=grid_day.is_today,
                events=[
                    to_event_response(event, members_by_id, timezone_name)
                    for event in grid_day.events
                ],
            )
            for grid_day in grid
        ],
    )


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> EventResponse:
    title = payload.title.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="title is required.",
        )
    color = ensure_palette_color(payload.color)
    try:
        start_time, end_time = resolve_event_window(
            start=payload.start,
            end=payload.end,
            all_day=payload.all_day,
            timezone_name=context.family.timezone,
        )
    except CalendarInputError as exc:
        raise _input_error(exc) from exc

    event = CalendarEvent(
        family_id=context.family.id,
        created_by=context.member.id,
        title=title,
        description=_clean_optional_text(payload.description),
        location=_clean_optional_text(payload.location),
        start_time=start_time,
        end_time=end_time,
        all_day=payload.all_day,
        color=color,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return to_event_response(event, {context.member.id: context.member}, context.family.timezone)


async def _load_event(session: AsyncSession, context: FamilyContext, event_id: str) -> CalendarEvent:
    event = await get_family_event(
        session,
        family_id=context.family.id,
        event_id=parse_uuid(event_id, field_name="event_id"),
    )
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found in your family.",
        )
    return event


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> EventResponse:
    event = await _load_event(session, context, event_id)
    return (await to_event_responses(session, [event], context.family.timezone))[0]


@router.patch("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    payload: EventUpdateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> EventResponse:
    event = await _load_event(session, context, event_id)
    timezone_name = context.family.timezone
    fields = payload.model_fields_set

    if "title" in fields:
        title = (payload.title or "").strip()
        if not title:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="title is required.",
            )
        event.title = title
    if "description" in fields:
        event.description = _clean_optional_text(payload.description)
    if "location" in fields:
        event.location = _clean_optional_text(payload.location)
    if "color" in fields:
        event.color = ensure_palette_color(payload.color)

    if fields & {"start", "end", "all_day"}:
        all_day = payload.all_day if payload.all_day is not None else event.all_day
        start = payload.start or _wall_clock(event.start_time, timezone_name, all_day=all_day)
        end = payload.end or _wall_clock(event.end_time, timezone_name, all_day=all_day)
        try:
            event.start_time, event.end_time = resolve_event_window(
                start=start,
                end=end,
                all_day=all_day,
                timezone_name=timezone_name,
            )
        except CalendarInputError as exc:
            raise _input_error(exc) from exc
        event.all_day = all_day

    event.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return (await to_event_responses(session, [event], timezone_name))[0]


@router.delete("/events/{event_id}", response_model=EventDeleteResponse)
async def delete_event(
    event_id: str,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> EventDeleteResponse:
    event = await _load_event(session, context, event_id)
    await session.delete(event)
    await session.commit()
    return EventDeleteResponse(event_id=str(event.id), message="Event deleted.")
