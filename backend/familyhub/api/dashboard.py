from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.calendar import to_event_responses
from familyhub.api.deps import get_family_context, today_for_timezone
from familyhub.api.families import to_family_response
from familyhub.api.members import to_member_summary
from familyhub.api.tasks import to_task_responses
from familyhub.core.db import get_session
from familyhub.schemas.dashboard import DashboardResponse
from familyhub.services.calendar_service import list_events_in_range, local_day_bounds
from familyhub.services.member_service import FamilyContext, list_family_members
from familyhub.services.task_service import list_open_tasks

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

DASHBOARD_ITEM_LIMIT = 5


@router.get("", response_model=DashboardResponse)
async def dashboard(
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> DashboardResponse:
    family = context.family
    today = today_for_timezone(family.timezone)
    day_start, day_end = local_day_bounds(today, family.timezone)

    events = await list_events_in_range(
        session,
        family_id=family.id,
        range_start=day_start,
        range_end=day_end,
        limit=DASHBOARD_ITEM_LIMIT,
    )
    tasks = await list_open_tasks(session, family_id=family.id, limit=DASHBOARD_ITEM_LIMIT)
    members = await list_family_members(session, family_id=family.id)

    return DashboardResponse(
        family=to_family_response(family),
        today=today.isoformat(),
        today_events=await to_event_responses(session, events, family.timezone),
        open_tasks=await to_task_responses(session, tasks),
        members=[to_member_summary(member) for member in members],
    )
