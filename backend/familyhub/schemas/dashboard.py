from pydantic import BaseModel

from familyhub.schemas.calendar import EventResponse
from familyhub.schemas.family import FamilyResponse
from familyhub.schemas.member import MemberSummary
from familyhub.schemas.task import TaskResponse


class DashboardResponse(BaseModel):
    family: FamilyResponse
    today: str
    today_events: list[EventResponse]
    open_tasks: list[TaskResponse]
    members: list[MemberSummary]
