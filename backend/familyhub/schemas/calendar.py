from pydantic import BaseModel, Field

from familyhub.schemas.member import MemberSummary


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    location: str | None = Field(default=None, max_length=255)
    # Wall-clock values in the family timezone: "YYYY-MM-DDTHH:MM", or a plain
    # date when all_day is set.
    start: str = Field(min_length=1, max_length=40)
    end: str | None = Field(default=None, max_length=40)
    all_day: bool = False
    color: str | None = Field(default=None, min_length=4, max_length=7)


class EventUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    location: str | None = Field(default=None, max_length=255)
    start: str | None = Field(default=None, max_length=40)
    end: str | None = Field(default=None, max_length=40)
    all_day: bool | None = None
    color: str | None = Field(default=None, min_length=4, max_length=7)


class EventResponse(BaseModel):
    id: str
    family_id: str
    title: str
    description: str | None = None
    location: str | None = None
    start_time: str
    end_time: str
    all_day: bool
    recurrence_rule: str | None = None
    recurrence_end_date: str | None = None
    color: str | None = None
    display_color: str
    created_by: str
    creator: MemberSummary | None = None
    created_at: str
    updated_at: str


class EventListResponse(BaseModel):
    range_start: str
    range_end: str
    items: list[EventResponse]


class EventDeleteResponse(BaseModel):
    event_id: str
    message: str


class MonthGridDayResponse(BaseModel):
    date: str
    in_month: bool
    is_today: bool
    events: list[EventResponse]


class MonthGridResponse(BaseModel):
    month: str
    timezone: str
    days: list[MonthGridDayResponse]
