from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class AttendeeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"


class CalendarEvent(SQLModel, table=True):
    __tablename__ = "events"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=200)
    description: str | None = Field(default=None, max_length=4000)
    location: str | None = Field(default=None, max_length=255)
    # Naive UTC instants.
    start_time: datetime = Field(nullable=False, index=True)
    end_time: datetime = Field(nullable=False)
    all_day: bool = Field(default=False, nullable=False)
    recurrence_rule: str | None = Field(default=None, max_length=255)
    recurrence_end_date: date | None = Field(default=None)
    created_by: UUID = Field(foreign_key="members.id", nullable=False, index=True)
    color: str | None = Field(default=None, sa_column=Column(String(7), nullable=True))
    external_id: str | None = Field(default=None, max_length=255)
    external_source: str | None = Field(default=None, max_length=40)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)


class EventAttendee(SQLModel, table=True):
    __tablename__ = "event_attendees"

    event_id: UUID = Field(foreign_key="events.id", primary_key=True)
    member_id: UUID = Field(foreign_key="members.id", primary_key=True)
    status: AttendeeStatus = Field(default=AttendeeStatus.PENDING, nullable=False)
