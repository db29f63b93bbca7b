from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    PING = "ping"
    EVENT_SHARE = "event_share"
    TASK_SHARE = "task_share"


class PingType(str, Enum):
    ON_MY_WAY = "on_my_way"
    RUNNING_LATE = "running_late"
    NEED_HELP = "need_help"
    CALL_ME = "call_me"


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False, index=True)
    sender_id: UUID = Field(foreign_key="members.id", nullable=False, index=True)
    content: str | None = Field(default=None, sa_column=Column(String(4000), nullable=True))
    message_type: MessageType = Field(default=MessageType.TEXT, nullable=False)
    ping_type: PingType | None = Field(default=None)
    attached_event_id: UUID | None = Field(default=None, foreign_key="events.id")
    attached_task_id: UUID | None = Field(default=None, foreign_key="tasks.id")
    image_url: str | None = Field(default=None, max_length=1024)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False, index=True)
