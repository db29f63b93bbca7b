from pydantic import BaseModel, Field

from familyhub.models.message import PingType
from familyhub.schemas.member import MemberSummary


class MessageCreateRequest(BaseModel):
    content: str = Field(max_length=4000)


class PingCreateRequest(BaseModel):
    ping_type: PingType


class MessageResponse(BaseModel):
    id: str
    family_id: str
    sender_id: str
    sender: MemberSummary | None = None
    content: str | None = None
    message_type: str
    ping_type: str | None = None
    attached_event_id: str | None = None
    attached_task_id: str | None = None
    image_url: str | None = None
    created_at: str


class MessageDayResponse(BaseModel):
    date: str
    label: str
    message_ids: list[str]


class MessageListResponse(BaseModel):
    items: list[MessageResponse]
    days: list[MessageDayResponse]


class PingDefinitionResponse(BaseModel):
    ping_type: str
    label: str
    emoji: str
    accent: str


class PingVocabularyResponse(BaseModel):
    items: list[PingDefinitionResponse]
