from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.models.message import Message, MessageType, PingType
from familyhub.services.calendar_service import to_local


@dataclass(frozen=True)
class PingDefinition:
    ping_type: PingType
    label: str
    emoji: str
    accent: str


PING_VOCABULARY: dict[PingType, PingDefinition] = {
    PingType.ON_MY_WAY: PingDefinition(PingType.ON_MY_WAY, "On my way", "🚗", "blue"),
    PingType.RUNNING_LATE: PingDefinition(PingType.RUNNING_LATE, "Running late", "⏰", "yellow"),
    PingType.NEED_HELP: PingDefinition(PingType.NEED_HELP, "Need help", "🆘", "red"),
    PingType.CALL_ME: PingDefinition(PingType.CALL_ME, "Call me", "📞", "green"),
}


@dataclass
class MessageDay:
    day: date
    label: str
    messages: list[Message]


def get_ping_definition(ping_type: PingType | str) -> PingDefinition:
    # PingType() raises ValueError for anything outside the closed vocabulary.
    return PING_VOCABULARY[PingType(ping_type)]


def clean_message_content(content: str | None) -> str:
    return str(content or "").strip()


def build_text_message(*, family_id: UUID, sender_id: UUID, content: str) -> Message | None:
    cleaned = clean_message_content(content)
    if not cleaned:
        return None
    return Message(
        family_id=family_id,
        sender_id=sender_id,
        content=cleaned,
        message_type=MessageType.TEXT,
    )


def build_ping_message(*, family_id: UUID, sender_id: UUID, ping_type: PingType | str) -> Message:
    definition = get_ping_definition(ping_type)
    return Message(
        family_id=family_id,
        sender_id=sender_id,
        content=definition.label,
        message_type=MessageType.PING,
        ping_type=definition.ping_type,
    )


async def list_recent_messages(
    session: AsyncSession,
    *,
    family_id: UUID,
    limit: int,
) -> list[Message]:
    result = await session.execute(
        select(Message)
        .where(Message.family_id == family_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    )
    return list(reversed(result.scalars().all()))


def day_label(day: date, *, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.strftime('%A, %B')} {day.day}"


def group_messages_by_day(
    messages: Iterable[Message],
    *,
    timezone_name: str,
    today: date,
) -> list[MessageDay]:
    groups: list[MessageDay] = []
    for message in messages:
        local_day = to_local(message.created_at, timezone_name).date()
        if not groups or groups[-1].day != local_day:
            groups.append(MessageDay(day=local_day, label=day_label(local_day, today=today), messages=[]))
        groups[-1].messages.append(message)
    return groups
