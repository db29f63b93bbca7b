import logging

from fastapi import (
    APIRouter,
    Depends,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.deps import authenticate_token, get_family_context, today_for_timezone
from familyhub.api.members import to_member_summary
from familyhub.core.config import get_settings
from familyhub.core.db import get_session
from familyhub.models.message import Message
from familyhub.schemas.message import (
    MessageCreateRequest,
    MessageDayResponse,
    MessageListResponse,
    MessageResponse,
    PingCreateRequest,
    PingDefinitionResponse,
    PingVocabularyResponse,
)
from familyhub.services.calendar_service import to_local
from familyhub.services.member_service import (
    FamilyContext,
    load_members_by_id,
    resolve_member_context,
)
from familyhub.services.message_service import (
    PING_VOCABULARY,
    build_ping_message,
    build_text_message,
    group_messages_by_day,
    list_recent_messages,
)
from familyhub.services.realtime import MessageBroker, get_message_broker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])
settings = get_settings()


def to_message_response(message: Message, members_by_id: dict, timezone_name: str) -> MessageResponse:
    sender = members_by_id.get(message.sender_id)
    return MessageResponse(
        id=str(message.id),
        family_id=str(message.family_id),
        sender_id=str(message.sender_id),
        sender=to_member_summary(sender) if sender else None,
        content=message.content,
        message_type=(
            message.message_type.value
            if hasattr(message.message_type, "value")
            else str(message.message_type)
        ),
        ping_type=(
            message.ping_type.value
            if hasattr(message.ping_type, "value")
            else message.ping_type
        ),
        attached_event_id=str(message.attached_event_id) if message.attached_event_id else None,
        attached_task_id=str(message.attached_task_id) if message.attached_task_id else None,
        image_url=message.image_url,
        created_at=to_local(message.created_at, timezone_name).isoformat(),
    )


async def _store_and_publish(
    session: AsyncSession,
    broker: MessageBroker,
    context: FamilyContext,
    message: Message,
) -> MessageResponse:
    session.add(message)
    await session.commit()
    await session.refresh(message)

    response = to_message_response(
        message,
        {context.member.id: context.member},
        context.family.timezone,
    )
    await broker.publish(context.family.id, response)
    return response


@router.get("/pings", response_model=PingVocabularyResponse)
async def ping_vocabulary() -> PingVocabularyResponse:
    return PingVocabularyResponse(
        items=[
            PingDefinitionResponse(
                ping_type=definition.ping_type.value,
                label=definition.label,
                emoji=definition.emoji,
                accent=definition.accent,
            )
            for definition in PING_VOCABULARY.values()
        ]
    )


@router.get("", response_model=MessageListResponse)
async def list_messages(
    limit: int | None = Query(default=None, ge=1, le=500),
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> MessageListResponse:
    timezone_name = context.family.timezone
    messages = await list_recent_messages(
        session,
        family_id=context.family.id,
        limit=limit or settings.message_history_limit,
    )
    members_by_id = await load_members_by_id(session, (message.sender_id for message in messages))
    days = group_messages_by_day(
        messages,
        timezone_name=timezone_name,
        today=today_for_timezone(timezone_name),
    )
    return MessageListResponse(
        items=[to_message_response(message, members_by_id, timezone_name) for message in messages],
        days=[
            MessageDayResponse(
                date=day.day.isoformat(),
                label=day.label,
                message_ids=[str(message.id) for message in day.messages],
            )
            for day in days
        ],
    )


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={204: {"description": "Blank message ignored"}},
)
async def send_text_message(
    payload: MessageCreateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
    broker: MessageBroker = Depends(get_message_broker),
):
    message = build_text_message(
        family_id=context.family.id,
        sender_id=context.member.id,
        content=payload.content,
    )
    if message is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return await _store_and_publish(session, broker, context, message)


@router.post("/ping", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_ping(
    payload: PingCreateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
    broker: MessageBroker = Depends(get_message_broker),
) -> MessageResponse:
    # ping_type is validated against the closed vocabulary by the request model.
    message = build_ping_message(
        family_id=context.family.id,
        sender_id=context.member.id,
        ping_type=payload.ping_type,
    )
    return await _store_and_publish(session, broker, context, message)


@router.websocket("/ws")
async def message_stream(
    websocket: WebSocket,
    token: str = Query(...),
    session: AsyncSession = Depends(get_session),
    broker: MessageBroker = Depends(get_message_broker),
) -> None:
    try:
        account, auth_session = await authenticate_token(session, token)
    except (ValueError, TypeError):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    context = await resolve_member_context(session, account=account, session_id=auth_session.id)
    if not context or context.family is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    family_id = context.family.id
    member_id = context.member.id
    # Nothing below uses the database; hand the connection back to the pool.
    await session.close()

    async def forward(message: MessageResponse) -> None:
        await websocket.send_text(message.model_dump_json())

    async def close_revoked() -> None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)

    subscription = broker.subscribe(
        family_id,
        forward,
        session_id=auth_session.id,
        on_revoke=close_revoked,
    )
    logger.info("Member %s subscribed to family %s messages", member_id, family_id)
    try:
        # Registered before the accept so nothing sent after the handshake is missed.
        await websocket.accept()
        while not subscription.closed:
            # Client frames carry nothing; reading keeps the disconnect observable.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.close()
        logger.info("Member %s unsubscribed from family %s messages", member_id, family_id)
