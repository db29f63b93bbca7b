from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.deps import (
    ensure_palette_color,
    get_family_admin,
    get_family_context,
    get_member_context,
)
from familyhub.api.members import to_member_summary
from familyhub.core.db import get_session
from familyhub.models.family import Family
from familyhub.schemas.family import (
    FamilyCreateRequest,
    FamilyJoinRequest,
    FamilyOverviewResponse,
    FamilyResponse,
    FamilyUpdateRequest,
    InviteCodeResponse,
)
from familyhub.services.family_service import (
    AlreadyInFamilyError,
    InvalidInviteCodeError,
    InviteCodeExhaustedError,
    clean_family_name,
    create_family,
    is_valid_timezone,
    join_family,
    regenerate_invite_code,
)
from familyhub.services.member_service import (
    FamilyContext,
    MemberContext,
    list_family_members,
)

router = APIRouter(prefix="/families", tags=["families"])

INVITE_SHARE_MESSAGE = "Share this code with your family so they can join."


def to_family_response(family: Family) -> FamilyResponse:
    return FamilyResponse(
        id=str(family.id),
        name=family.name,
        invite_code=family.invite_code,
        timezone=family.timezone,
        created_at=family.created_at.isoformat(),
        updated_at=family.updated_at.isoformat(),
    )


def _validate_timezone(timezone: str | None) -> str | None:
    value = (timezone or "").strip()
    if not value:
        return None
    if not is_valid_timezone(value):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Unknown timezone",
        )
    return value


@router.post("", response_model=FamilyResponse, status_code=status.HTTP_201_CREATED)
async def create_family_endpoint(
    payload: FamilyCreateRequest,
    context: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
) -> FamilyResponse:
    name = clean_family_name(payload.name)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Family name cannot be empty",
        )
    timezone = _validate_timezone(payload.timezone)
    color = ensure_palette_color(payload.color)

    try:
        family = await create_family(
            session,
            member=context.member,
            name=name,
            timezone=timezone,
            color=color,
        )
    except AlreadyInFamilyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InviteCodeExhaustedError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return to_family_response(family)


@router.post("/join", response_model=FamilyResponse)
async def join_family_endpoint(
    payload: FamilyJoinRequest,
    context: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
) -> FamilyResponse:
    color = ensure_palette_color(payload.color)
    try:
        family = await join_family(
            session,
            member=context.member,
            invite_code=payload.invite_code,
            color=color,
        )
    except AlreadyInFamilyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InvalidInviteCodeError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return to_family_response(family)


@router.get("/current", response_model=FamilyOverviewResponse)
async def family_overview(
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> FamilyOverviewResponse:
    members = await list_family_members(session, family_id=context.family.id)
    return FamilyOverviewResponse(
        family=to_family_response(context.family),
        members=[to_member_summary(member) for member in members],
    )


@router.patch("/current", response_model=FamilyResponse)
async def update_family(
    payload: FamilyUpdateRequest,
    context: FamilyContext = Depends(get_family_admin),
    session: AsyncSession = Depends(get_session),
) -> FamilyResponse:
    family = context.family
    if "name" in payload.model_fields_set:
        next_name = clean_family_name(payload.name or "")
        if not next_name:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Family name cannot be empty",
            )
        family.name = next_name
    timezone = _validate_timezone(payload.timezone)
    if timezone:
        family.timezone = timezone

    family.updated_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(family)
    await session.commit()
    await session.refresh(family)
    return to_family_response(family)


@router.get("/current/invite-code", response_model=InviteCodeResponse)
async def get_invite_code(
    context: FamilyContext = Depends(get_family_context),
) -> InviteCodeResponse:
    return InviteCodeResponse(
        invite_code=context.family.invite_code,
        message=INVITE_SHARE_MESSAGE,
    )


@router.post("/current/invite-code", response_model=InviteCodeResponse)
async def rotate_invite_code(
    context: FamilyContext = Depends(get_family_admin),
    session: AsyncSession = Depends(get_session),
) -> InviteCodeResponse:
    try:
        family = await regenerate_invite_code(session, family=context.family)
    except InviteCodeExhaustedError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return InviteCodeResponse(invite_code=family.invite_code, message=INVITE_SHARE_MESSAGE)
