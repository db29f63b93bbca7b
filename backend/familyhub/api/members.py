from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.deps import ensure_palette_color, get_family_context, get_member_context
from familyhub.core.db import get_session
from familyhub.models.member import DEFAULT_MEMBER_COLOR, Member
from familyhub.schemas.member import (
    MemberProfileResponse,
    MemberSummary,
    PaletteResponse,
    ProfileUpdateRequest,
)
from familyhub.services.member_service import (
    COLOR_PALETTE,
    FamilyContext,
    MemberContext,
    apply_profile_changes,
    clean_member_name,
    list_family_members,
)

router = APIRouter(prefix="/members", tags=["members"])


def to_member_summary(member: Member) -> MemberSummary:
    return MemberSummary(
        id=str(member.id),
        name=member.name,
        color=member.color,
        role=member.role.value if hasattr(member.role, "value") else str(member.role),
    )


def to_member_profile_response(member: Member) -> MemberProfileResponse:
    return MemberProfileResponse(
        id=str(member.id),
        account_id=str(member.account_id) if member.account_id else None,
        family_id=str(member.family_id) if member.family_id else None,
        email=member.email,
        name=member.name,
        avatar_url=member.avatar_url,
        color=member.color,
        role=member.role.value if hasattr(member.role, "value") else str(member.role),
        phone=member.phone,
        location_sharing=bool(member.location_sharing),
        last_location=member.last_location,
        notification_preferences=dict(member.notification_preferences or {}),
        created_at=member.created_at.isoformat(),
        updated_at=member.updated_at.isoformat(),
    )


@router.get("/palette", response_model=PaletteResponse)
async def get_palette() -> PaletteResponse:
    return PaletteResponse(colors=list(COLOR_PALETTE), default=DEFAULT_MEMBER_COLOR)


@router.get("", response_model=list[MemberSummary])
async def list_members(
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> list[MemberSummary]:
    members = await list_family_members(session, family_id=context.family.id)
    return [to_member_summary(member) for member in members]


@router.get("/me", response_model=MemberProfileResponse)
async def get_my_profile(
    context: MemberContext = Depends(get_member_context),
) -> MemberProfileResponse:
    return to_member_profile_response(context.member)


@router.patch("/me", response_model=MemberProfileResponse)
async def update_my_profile(
    payload: ProfileUpdateRequest,
    context: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
) -> MemberProfileResponse:
    member = context.member

    name = None
    if "name" in payload.model_fields_set:
        name = clean_member_name(payload.name or "")
        if not name:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="name is required.",
            )
    color = ensure_palette_color(payload.color)

    apply_profile_changes(member, name=name, color=color)
    if "phone" in payload.model_fields_set:
        member.phone = (payload.phone or "").strip() or None
    if payload.location_sharing is not None:
        member.location_sharing = payload.location_sharing
    if payload.notification_preferences is not None:
        member.notification_preferences = payload.notification_preferences.model_dump()

    session.add(member)
    await session.commit()
    await session.refresh(member)
    return to_member_profile_response(member)
