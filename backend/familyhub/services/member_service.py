from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.models.account import Account
from familyhub.models.family import Family
from familyhub.models.member import Member

# Visual identity keys shared by calendar dots, avatars and assignee badges.
COLOR_PALETTE = (
    "#3B82F6",
    "#10B981",
    "#8B5CF6",
    "#F59E0B",
    "#EF4444",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
)


@dataclass
class MemberContext:
    """The resolved caller: account, profile and (possibly absent) family."""

    account: Account
    member: Member
    family: Family | None
    session_id: UUID

    @property
    def needs_onboarding(self) -> bool:
        return self.family is None


@dataclass
class FamilyContext(MemberContext):
    family: Family


def clean_member_name(name: str) -> str:
    return " ".join(str(name or "").strip().split())


def normalize_color(color: str | None) -> str | None:
    value = str(color or "").strip().upper()
    return value or None


def is_palette_color(color: str | None) -> bool:
    return normalize_color(color) in COLOR_PALETTE


def _current_time() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


async def resolve_member_context(
    session: AsyncSession,
    *,
    account: Account,
    session_id: UUID,
) -> MemberContext | None:
    member_result = await session.execute(
        select(Member).where(Member.account_id == account.id)
    )
    member = member_result.scalar_one_or_none()
    if not member:
        return None

    family = None
    if member.family_id:
        family_result = await session.execute(
            select(Family).where(Family.id == member.family_id)
        )
        family = family_result.scalar_one_or_none()

    return MemberContext(
        account=account,
        member=member,
        family=family,
        session_id=session_id,
    )


async def list_family_members(
    session: AsyncSession,
    *,
    family_id: UUID,
) -> list[Member]:
    result = await session.execute(
        select(Member)
        .where(Member.family_id == family_id)
        .order_by(Member.name.asc(), Member.created_at.asc())
    )
    return list(result.scalars().all())


async def get_family_member(
    session: AsyncSession,
    *,
    family_id: UUID,
    member_id: UUID,
) -> Member | None:
    result = await session.execute(
        select(Member).where(
            Member.id == member_id,
            Member.family_id == family_id,
        )
    )
    return result.scalar_one_or_none()


async def load_members_by_id(
    session: AsyncSession,
    member_ids: Iterable[UUID | None],
) -> dict[UUID, Member]:
    ids = {member_id for member_id in member_ids if member_id}
    if not ids:
        return {}
    result = await session.execute(select(Member).where(Member.id.in_(list(ids))))
    return {member.id: member for member in result.scalars().all()}


def apply_profile_changes(
    member: Member,
    *,
    name: str | None = None,
    color: str | None = None,
) -> Member:
    if name is not None:
        member.name = clean_member_name(name)
    if color is not None:
        member.color = normalize_color(color) or member.color
    member.updated_at = _current_time()
    return member
