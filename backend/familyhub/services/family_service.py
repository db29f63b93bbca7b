from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.core.config import get_settings
from familyhub.models.family import Family
from familyhub.models.member import Member, MemberRole
from familyhub.models.task import TaskList

logger = logging.getLogger(__name__)

INVALID_INVITE_CODE_MESSAGE = "Invalid invite code. Please check and try again."

DEFAULT_TASK_LISTS = [
    ("Groceries", "🛒"),
    ("House", "🏠"),
    ("Errands", "📦"),
]


class FamilyServiceError(ValueError):
    pass


class AlreadyInFamilyError(FamilyServiceError):
    pass


class InvalidInviteCodeError(FamilyServiceError):
    def __init__(self) -> None:
        super().__init__(INVALID_INVITE_CODE_MESSAGE)


class InviteCodeExhaustedError(FamilyServiceError):
    pass


def _current_time() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def clean_family_name(name: str) -> str:
    return " ".join(str(name or "").strip().split())


def normalize_invite_code(code: str) -> str:
    return str(code or "").strip().lower()


def new_invite_code() -> str:
    return secrets.token_hex(3)


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


async def find_family_by_invite_code(session: AsyncSession, code: str) -> Family | None:
    normalized = normalize_invite_code(code)
    if not normalized:
        return None
    result = await session.execute(select(Family).where(Family.invite_code == normalized))
    return result.scalar_one_or_none()


async def generate_unique_invite_code(session: AsyncSession) -> str:
    for _ in range(get_settings().invite_code_attempts):
        candidate = normalize_invite_code(new_invite_code())
        if await find_family_by_invite_code(session, candidate) is None:
            return candidate
    raise InviteCodeExhaustedError("Unable to generate invite code. Try again.")


async def seed_default_task_lists(
    session: AsyncSession,
    *,
    family_id: UUID,
    created_by: UUID,
) -> list[TaskList]:
    now = _current_time()
    lists = [
        TaskList(
            family_id=family_id,
            name=name,
            icon=icon,
            sort_order=order,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        for order, (name, icon) in enumerate(DEFAULT_TASK_LISTS)
    ]
    session.add_all(lists)
    return lists


async def create_family(
    session: AsyncSession,
    *,
    member: Member,
    name: str,
    timezone: str | None = None,
    color: str | None = None,
) -> Family:
    """Create a family owned by ``member`` and seed its default task lists.

    The family row, the member promotion to admin and the seeded lists are
    committed together; a failure in any step leaves no partial family behind.
    """
    if member.family_id:
        raise AlreadyInFamilyError("You already belong to a family.")

    now = _current_time()
    family = Family(
        name=clean_family_name(name),
        invite_code=await generate_unique_invite_code(session),
        timezone=timezone or get_settings().default_family_timezone,
        created_at=now,
        updated_at=now,
    )
    session.add(family)
    await session.flush()

    member.family_id = family.id
    member.role = MemberRole.ADMIN
    if color:
        member.color = color
    member.updated_at = now
    session.add(member)
    await seed_default_task_lists(session, family_id=family.id, created_by=member.id)

    await session.commit()
    await session.refresh(family)
    logger.info("Family %s created by member %s", family.id, member.id)
    return family


async def join_family(
    session: AsyncSession,
    *,
    member: Member,
    invite_code: str,
    color: str | None = None,
) -> Family:
    if member.family_id:
        raise AlreadyInFamilyError("You already belong to a family.")

    family = await find_family_by_invite_code(session, invite_code)
    if not family:
        logger.info("Invite code lookup failed for member %s", member.id)
        raise InvalidInviteCodeError()

    member.family_id = family.id
    if color:
        member.color = color
    member.updated_at = _current_time()
    session.add(member)
    await session.commit()
    logger.info("Member %s joined family %s", member.id, family.id)
    return family


async def regenerate_invite_code(session: AsyncSession, *, family: Family) -> Family:
    family.invite_code = await generate_unique_invite_code(session)
    family.updated_at = _current_time()
    session.add(family)
    await session.commit()
    await session.refresh(family)
    return family
