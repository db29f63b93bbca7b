from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.core.db import get_session
from familyhub.core.security import decode_access_token
from familyhub.models.account import Account
from familyhub.models.auth_session import AuthSession
from familyhub.models.member import MemberRole
from familyhub.services.member_service import (
    FamilyContext,
    MemberContext,
    is_palette_color,
    normalize_color,
    resolve_member_context,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def today_for_timezone(timezone_name: str) -> date:
    # Family timezones are validated on write.
    return datetime.now(ZoneInfo(timezone_name)).date()


def parse_uuid(value: str | None, *, field_name: str) -> UUID:
    try:
        return UUID(str(value or "").strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {field_name}",
        ) from exc


def ensure_palette_color(color: str | None) -> str | None:
    if color is None:
        return None
    if not is_palette_color(color):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="color must be one of the family palette colors.",
        )
    return normalize_color(color)


async def authenticate_token(
    session: AsyncSession,
    token: str,
) -> tuple[Account, AuthSession]:
    payload = decode_access_token(token)
    account_id = UUID(str(payload.get("sub")))
    session_id = UUID(str(payload.get("sid")))

    result = await session.execute(
        select(AuthSession).where(
            AuthSession.id == session_id,
            AuthSession.account_id == account_id,
        )
    )
    auth_session = result.scalar_one_or_none()
    if not auth_session or auth_session.revoked_at is not None:
        raise ValueError("Session is no longer valid")

    account_result = await session.execute(select(Account).where(Account.id == account_id))
    account = account_result.scalar_one_or_none()
    if not account or not account.is_active:
        raise ValueError("Account is not active")
    return account, auth_session


async def get_member_context(
    session: AsyncSession = Depends(get_session),
    token: str = Depends(oauth2_scheme),
) -> MemberContext:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
    )
    try:
        account, auth_session = await authenticate_token(session, token)
    except (ValueError, TypeError):
        raise unauthorized

    context = await resolve_member_context(
        session,
        account=account,
        session_id=auth_session.id,
    )
    if not context:
        raise unauthorized
    return context


async def get_family_context(
    context: MemberContext = Depends(get_member_context),
) -> FamilyContext:
    if context.family is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Create or join a family first.",
        )
    return FamilyContext(
        account=context.account,
        member=context.member,
        family=context.family,
        session_id=context.session_id,
    )


async def get_family_admin(
    context: FamilyContext = Depends(get_family_context),
) -> FamilyContext:
    if context.member.role != MemberRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a family admin can perform this action",
        )
    return context
