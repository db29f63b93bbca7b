import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.api.deps import ensure_palette_color, get_member_context
from familyhub.api.families import to_family_response
from familyhub.api.members import to_member_profile_response
from familyhub.core.db import get_session
from familyhub.core.security import create_access_token, hash_password, verify_password
from familyhub.models.account import Account
from familyhub.models.auth_session import AuthSession
from familyhub.models.member import DEFAULT_MEMBER_COLOR, Member
from familyhub.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    RegisterRequest,
    TokenResponse,
)
from familyhub.services.member_service import (
    MemberContext,
    clean_member_name,
    resolve_member_context,
)
from familyhub.services.realtime import MessageBroker, get_message_broker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def to_me_response(context: MemberContext) -> MeResponse:
    return MeResponse(
        member=to_member_profile_response(context.member),
        family=to_family_response(context.family) if context.family else None,
        needs_onboarding=context.needs_onboarding,
    )


async def issue_access_token(
    session: AsyncSession,
    account: Account,
    *,
    auth_method: str,
) -> tuple[str, AuthSession]:
    auth_session = AuthSession(account_id=account.id, auth_method=auth_method)
    session.add(auth_session)
    await session.commit()
    await session.refresh(auth_session)
    return create_access_token(str(account.id), str(auth_session.id)), auth_session


async def authenticate_account(
    session: AsyncSession,
    email: str,
    password: str,
) -> Account:
    result = await session.execute(select(Account).where(Account.email == email.lower().strip()))
    account = result.scalar_one_or_none()
    if not account or not account.is_active or not verify_password(password, account.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account


async def _auth_response(
    session: AsyncSession,
    account: Account,
    *,
    auth_method: str,
) -> AuthResponse:
    token, auth_session = await issue_access_token(session, account, auth_method=auth_method)
    context = await resolve_member_context(session, account=account, session_id=auth_session.id)
    if not context:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member profile not found",
        )
    return AuthResponse(token=TokenResponse(access_token=token), me=to_me_response(context))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    email = payload.email.lower().strip()
    existing = await session.execute(select(Account).where(Account.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already exists",
        )

    name = clean_member_name(payload.name)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="name is required.",
        )
    color = ensure_palette_color(payload.color) or DEFAULT_MEMBER_COLOR

    account = Account(email=email, hashed_password=hash_password(payload.password))
    session.add(account)
    await session.flush()

    # New profiles start without a family and are routed to onboarding.
    session.add(Member(account_id=account.id, email=email, name=name, color=color))
    await session.commit()
    await session.refresh(account)

    return await _auth_response(session, account, auth_method="register")


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    account = await authenticate_account(session, payload.email, payload.password)
    return await _auth_response(session, account, auth_method="login")


@router.post("/token", response_model=TokenResponse)
async def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    # For OAuth2 password flow, username field is used to carry email.
    account = await authenticate_account(session, form_data.username, form_data.password)
    access_token, _ = await issue_access_token(session, account, auth_method="token")
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=MeResponse)
async def me(
    context: MemberContext = Depends(get_member_context),
) -> MeResponse:
    return to_me_response(context)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    context: MemberContext = Depends(get_member_context),
    session: AsyncSession = Depends(get_session),
    broker: MessageBroker = Depends(get_message_broker),
) -> LogoutResponse:
    result = await session.execute(
        select(AuthSession).where(AuthSession.id == context.session_id)
    )
    auth_session = result.scalar_one()
    auth_session.revoked_at = datetime.now(UTC).replace(tzinfo=None)
    session.add(auth_session)
    await session.commit()
    logger.info("Session %s signed out", auth_session.id)
    # Live message streams opened with this session end with it.
    await broker.revoke_session(auth_session.id)
    return LogoutResponse(message="Signed out.")
