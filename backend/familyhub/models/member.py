from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, String
from sqlmodel import Field, SQLModel

DEFAULT_MEMBER_COLOR = "#3B82F6"


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def default_notification_preferences() -> dict[str, Any]:
    return {"push": True, "email": True, "digest": "daily"}


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"
    KID = "kid"


class Member(SQLModel, table=True):
    """A person's profile. ``family_id`` is null while the member is onboarding."""

    __tablename__ = "members"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    account_id: UUID | None = Field(
        default=None,
        foreign_key="accounts.id",
        index=True,
        unique=True,
    )
    family_id: UUID | None = Field(default=None, foreign_key="families.id", index=True)
    email: str | None = Field(default=None, sa_column=Column(String(320), nullable=True))
    name: str = Field(nullable=False, max_length=120)
    avatar_url: str | None = Field(default=None, max_length=1024)
    color: str = Field(
        default=DEFAULT_MEMBER_COLOR,
        sa_column=Column(String(7), nullable=False, default=DEFAULT_MEMBER_COLOR),
    )
    role: MemberRole = Field(default=MemberRole.MEMBER, nullable=False)
    phone: str | None = Field(default=None, max_length=40)
    location_sharing: bool = Field(default=False, nullable=False)
    last_location: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )
    notification_preferences: dict[str, Any] = Field(
        default_factory=default_notification_preferences,
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
