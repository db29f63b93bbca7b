from typing import Any, Literal

from pydantic import BaseModel, Field


class MemberSummary(BaseModel):
    id: str
    name: str
    color: str
    role: str


class NotificationPreferences(BaseModel):
    push: bool = True
    email: bool = True
    digest: Literal["none", "daily", "weekly"] = "daily"


class MemberProfileResponse(BaseModel):
    id: str
    account_id: str | None = None
    family_id: str | None = None
    email: str | None = None
    name: str
    avatar_url: str | None = None
    color: str
    role: str
    phone: str | None = None
    location_sharing: bool
    last_location: dict[str, Any] | None = None
    notification_preferences: dict[str, Any]
    created_at: str
    updated_at: str


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    color: str | None = Field(default=None, min_length=4, max_length=7)
    phone: str | None = Field(default=None, max_length=40)
    location_sharing: bool | None = None
    notification_preferences: NotificationPreferences | None = None


class PaletteResponse(BaseModel):
    colors: list[str]
    default: str
