from pydantic import BaseModel, Field

from familyhub.schemas.member import MemberSummary


class FamilyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    timezone: str | None = Field(default=None, max_length=64)
    color: str | None = Field(default=None, min_length=4, max_length=7)


class FamilyJoinRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=64)
    color: str | None = Field(default=None, min_length=4, max_length=7)


class FamilyUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    timezone: str | None = Field(default=None, max_length=64)


class FamilyResponse(BaseModel):
    id: str
    name: str
    invite_code: str
    timezone: str
    created_at: str
    updated_at: str


class FamilyOverviewResponse(BaseModel):
    family: FamilyResponse
    members: list[MemberSummary]


class InviteCodeResponse(BaseModel):
    invite_code: str
    message: str
