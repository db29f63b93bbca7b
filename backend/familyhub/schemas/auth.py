from pydantic import BaseModel, EmailStr, Field

from familyhub.schemas.family import FamilyResponse
from familyhub.schemas.member import MemberProfileResponse


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=120)
    color: str | None = Field(default=None, min_length=4, max_length=7)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    member: MemberProfileResponse
    family: FamilyResponse | None = None
    needs_onboarding: bool


class AuthResponse(BaseModel):
    token: TokenResponse
    me: MeResponse


class LogoutResponse(BaseModel):
    message: str
