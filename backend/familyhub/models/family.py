from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Family(SQLModel, table=True):
    __tablename__ = "families"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=120, nullable=False)
    # Stored lower-case; lookups trim and lower-case the candidate first.
    invite_code: str = Field(index=True, unique=True, nullable=False, max_length=32)
    timezone: str = Field(sa_column=Column(String(64), nullable=False, default="UTC"))
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
