from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Place(SQLModel, table=True):
    __tablename__ = "places"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120)
    address: str | None = Field(default=None, max_length=255)
    latitude: float = Field(nullable=False)
    longitude: float = Field(nullable=False)
    radius_meters: int = Field(default=100, nullable=False)
    icon: str = Field(default="📍", max_length=16)
    created_by: UUID = Field(foreign_key="members.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
