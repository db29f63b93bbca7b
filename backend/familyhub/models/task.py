from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Column, String
from sqlmodel import Field, SQLModel

DEFAULT_LIST_ICON = "📋"


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskList(SQLModel, table=True):
    __tablename__ = "task_lists"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False, index=True)
    name: str = Field(sa_column=Column(String(80), nullable=False))
    icon: str = Field(default=DEFAULT_LIST_ICON, max_length=16)
    color: str | None = Field(default=None, sa_column=Column(String(7), nullable=True))
    sort_order: int = Field(default=0, nullable=False)
    created_by: UUID = Field(foreign_key="members.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    list_id: UUID = Field(foreign_key="task_lists.id", nullable=False, index=True)
    family_id: UUID = Field(foreign_key="families.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    status: TaskStatus = Field(default=TaskStatus.TODO, nullable=False, index=True)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, nullable=False)
    due_date: date | None = Field(default=None)
    assigned_to: UUID | None = Field(default=None, foreign_key="members.id", index=True)
    recurrence_rule: str | None = Field(default=None, max_length=255)
    points: int = Field(default=0, nullable=False)
    # Set together when status becomes done, cleared together when it leaves done.
    completed_at: datetime | None = Field(default=None)
    completed_by: UUID | None = Field(default=None, foreign_key="members.id")
    sort_order: int = Field(default=0, nullable=False)
    created_by: UUID = Field(foreign_key="members.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
