from datetime import date

from pydantic import BaseModel, Field

from familyhub.models.task import TaskPriority, TaskStatus
from familyhub.schemas.member import MemberSummary


class TaskListCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    icon: str | None = Field(default=None, max_length=16)
    color: str | None = Field(default=None, min_length=4, max_length=7)


class TaskListResponse(BaseModel):
    id: str
    family_id: str
    name: str
    icon: str
    color: str | None = None
    sort_order: int
    created_by: str
    created_at: str
    updated_at: str


class TaskListListResponse(BaseModel):
    items: list[TaskListResponse]


class TaskCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    assigned_to: str | None = None
    due_date: date | None = None
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskStatusUpdateRequest(BaseModel):
    status: TaskStatus


class TaskResponse(BaseModel):
    id: str
    list_id: str
    family_id: str
    title: str
    description: str | None = None
    status: str
    priority: str
    due_date: str | None = None
    assigned_to: str | None = None
    assignee: MemberSummary | None = None
    points: int
    completed_at: str | None = None
    completed_by: str | None = None
    sort_order: int
    created_by: str
    created_at: str
    updated_at: str


class TaskListTasksResponse(BaseModel):
    task_list: TaskListResponse
    items: list[TaskResponse]
    remaining: list[TaskResponse]
    completed: list[TaskResponse]
