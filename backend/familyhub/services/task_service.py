from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from familyhub.models.task import Task, TaskList, TaskStatus

# Open work first: todo, then in progress, then done.
STATUS_SORT_ORDER = case(
    (Task.status == TaskStatus.TODO, 0),
    (Task.status == TaskStatus.IN_PROGRESS, 1),
    else_=2,
)


def _current_time() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def clean_task_text(value: str) -> str:
    return " ".join(str(value or "").strip().split())


async def list_task_lists(session: AsyncSession, *, family_id: UUID) -> list[TaskList]:
    result = await session.execute(
        select(TaskList)
        .where(TaskList.family_id == family_id)
        .order_by(TaskList.sort_order.asc(), TaskList.name.asc())
    )
    return list(result.scalars().all())


async def get_family_task_list(
    session: AsyncSession,
    *,
    family_id: UUID,
    list_id: UUID,
) -> TaskList | None:
    result = await session.execute(
        select(TaskList).where(
            TaskList.id == list_id,
            TaskList.family_id == family_id,
        )
    )
    return result.scalar_one_or_none()


async def get_family_task(
    session: AsyncSession,
    *,
    family_id: UUID,
    task_id: UUID,
) -> Task | None:
    result = await session.execute(
        select(Task).where(
            Task.id == task_id,
            Task.family_id == family_id,
        )
    )
    return result.scalar_one_or_none()


async def list_tasks(session: AsyncSession, *, list_id: UUID) -> list[Task]:
    result = await session.execute(
        select(Task)
        .where(Task.list_id == list_id)
        .order_by(STATUS_SORT_ORDER, Task.sort_order.asc(), Task.created_at.asc())
    )
    return list(result.scalars().all())


async def list_open_tasks(
    session: AsyncSession,
    *,
    family_id: UUID,
    limit: int,
) -> list[Task]:
    result = await session.execute(
        select(Task)
        .where(
            Task.family_id == family_id,
            Task.status == TaskStatus.TODO,
        )
        .order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def next_list_sort_order(session: AsyncSession, *, family_id: UUID) -> int:
    result = await session.execute(
        select(func.max(TaskList.sort_order)).where(TaskList.family_id == family_id)
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def next_task_sort_order(session: AsyncSession, *, list_id: UUID) -> int:
    result = await session.execute(
        select(func.max(Task.sort_order)).where(Task.list_id == list_id)
    )
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


def set_task_status(task: Task, status: TaskStatus, *, actor_id: UUID) -> Task:
    """Move ``task`` to ``status`` keeping the completion fields in step.

    Entering done stamps ``completed_at``/``completed_by``; leaving done clears
    both. Re-asserting the current status is a no-op for the completion fields.
    """
    now = _current_time()
    if status == TaskStatus.DONE:
        if task.status != TaskStatus.DONE:
            task.completed_at = now
            task.completed_by = actor_id
    else:
        task.completed_at = None
        task.completed_by = None
    task.status = status
    task.updated_at = now
    return task


def toggle_task(task: Task, *, actor_id: UUID) -> Task:
    next_status = TaskStatus.TODO if task.status == TaskStatus.DONE else TaskStatus.DONE
    return set_task_status(task, next_status, actor_id=actor_id)
