from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from familyhub.api.deps import ensure_palette_color, get_family_context, parse_uuid
from familyhub.api.members import to_member_summary
from familyhub.core.db import get_session
from familyhub.models.task import DEFAULT_LIST_ICON, Task, TaskList, TaskStatus
from familyhub.schemas.task import (
    TaskCreateRequest,
    TaskListCreateRequest,
    TaskListListResponse,
    TaskListResponse,
    TaskListTasksResponse,
    TaskResponse,
    TaskStatusUpdateRequest,
)
from familyhub.services.member_service import (
    FamilyContext,
    get_family_member,
    load_members_by_id,
)
from familyhub.services.task_service import (
    clean_task_text,
    get_family_task,
    get_family_task_list,
    list_task_lists,
    list_tasks,
    next_list_sort_order,
    next_task_sort_order,
    set_task_status,
    toggle_task,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def to_task_list_response(task_list: TaskList) -> TaskListResponse:
    return TaskListResponse(
        id=str(task_list.id),
        family_id=str(task_list.family_id),
        name=task_list.name,
        icon=task_list.icon,
        color=task_list.color,
        sort_order=task_list.sort_order,
        created_by=str(task_list.created_by),
        created_at=task_list.created_at.isoformat(),
        updated_at=task_list.updated_at.isoformat(),
    )


def to_task_response(task: Task, members_by_id: dict) -> TaskResponse:
    assignee = members_by_id.get(task.assigned_to) if task.assigned_to else None
    return TaskResponse(
        id=str(task.id),
        list_id=str(task.list_id),
        family_id=str(task.family_id),
        title=task.title,
        description=task.description,
        status=task.status.value if hasattr(task.status, "value") else str(task.status),
        priority=task.priority.value if hasattr(task.priority, "value") else str(task.priority),
        due_date=str(task.due_date) if task.due_date else None,
        assigned_to=str(task.assigned_to) if task.assigned_to else None,
        assignee=to_member_summary(assignee) if assignee else None,
        points=task.points,
        completed_at=task.completed_at.isoformat() if task.completed_at else None,
        completed_by=str(task.completed_by) if task.completed_by else None,
        sort_order=task.sort_order,
        created_by=str(task.created_by),
        created_at=task.created_at.isoformat(),
        updated_at=task.updated_at.isoformat(),
    )


async def to_task_responses(session: AsyncSession, tasks: list[Task]) -> list[TaskResponse]:
    members_by_id = await load_members_by_id(session, (task.assigned_to for task in tasks))
    return [to_task_response(task, members_by_id) for task in tasks]


async def _load_task_list(session: AsyncSession, context: FamilyContext, list_id: str) -> TaskList:
    task_list = await get_family_task_list(
        session,
        family_id=context.family.id,
        list_id=parse_uuid(list_id, field_name="list_id"),
    )
    if not task_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task list not found in your family.",
        )
    return task_list


async def _load_task(session: AsyncSession, context: FamilyContext, task_id: str) -> Task:
    task = await get_family_task(
        session,
        family_id=context.family.id,
        task_id=parse_uuid(task_id, field_name="task_id"),
    )
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found in your family.",
        )
    return task


@router.get("/lists", response_model=TaskListListResponse)
async def get_task_lists(
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskListListResponse:
    lists = await list_task_lists(session, family_id=context.family.id)
    return TaskListListResponse(items=[to_task_list_response(item) for item in lists])


@router.post("/lists", response_model=TaskListResponse, status_code=status.HTTP_201_CREATED)
async def create_task_list(
    payload: TaskListCreateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskListResponse:
    name = clean_task_text(payload.name)
    if not name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="List name is required.",
        )
    task_list = TaskList(
        family_id=context.family.id,
        name=name,
        icon=(payload.icon or "").strip() or DEFAULT_LIST_ICON,
        color=ensure_palette_color(payload.color),
        sort_order=await next_list_sort_order(session, family_id=context.family.id),
        created_by=context.member.id,
    )
    session.add(task_list)
    await session.commit()
    await session.refresh(task_list)
    return to_task_list_response(task_list)


@router.get("/lists/{list_id}/tasks", response_model=TaskListTasksResponse)
async def get_list_tasks(
    list_id: str,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskListTasksResponse:
    task_list = await _load_task_list(session, context, list_id)
    items = await to_task_responses(session, await list_tasks(session, list_id=task_list.id))
    return TaskListTasksResponse(
        task_list=to_task_list_response(task_list),
        items=items,
        remaining=[item for item in items if item.status != TaskStatus.DONE.value],
        completed=[item for item in items if item.status == TaskStatus.DONE.value],
    )


@router.post(
    "/lists/{list_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    list_id: str,
    payload: TaskCreateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    task_list = await _load_task_list(session, context, list_id)
    title = clean_task_text(payload.title)
    if not title:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="title is required.",
        )

    assignee = None
    if (payload.assigned_to or "").strip():
        assignee = await get_family_member(
            session,
            family_id=context.family.id,
            member_id=parse_uuid(payload.assigned_to, field_name="assigned_to"),
        )
        if not assignee:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="assigned_to must reference a member of your family.",
            )

    task = Task(
        list_id=task_list.id,
        family_id=context.family.id,
        title=title,
        description=(payload.description or "").strip() or None,
        priority=payload.priority,
        due_date=payload.due_date,
        assigned_to=assignee.id if assignee else None,
        sort_order=await next_task_sort_order(session, list_id=task_list.id),
        created_by=context.member.id,
    )
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return to_task_response(task, {assignee.id: assignee} if assignee else {})


@router.post("/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task_endpoint(
    task_id: str,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    task = await _load_task(session, context, task_id)
    toggle_task(task, actor_id=context.member.id)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return (await to_task_responses(session, [task]))[0]


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: str,
    payload: TaskStatusUpdateRequest,
    context: FamilyContext = Depends(get_family_context),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    task = await _load_task(session, context, task_id)
    set_task_status(task, payload.status, actor_id=context.member.id)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return (await to_task_responses(session, [task]))[0]
