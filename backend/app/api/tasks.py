"""Task endpoints.

A status sent through `PATCH /tasks/{id}` is a manual move by the caller: it
is applied as given, audited with the caller as actor, and announced the same
way as workflow-driven transitions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, status
from sqlmodel import col

from app.api.deps import (
    COORDINATOR_DEP,
    PROJECT_DEP,
    SESSION_DEP,
    TASK_DEP,
    USER_DEP,
)
from app.core.logging import get_logger
from app.core.time import utcnow
from app.core.workflow_types import TaskStatus
from app.models.projects import Project
from app.models.tasks import Task
from app.models.users import User
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from app.services.task_workflow import TaskTransitionCoordinator

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(tags=["tasks"])
logger = get_logger(__name__)

_ENUM_FIELDS = ("status", "priority")


async def _require_assignee(session: AsyncSession, assignee_id: int | None) -> None:
    if assignee_id is None:
        return
    if await User.objects.by_id(assignee_id).first(session) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="assignee_id does not reference an existing user",
        )


def _to_read(task: Task) -> TaskRead:
    return TaskRead.model_validate(task, from_attributes=True)


@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[USER_DEP],
)
async def create_task(
    payload: TaskCreate,
    project: Project = PROJECT_DEP,
    session: AsyncSession = SESSION_DEP,
) -> TaskRead:
    """Create a task in a project."""
    await _require_assignee(session, payload.assignee_id)
    data = payload.model_dump()
    for name in _ENUM_FIELDS:
        data[name] = data[name].value
    now = utcnow()
    task = Task(**data, project_id=int(project.id or 0), created_at=now, updated_at=now)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return _to_read(task)


@router.get(
    "/projects/{project_id}/tasks",
    response_model=list[TaskRead],
    dependencies=[USER_DEP],
)
async def list_tasks(
    project: Project = PROJECT_DEP,
    session: AsyncSession = SESSION_DEP,
) -> list[TaskRead]:
    tasks = await (
        Task.objects.filter_by(project_id=project.id)
        .order_by(col(Task.order).asc(), col(Task.id).asc())
        .all(session)
    )
    return [_to_read(task) for task in tasks]


@router.get("/tasks/{task_id}", response_model=TaskRead, dependencies=[USER_DEP])
async def get_task(task: Task = TASK_DEP) -> TaskRead:
    return _to_read(task)


@router.patch("/tasks/{task_id}", response_model=TaskRead)
async def update_task(
    payload: TaskUpdate,
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
    coordinator: TaskTransitionCoordinator = COORDINATOR_DEP,
    user: User = USER_DEP,
) -> TaskRead:
    """Apply a partial task update and audit any manual status change."""
    updates = payload.model_dump(include=payload.model_fields_set)
    if "assignee_id" in updates:
        await _require_assignee(session, updates["assignee_id"])
    for name in _ENUM_FIELDS:
        if name in updates:
            updates[name] = updates[name].value
    start = updates.get("start_date", task.start_date)
    end = updates.get("end_date", task.end_date)
    if start and end and end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_date must not be before start_date",
        )

    old_status = TaskStatus(task.status)
    for key, value in updates.items():
        setattr(task, key, value)
    task.updated_at = utcnow()
    session.add(task)
    await session.commit()
    await session.refresh(task)
    result = _to_read(task)

    if result.status != old_status:
        logger.info(
            "task.status.manual_change",
            extra={
                "task_id": result.id,
                "old_status": old_status.value,
                "new_status": result.status.value,
                "actor_user_id": user.id,
            },
        )
        await coordinator.on_manual_status_change(
            task_id=result.id,
            project_id=result.project_id,
            task_title=result.title,
            old_status=old_status,
            new_status=result.status,
            actor_user_id=user.id,
        )
    return result
