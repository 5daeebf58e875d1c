"""Subtask endpoints; completion changes feed the task workflow coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status
from sqlmodel import col

from app.api.deps import COORDINATOR_DEP, SESSION_DEP, SUBTASK_DEP, TASK_DEP, USER_DEP
from app.core.time import utcnow
from app.models.subtasks import Subtask
from app.models.tasks import Task
from app.schemas.common import OkResponse
from app.schemas.subtasks import SubtaskCreate, SubtaskRead, SubtaskUpdate
from app.services.task_workflow import TaskTransitionCoordinator

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(tags=["subtasks"], dependencies=[USER_DEP])


@router.get("/tasks/{task_id}/subtasks", response_model=list[SubtaskRead])
async def list_subtasks(
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> list[SubtaskRead]:
    """List a task's subtasks in display order."""
    subtasks = await (
        Subtask.objects.filter_by(task_id=task.id)
        .order_by(col(Subtask.order).asc(), col(Subtask.id).asc())
        .all(session)
    )
    return [SubtaskRead.model_validate(s, from_attributes=True) for s in subtasks]


@router.post(
    "/tasks/{task_id}/subtasks",
    response_model=SubtaskRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_subtask(
    payload: SubtaskCreate,
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> SubtaskRead:
    """Create a subtask. Creation does not re-evaluate the task's status."""
    now = utcnow()
    subtask = Subtask(
        task_id=int(task.id or 0),
        title=payload.title,
        order=payload.order,
        created_at=now,
        updated_at=now,
    )
    session.add(subtask)
    await session.commit()
    await session.refresh(subtask)
    return SubtaskRead.model_validate(subtask, from_attributes=True)


@router.patch("/subtasks/{subtask_id}", response_model=SubtaskRead)
async def update_subtask(
    payload: SubtaskUpdate,
    subtask: Subtask = SUBTASK_DEP,
    session: AsyncSession = SESSION_DEP,
    coordinator: TaskTransitionCoordinator = COORDINATOR_DEP,
) -> SubtaskRead:
    """Apply the fields present in the payload.

    When `completed` is part of the payload the owning task is re-evaluated
    after the subtask is committed. The response is the updated subtask either
    way.
    """
    for key, value in payload.changes().items():
        setattr(subtask, key, value)
    subtask.updated_at = utcnow()
    session.add(subtask)
    await session.commit()
    await session.refresh(subtask)
    result = SubtaskRead.model_validate(subtask, from_attributes=True)

    if payload.touches_completion:
        await coordinator.on_subtask_completion_changed(result.task_id)
    return result


@router.delete("/subtasks/{subtask_id}", response_model=OkResponse)
async def delete_subtask(
    subtask: Subtask = SUBTASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> OkResponse:
    """Delete a subtask."""
    await session.delete(subtask)
    await session.commit()
    return OkResponse()
