"""Reusable FastAPI dependencies for caller identity, record loading, and workflow wiring.

Authentication itself happens upstream; the gateway in front of this service
forwards the authenticated user's id in the `X-User-Id` header. These
dependencies resolve that user and provide common "load or 404" helpers so
routers do not repeat lookups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Depends, Header, HTTPException, status

from app.db.session import get_session
from app.models.projects import Project
from app.models.subtasks import Subtask
from app.models.tasks import Task
from app.models.users import User
from app.services.activity import SqlActivityRecorder
from app.services.notifications.dispatch import build_notification_sink
from app.services.task_workflow import SqlTaskWorkflowStore, TaskTransitionCoordinator

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

USER_ID_HEADER = "X-User-Id"
SESSION_DEP = Depends(get_session)


async def require_user(
    x_user_id: int | None = Header(default=None, alias=USER_ID_HEADER),
    session: AsyncSession = SESSION_DEP,
) -> User:
    """Resolve the calling user forwarded by the authentication layer."""
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user = await User.objects.by_id(x_user_id).first(session)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


USER_DEP = Depends(require_user)


async def get_project_or_404(
    project_id: int,
    session: AsyncSession = SESSION_DEP,
) -> Project:
    """Load a project by id or raise HTTP 404."""
    project = await Project.objects.by_id(project_id).first(session)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


async def get_task_or_404(
    task_id: int,
    session: AsyncSession = SESSION_DEP,
) -> Task:
    """Load a task by id or raise HTTP 404."""
    task = await Task.objects.by_id(task_id).first(session)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def get_subtask_or_404(
    subtask_id: int,
    session: AsyncSession = SESSION_DEP,
) -> Subtask:
    """Load a subtask by id or raise HTTP 404."""
    subtask = await Subtask.objects.by_id(subtask_id).first(session)
    if subtask is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subtask not found")
    return subtask


def build_transition_coordinator(session: AsyncSession) -> TaskTransitionCoordinator:
    """Wire the coordinator to the request session and configured notification sink."""
    return TaskTransitionCoordinator(
        store=SqlTaskWorkflowStore(session),
        recorder=SqlActivityRecorder(session),
        emit=build_notification_sink(session),
    )


async def get_transition_coordinator(
    session: AsyncSession = SESSION_DEP,
) -> TaskTransitionCoordinator:
    return build_transition_coordinator(session)


PROJECT_DEP = Depends(get_project_or_404)
TASK_DEP = Depends(get_task_or_404)
SUBTASK_DEP = Depends(get_subtask_or_404)
COORDINATOR_DEP = Depends(get_transition_coordinator)
