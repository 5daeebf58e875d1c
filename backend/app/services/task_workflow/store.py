"""Persistence capability consumed by the transition coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from sqlmodel import col

from app.core.errors import ProjectNotFoundError, TaskNotFoundError
from app.core.time import utcnow
from app.core.workflow_types import TaskStatus, WorkflowType
from app.models.projects import Project
from app.models.subtasks import Subtask
from app.models.tasks import Task

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession


@dataclass(frozen=True)
class SubtaskState:
    id: int
    completed: bool


@dataclass(frozen=True)
class TaskSnapshot:
    """Task fields the workflow needs, read at evaluation time."""

    id: int
    project_id: int
    title: str
    status: TaskStatus


class TaskWorkflowStore(Protocol):
    async def list_subtasks(self, task_id: int) -> list[SubtaskState]:
        """Raise TaskNotFoundError when the task no longer exists."""
        ...

    async def get_task(self, task_id: int) -> TaskSnapshot:
        """Raise TaskNotFoundError when the task no longer exists."""
        ...

    async def get_project_workflow(self, project_id: int) -> WorkflowType:
        """Raise ProjectNotFoundError when the project does not exist."""
        ...

    async def set_task_status(self, task_id: int, status: TaskStatus) -> None: ...


class SqlTaskWorkflowStore:
    """TaskWorkflowStore backed by the request's async SQLModel session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _load_task(self, task_id: int) -> Task:
        # Re-read from the database; a value cached earlier in the request may
        # be stale when another request touched the same task.
        task = await Task.objects.by_id(task_id).fresh().first(self._session)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def list_subtasks(self, task_id: int) -> list[SubtaskState]:
        await self._load_task(task_id)
        subtasks = await (
            Subtask.objects.filter_by(task_id=task_id)
            .order_by(col(Subtask.order).asc(), col(Subtask.id).asc())
            .fresh()
            .all(self._session)
        )
        return [SubtaskState(id=int(s.id or 0), completed=s.completed) for s in subtasks]

    async def get_task(self, task_id: int) -> TaskSnapshot:
        task = await self._load_task(task_id)
        return TaskSnapshot(
            id=task_id,
            project_id=task.project_id,
            title=task.title,
            status=TaskStatus(task.status),
        )

    async def get_project_workflow(self, project_id: int) -> WorkflowType:
        project = await Project.objects.by_id(project_id).first(self._session)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return WorkflowType(project.workflow_type)

    async def set_task_status(self, task_id: int, status: TaskStatus) -> None:
        task = await self._load_task(task_id)
        task.status = status.value
        task.updated_at = utcnow()
        self._session.add(task)
        await self._session.commit()
