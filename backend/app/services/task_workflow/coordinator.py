"""Task status transition coordinator.

Runs after a subtask's completion flag changes: aggregates the task's
subtasks, consults the workflow policy against freshly read task and project
state, and when a transition applies commits the new status, appends the
activity entry, and hands a transition event to notification fan-out.

No locks are taken. Concurrent runs for the same task converge because the
policy never re-fires once the task has advanced; a duplicate activity entry
is possible under such a race and is accepted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.errors import (
    AuditWriteFailure,
    ProjectLinkBrokenError,
    ProjectNotFoundError,
    TaskNotFoundError,
)
from app.core.logging import get_logger
from app.services.activity import ActivityRecord, record_with_retry
from app.services.task_workflow.aggregator import all_subtasks_complete
from app.services.task_workflow.events import TaskTransitionEvent
from app.services.task_workflow.policy import decide_transition

if TYPE_CHECKING:
    from app.core.workflow_types import TaskStatus
    from app.services.activity import ActivityRecorder
    from app.services.task_workflow.events import TransitionEventSink
    from app.services.task_workflow.store import TaskWorkflowStore

logger = get_logger(__name__)


class TaskTransitionCoordinator:
    """Apply workflow-driven and manual task status transitions."""

    def __init__(
        self,
        store: TaskWorkflowStore,
        recorder: ActivityRecorder,
        emit: TransitionEventSink | None = None,
    ) -> None:
        self._store = store
        self._recorder = recorder
        self._emit = emit

    async def on_subtask_completion_changed(self, task_id: int) -> None:
        """Re-evaluate a task after one of its subtasks changed completion state.

        A task deleted in the meantime ends the pipeline quietly. A task whose
        project is missing raises ProjectLinkBrokenError.
        """
        try:
            subtasks = await self._store.list_subtasks(task_id)
        except TaskNotFoundError:
            logger.info("task.workflow.task_missing", extra={"task_id": task_id, "step": "subtasks"})
            return
        all_complete = all_subtasks_complete(subtasks)

        try:
            task = await self._store.get_task(task_id)
        except TaskNotFoundError:
            logger.info("task.workflow.task_missing", extra={"task_id": task_id, "step": "task"})
            return
        try:
            workflow_type = await self._store.get_project_workflow(task.project_id)
        except ProjectNotFoundError as exc:
            logger.error(
                "task.workflow.project_link_broken",
                extra={"task_id": task_id, "project_id": task.project_id},
            )
            raise ProjectLinkBrokenError(task_id=task_id, project_id=task.project_id) from exc

        new_status = decide_transition(workflow_type, task.status, all_complete)
        if new_status is None:
            logger.debug(
                "task.workflow.no_transition",
                extra={
                    "task_id": task_id,
                    "workflow_type": workflow_type.value,
                    "status": task.status.value,
                    "all_complete": all_complete,
                },
            )
            return

        await self._store.set_task_status(task_id, new_status)
        logger.info(
            "task.workflow.transitioned",
            extra={
                "task_id": task_id,
                "project_id": task.project_id,
                "old_status": task.status.value,
                "new_status": new_status.value,
            },
        )
        await self._after_transition(
            TaskTransitionEvent(
                task_id=task_id,
                project_id=task.project_id,
                task_title=task.title,
                old_status=task.status,
                new_status=new_status,
            ),
        )

    async def on_manual_status_change(
        self,
        *,
        task_id: int,
        project_id: int,
        task_title: str,
        old_status: TaskStatus,
        new_status: TaskStatus,
        actor_user_id: int | None = None,
    ) -> None:
        """Audit and announce a status change a user already committed."""
        if old_status == new_status:
            return
        await self._after_transition(
            TaskTransitionEvent(
                task_id=task_id,
                project_id=project_id,
                task_title=task_title,
                old_status=old_status,
                new_status=new_status,
                actor_user_id=actor_user_id,
            ),
        )

    async def _after_transition(self, event: TaskTransitionEvent) -> None:
        entry = ActivityRecord(
            project_id=event.project_id,
            task_id=event.task_id,
            task_title=event.task_title,
            old_value=event.old_status.value,
            new_value=event.new_status.value,
            actor_user_id=event.actor_user_id,
        )
        try:
            await record_with_retry(self._recorder, entry)
        except AuditWriteFailure as exc:
            # The status change stays committed; the gap is reported to operators.
            logger.error(
                "task.workflow.audit_write_failed",
                extra={
                    "task_id": event.task_id,
                    "project_id": event.project_id,
                    "old_status": event.old_status.value,
                    "new_status": event.new_status.value,
                    "attempts": exc.attempts,
                },
            )

        if self._emit is None:
            return
        try:
            await self._emit(event)
        except Exception:
            logger.warning(
                "task.workflow.emit_failed",
                extra={"task_id": event.task_id, "new_status": event.new_status.value},
                exc_info=True,
            )
