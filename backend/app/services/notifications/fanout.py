"""Turn task transition events into per-user notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.logging import get_logger
from app.core.workflow_types import NotificationType
from app.models.projects import Project
from app.models.tasks import Task
from app.services.notifications.ledger import create_notification

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.models.notifications import Notification
    from app.services.task_workflow.events import TaskTransitionEvent

logger = get_logger(__name__)


async def transition_recipients(session: AsyncSession, event: TaskTransitionEvent) -> list[int]:
    """Assignee and project owner, deduplicated, without the acting user."""
    candidates: list[int | None] = []
    task = await Task.objects.by_id(event.task_id).first(session)
    if task is not None:
        candidates.append(task.assignee_id)
    project = await Project.objects.by_id(event.project_id).first(session)
    if project is not None:
        candidates.append(project.owner_id)

    recipients: list[int] = []
    for user_id in candidates:
        if user_id is None or user_id == event.actor_user_id or user_id in recipients:
            continue
        recipients.append(user_id)
    return recipients


async def notify_task_transition(
    session: AsyncSession,
    event: TaskTransitionEvent,
) -> list[Notification]:
    """Write one TASK_STATUS_CHANGED notification per recipient in a single commit."""
    recipients = await transition_recipients(session, event)
    if not recipients:
        return []
    title = f"Task moved to {event.new_status.display_name}"
    message = (
        f'Task "{event.task_title}" moved from '
        f"{event.old_status.display_name} to {event.new_status.display_name}"
    )
    notifications = [
        await create_notification(
            session,
            recipient_id=user_id,
            notification_type=NotificationType.TASK_STATUS_CHANGED,
            title=title,
            message=message,
            data=event.to_payload(),
            commit=False,
        )
        for user_id in recipients
    ]
    await session.commit()
    logger.info(
        "notifications.transition.delivered",
        extra={"task_id": event.task_id, "recipient_count": len(notifications)},
    )
    return notifications


class InlineNotificationSink:
    """Transition sink that writes notifications within the current request."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def __call__(self, event: TaskTransitionEvent) -> None:
        await notify_task_transition(self._session, event)
