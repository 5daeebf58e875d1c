"""Worker-side handler writing notifications for queued transition events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.config import settings
from app.core.logging import get_logger
from app.db.session import async_session_maker
from app.services.notifications.fanout import InlineNotificationSink, notify_task_transition
from app.services.notifications.queue import QueuedNotificationSink, decode_transition_task

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.services.queue import QueuedTask
    from app.services.task_workflow.events import TransitionEventSink

logger = get_logger(__name__)


async def process_transition_notification_task(task: QueuedTask) -> None:
    """Decode a queued transition and write its notifications."""
    event = decode_transition_task(task)
    async with async_session_maker() as session:
        notifications = await notify_task_transition(session, event)
    logger.info(
        "notifications.transition.processed",
        extra={
            "task_id": event.task_id,
            "attempt": task.attempts,
            "recipient_count": len(notifications),
        },
    )


def build_notification_sink(session: AsyncSession) -> TransitionEventSink:
    """Pick the transition sink configured by NOTIFICATION_DISPATCH_MODE."""
    if settings.notification_dispatch_mode == "queue":
        return QueuedNotificationSink()
    return InlineNotificationSink(session)
