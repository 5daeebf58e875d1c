"""Queue envelope for deferred transition notification delivery."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from app.core.config import settings
from app.core.logging import get_logger
from app.services.queue import QueuedTask, RedisTaskQueue
from app.services.task_workflow.events import TaskTransitionEvent

logger = get_logger(__name__)
TASK_TYPE = "task_transition_notification"


def encode_transition_task(event: TaskTransitionEvent, *, attempts: int = 0) -> QueuedTask:
    return QueuedTask(
        task_type=TASK_TYPE,
        payload=event.to_payload(),
        created_at=datetime.now(UTC),
        attempts=attempts,
    )


def decode_transition_task(task: QueuedTask) -> TaskTransitionEvent:
    """Decode a QueuedTask into a TaskTransitionEvent."""
    if task.task_type != TASK_TYPE:
        raise ValueError(f"Unexpected task_type={task.task_type!r}; expected {TASK_TYPE!r}")
    return TaskTransitionEvent.from_payload(task.payload)


def enqueue_transition_notification(
    event: TaskTransitionEvent,
    *,
    queue: RedisTaskQueue | None = None,
) -> bool:
    """Persist a transition event in the Redis queue for the worker."""
    queued = (queue or RedisTaskQueue()).enqueue(encode_transition_task(event))
    if not queued:
        logger.warning(
            "notifications.transition.enqueue_failed",
            extra={"task_id": event.task_id, "new_status": event.new_status.value},
        )
    return queued


class QueuedNotificationSink:
    """Transition sink that defers notification writes to the queue worker."""

    def __init__(self, queue: RedisTaskQueue | None = None) -> None:
        self._queue = queue

    async def __call__(self, event: TaskTransitionEvent) -> None:
        # The redis client is synchronous; keep the push off the event loop.
        await asyncio.to_thread(enqueue_transition_notification, event, queue=self._queue)


def requeue_transition_task(
    task: QueuedTask,
    *,
    delay_seconds: float = 0,
    queue: RedisTaskQueue | None = None,
) -> bool:
    """Requeue a failed notification task with capped retries."""
    return (queue or RedisTaskQueue()).requeue(
        task,
        max_retries=settings.rq_dispatch_max_retries,
        delay_seconds=delay_seconds,
    )
