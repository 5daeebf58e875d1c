"""Queue worker dispatching queued tasks to handlers by task type."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.services.notifications.dispatch import process_transition_notification_task
from app.services.notifications.queue import TASK_TYPE as TRANSITION_NOTIFICATION_TASK_TYPE
from app.services.notifications.queue import requeue_transition_task
from app.services.queue import QueuedTask, RedisTaskQueue

logger = get_logger(__name__)
_WORKER_BLOCK_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class _TaskHandler:
    handler: Callable[[QueuedTask], Awaitable[None]]
    requeue: Callable[[RedisTaskQueue, QueuedTask, float], bool]


def _retry_delay(attempts: int) -> float:
    return float(
        min(
            settings.rq_dispatch_retry_base_seconds * (2 ** max(0, attempts)),
            settings.rq_dispatch_retry_max_seconds,
        )
    )


def _compute_jitter(base_delay: float) -> float:
    return random.uniform(0, min(settings.rq_dispatch_retry_max_seconds / 10, base_delay * 0.1))


_TASK_HANDLERS: dict[str, _TaskHandler] = {
    TRANSITION_NOTIFICATION_TASK_TYPE: _TaskHandler(
        handler=process_transition_notification_task,
        requeue=lambda queue, task, delay: requeue_transition_task(
            task, delay_seconds=delay, queue=queue
        ),
    ),
}


async def flush_queue(
    *,
    queue: RedisTaskQueue | None = None,
    block: bool = False,
    block_timeout: float = 0,
) -> int:
    """Consume ready tasks until the queue is empty; return how many succeeded."""
    queue = queue or RedisTaskQueue()
    processed = 0
    while True:
        try:
            task = queue.dequeue(block=block, block_timeout=block_timeout)
        except Exception:
            # Redis is unreachable; let the caller back off before retrying.
            logger.warning("queue.worker.dequeue_failed", extra={"queue_name": queue.queue_name})
            raise

        if task is None:
            break

        handler = _TASK_HANDLERS.get(task.task_type)
        if handler is None:
            logger.warning(
                "queue.worker.task_unhandled",
                extra={"task_type": task.task_type, "queue_name": queue.queue_name},
            )
            continue

        try:
            await handler.handler(task)
            processed += 1
        except Exception as exc:
            logger.exception(
                "queue.worker.failed",
                extra={"task_type": task.task_type, "attempt": task.attempts, "error": str(exc)},
            )
            base_delay = _retry_delay(task.attempts)
            if not handler.requeue(queue, task, base_delay + _compute_jitter(base_delay)):
                logger.warning(
                    "queue.worker.drop_task",
                    extra={"task_type": task.task_type, "attempt": task.attempts},
                )
        await asyncio.sleep(settings.rq_dispatch_throttle_seconds)

    if processed > 0:
        logger.info("queue.worker.batch_complete", extra={"count": processed})
    return processed


async def _run_worker_loop() -> None:
    while True:
        try:
            await flush_queue(
                block=True,
                # Keep a finite timeout so scheduled retries are periodically promoted.
                block_timeout=_WORKER_BLOCK_TIMEOUT_SECONDS,
            )
        except Exception:
            logger.exception("queue.worker.loop_failed", extra={"queue_name": settings.rq_queue_name})
            await asyncio.sleep(1)


def run_worker() -> None:
    """Console entrypoint for continuous notification queue processing."""
    configure_logging()
    logger.info(
        "queue.worker.started",
        extra={"queue_name": settings.rq_queue_name, "throttle_seconds": settings.rq_dispatch_throttle_seconds},
    )
    try:
        asyncio.run(_run_worker_loop())
    finally:
        logger.info("queue.worker.stopped", extra={"queue_name": settings.rq_queue_name})
