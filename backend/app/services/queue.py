"""Redis list-backed task queue with delayed retry scheduling."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, cast

import redis

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_SCHEDULED_SUFFIX = ":scheduled"
_DRAIN_BATCH_SIZE = 100


@dataclass(frozen=True)
class QueuedTask:
    """Generic queued task envelope."""

    task_type: str
    payload: dict[str, Any]
    created_at: datetime
    attempts: int = 0

    def to_json(self) -> str:
        return json.dumps(
            {
                "task_type": self.task_type,
                "payload": self.payload,
                "created_at": self.created_at.isoformat(),
                "attempts": self.attempts,
            },
            sort_keys=True,
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> QueuedTask:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data: dict[str, Any] = json.loads(raw)
        created_raw = data.get("created_at")
        return cls(
            task_type=str(data["task_type"]),
            payload=dict(data.get("payload") or {}),
            created_at=(
                datetime.fromisoformat(created_raw) if created_raw else datetime.now(UTC)
            ),
            attempts=int(data.get("attempts", 0)),
        )


def _redis_client(redis_url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(redis_url or settings.rq_redis_url)


class RedisTaskQueue:
    """Named queue: a Redis list for ready tasks plus a sorted set for delayed ones."""

    def __init__(
        self,
        queue_name: str | None = None,
        *,
        redis_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.queue_name = queue_name or settings.rq_queue_name
        self._redis_url = redis_url
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _redis_client(self._redis_url)
        return self._client

    @property
    def scheduled_key(self) -> str:
        return f"{self.queue_name}{_SCHEDULED_SUFFIX}"

    def enqueue(self, task: QueuedTask, *, delay_seconds: float = 0) -> bool:
        """Push a task now, or schedule it when a positive delay is given."""
        delay = max(0.0, float(delay_seconds))
        try:
            if delay > 0:
                self.client.zadd(self.scheduled_key, {task.to_json(): time.time() + delay})
            else:
                self.client.lpush(self.queue_name, task.to_json())
        except redis.RedisError as exc:
            logger.warning(
                "queue.enqueue_failed",
                extra={
                    "task_type": task.task_type,
                    "queue_name": self.queue_name,
                    "error": str(exc),
                },
            )
            return False
        logger.info(
            "queue.enqueued",
            extra={
                "task_type": task.task_type,
                "queue_name": self.queue_name,
                "attempt": task.attempts,
                "delay_seconds": delay,
            },
        )
        return True

    def _promote_due(self) -> float | None:
        """Move due scheduled tasks onto the ready list; return seconds until the next one."""
        now = time.time()
        due = cast(
            list[str | bytes],
            self.client.zrangebyscore(self.scheduled_key, "-inf", now, start=0, num=_DRAIN_BATCH_SIZE),
        )
        if due:
            self.client.lpush(self.queue_name, *due)
            self.client.zrem(self.scheduled_key, *due)
        upcoming = cast(
            list[tuple[str | bytes, float]],
            self.client.zrangebyscore(
                self.scheduled_key, now, "+inf", start=0, num=1, withscores=True
            ),
        )
        if not upcoming:
            return None
        return max(0.0, float(upcoming[0][1]) - now)

    def dequeue(self, *, block: bool = False, block_timeout: float = 0) -> QueuedTask | None:
        """Pop the oldest ready task, optionally waiting for one."""
        next_due = self._promote_due()
        raw: str | bytes | None
        if block:
            timeout = max(0.0, float(block_timeout))
            if next_due is not None:
                timeout = min(timeout, next_due) if timeout else next_due
            popped = cast(
                tuple[str | bytes, str | bytes] | None,
                self.client.brpop([self.queue_name], timeout=timeout),
            )
            raw = popped[1] if popped is not None else None
        else:
            raw = cast(str | bytes | None, self.client.rpop(self.queue_name))
        if raw is None:
            return None
        try:
            return QueuedTask.from_json(raw)
        except (ValueError, KeyError) as exc:
            logger.error(
                "queue.decode_failed",
                extra={"queue_name": self.queue_name, "raw_payload": str(raw), "error": str(exc)},
            )
            raise

    def requeue(self, task: QueuedTask, *, max_retries: int, delay_seconds: float = 0) -> bool:
        """Requeue a failed task with capped retries; False once the cap is exceeded."""
        retried = replace(task, attempts=task.attempts + 1)
        if retried.attempts > max_retries:
            logger.warning(
                "queue.drop_failed_task",
                extra={
                    "task_type": task.task_type,
                    "queue_name": self.queue_name,
                    "attempts": retried.attempts,
                },
            )
            return False
        return self.enqueue(retried, delay_seconds=delay_seconds)
