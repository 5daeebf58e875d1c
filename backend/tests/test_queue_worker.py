# ruff: noqa: INP001
"""Queue worker dispatch and transition notification envelope tests."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime

import pytest
import redis

from app.core.workflow_types import TaskStatus
from app.services import queue_worker
from app.services.notifications import queue as notification_queue
from app.services.queue import QueuedTask
from app.services.task_workflow import TaskTransitionEvent


class _FakeQueue:
    queue_name = "taskflow-notifications"

    def __init__(self, tasks: list[QueuedTask]) -> None:
        self.tasks = list(tasks)
        self.enqueued: list[tuple[QueuedTask, float]] = []

    def dequeue(self, *, block: bool = False, block_timeout: float = 0) -> QueuedTask | None:
        del block, block_timeout
        if not self.tasks:
            return None
        return self.tasks.pop(0)

    def enqueue(self, task: QueuedTask, *, delay_seconds: float = 0) -> bool:
        self.enqueued.append((task, delay_seconds))
        return True

    def requeue(self, task: QueuedTask, *, max_retries: int, delay_seconds: float = 0) -> bool:
        if task.attempts + 1 > max_retries:
            return False
        return self.enqueue(replace(task, attempts=task.attempts + 1), delay_seconds=delay_seconds)


def _event() -> TaskTransitionEvent:
    return TaskTransitionEvent(
        task_id=7,
        project_id=1,
        task_title="Write docs",
        old_status=TaskStatus.BACKLOG,
        new_status=TaskStatus.IN_REVIEW,
        actor_user_id=3,
        occurred_at=datetime(2026, 3, 1, 9, 30, tzinfo=UTC),
    )


def test_transition_task_envelope_roundtrip() -> None:
    task = notification_queue.encode_transition_task(_event(), attempts=2)

    assert task.task_type == notification_queue.TASK_TYPE
    assert task.attempts == 2
    decoded = notification_queue.decode_transition_task(QueuedTask.from_json(task.to_json()))
    assert decoded == _event()


def test_decode_rejects_foreign_task_type() -> None:
    with pytest.raises(ValueError):
        notification_queue.decode_transition_task(
            QueuedTask(task_type="webhook", payload={}, created_at=datetime.now(UTC))
        )


@pytest.mark.asyncio
async def test_queued_sink_enqueues_transition() -> None:
    queue = _FakeQueue([])
    sink = notification_queue.QueuedNotificationSink(queue=queue)  # type: ignore[arg-type]

    await sink(_event())

    assert len(queue.enqueued) == 1
    queued, delay = queue.enqueued[0]
    assert delay == 0
    assert queued.payload["task_id"] == 7
    assert queued.payload["actor_user_id"] == 3


@pytest.mark.asyncio
async def test_queued_sink_pushes_off_the_event_loop_thread() -> None:
    threads: list[int] = []

    class _RecordingQueue(_FakeQueue):
        def enqueue(self, task: QueuedTask, *, delay_seconds: float = 0) -> bool:
            threads.append(threading.get_ident())
            return super().enqueue(task, delay_seconds=delay_seconds)

    queue = _RecordingQueue([])
    sink = notification_queue.QueuedNotificationSink(queue=queue)  # type: ignore[arg-type]

    await sink(_event())

    assert len(queue.enqueued) == 1
    assert len(threads) == 1
    assert threads[0] != threading.get_ident()


@pytest.mark.asyncio
async def test_flush_queue_dispatches_to_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    handled: list[TaskTransitionEvent] = []

    async def _handler(task: QueuedTask) -> None:
        handled.append(notification_queue.decode_transition_task(task))

    monkeypatch.setitem(
        queue_worker._TASK_HANDLERS,
        notification_queue.TASK_TYPE,
        queue_worker._TaskHandler(handler=_handler, requeue=lambda q, t, d: True),
    )
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_throttle_seconds", 0.0)
    queue = _FakeQueue([notification_queue.encode_transition_task(_event())])

    processed = await queue_worker.flush_queue(queue=queue)  # type: ignore[arg-type]

    assert processed == 1
    assert handled == [_event()]


@pytest.mark.asyncio
async def test_failed_task_is_requeued_with_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _failing(task: QueuedTask) -> None:
        raise RuntimeError("db unavailable")

    monkeypatch.setitem(
        queue_worker._TASK_HANDLERS,
        notification_queue.TASK_TYPE,
        queue_worker._TaskHandler(
            handler=_failing,
            requeue=lambda q, t, d: notification_queue.requeue_transition_task(
                t, delay_seconds=d, queue=q
            ),
        ),
    )
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_throttle_seconds", 0.0)
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_max_retries", 3)
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_retry_base_seconds", 2.0)
    monkeypatch.setattr(queue_worker, "_compute_jitter", lambda base: 0.0)
    queue = _FakeQueue([notification_queue.encode_transition_task(_event(), attempts=1)])

    processed = await queue_worker.flush_queue(queue=queue)  # type: ignore[arg-type]

    assert processed == 0
    assert len(queue.enqueued) == 1
    requeued, delay = queue.enqueued[0]
    assert requeued.attempts == 2
    assert delay == 4.0


@pytest.mark.asyncio
async def test_task_past_retry_cap_is_dropped(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _failing(task: QueuedTask) -> None:
        raise RuntimeError("db unavailable")

    monkeypatch.setitem(
        queue_worker._TASK_HANDLERS,
        notification_queue.TASK_TYPE,
        queue_worker._TaskHandler(
            handler=_failing,
            requeue=lambda q, t, d: notification_queue.requeue_transition_task(
                t, delay_seconds=d, queue=q
            ),
        ),
    )
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_throttle_seconds", 0.0)
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_max_retries", 3)
    queue = _FakeQueue([notification_queue.encode_transition_task(_event(), attempts=3)])

    assert await queue_worker.flush_queue(queue=queue) == 0  # type: ignore[arg-type]
    assert queue.enqueued == []


@pytest.mark.asyncio
async def test_unknown_task_type_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(queue_worker.settings, "rq_dispatch_throttle_seconds", 0.0)
    queue = _FakeQueue([QueuedTask(task_type="mystery", payload={}, created_at=datetime.now(UTC))])

    assert await queue_worker.flush_queue(queue=queue) == 0  # type: ignore[arg-type]
    assert queue.tasks == []


class _UnreachableQueue(_FakeQueue):
    def __init__(self) -> None:
        super().__init__([])
        self.dequeue_calls = 0

    def dequeue(self, *, block: bool = False, block_timeout: float = 0) -> QueuedTask | None:
        del block, block_timeout
        self.dequeue_calls += 1
        raise redis.ConnectionError("connection refused")


@pytest.mark.asyncio
async def test_flush_queue_surfaces_dequeue_failure() -> None:
    queue = _UnreachableQueue()

    with pytest.raises(redis.ConnectionError):
        await queue_worker.flush_queue(queue=queue)  # type: ignore[arg-type]

    assert queue.dequeue_calls == 1


class _StopLoop(Exception):
    pass


@pytest.mark.asyncio
async def test_worker_loop_backs_off_when_redis_is_down(monkeypatch: pytest.MonkeyPatch) -> None:
    flush_calls = 0
    sleeps: list[float] = []

    async def _flush(**_: object) -> int:
        nonlocal flush_calls
        flush_calls += 1
        raise redis.ConnectionError("connection refused")

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)
        raise _StopLoop

    monkeypatch.setattr(queue_worker, "flush_queue", _flush)
    monkeypatch.setattr(queue_worker.asyncio, "sleep", _sleep)

    with pytest.raises(_StopLoop):
        await queue_worker._run_worker_loop()

    assert flush_calls == 1
    assert sleeps == [1]
