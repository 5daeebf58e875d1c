# ruff: noqa: INP001
"""Redis-backed task queue helper tests."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
import redis

from app.services import queue as queue_module
from app.services.queue import QueuedTask, RedisTaskQueue


class _FakeRedis:
    def __init__(self) -> None:
        self.values: list[str] = []
        self.scheduled: dict[str, float] = {}

    def lpush(self, key: str, *values: str) -> None:
        del key
        for value in values:
            self.values.insert(0, value)

    def rpop(self, key: str) -> str | None:
        del key
        if not self.values:
            return None
        return self.values.pop()

    def brpop(self, keys: list[str], timeout: float = 0) -> tuple[str, str] | None:
        del timeout
        value = self.rpop(keys[0])
        return (keys[0], value) if value is not None else None

    def zadd(self, key: str, mapping: dict[str, float]) -> None:
        del key
        self.scheduled.update(mapping)

    def zrangebyscore(
        self,
        key: str,
        low: float | str,
        high: float | str,
        *,
        start: int = 0,
        num: int = 0,
        withscores: bool = False,
    ) -> list[object]:
        del key, start
        lo = float("-inf") if low == "-inf" else float(low)
        hi = float("inf") if high == "+inf" else float(high)
        matches = sorted(
            ((member, score) for member, score in self.scheduled.items() if lo <= score <= hi),
            key=lambda item: item[1],
        )[:num]
        if withscores:
            return list(matches)
        return [member for member, _ in matches]

    def zrem(self, key: str, *members: str) -> None:
        del key
        for member in members:
            self.scheduled.pop(member, None)


class _DownRedis(_FakeRedis):
    def lpush(self, key: str, *values: str) -> None:
        raise redis.ConnectionError("connection refused")


def _task(attempts: int = 0) -> QueuedTask:
    return QueuedTask(
        task_type="generic-task",
        payload={"task_id": 7},
        created_at=datetime.now(UTC),
        attempts=attempts,
    )


@pytest.mark.parametrize("attempts", [0, 1, 2])
def test_queue_roundtrip(attempts: int) -> None:
    queue = RedisTaskQueue("generic-queue", client=_FakeRedis())
    payload = _task(attempts)

    assert queue.enqueue(payload)
    item = queue.dequeue()
    assert item is not None
    assert item.task_type == payload.task_type
    assert item.payload == payload.payload
    assert item.attempts == attempts
    assert queue.dequeue() is None


def test_dequeue_is_fifo() -> None:
    queue = RedisTaskQueue("generic-queue", client=_FakeRedis())
    queue.enqueue(QueuedTask("a", {}, datetime.now(UTC)))
    queue.enqueue(QueuedTask("b", {}, datetime.now(UTC)))

    first = queue.dequeue()
    second = queue.dequeue()
    assert first is not None and first.task_type == "a"
    assert second is not None and second.task_type == "b"


def test_delayed_task_waits_until_due(monkeypatch: pytest.MonkeyPatch) -> None:
    now = [1000.0]
    monkeypatch.setattr(queue_module.time, "time", lambda: now[0])
    fake = _FakeRedis()
    queue = RedisTaskQueue("generic-queue", client=fake)

    assert queue.enqueue(_task(), delay_seconds=30)
    assert fake.values == []
    assert queue.dequeue() is None

    now[0] = 1031.0
    item = queue.dequeue()
    assert item is not None
    assert fake.scheduled == {}


@pytest.mark.parametrize("attempts", [0, 1, 2, 3])
def test_requeue_respects_retry_cap(attempts: int) -> None:
    fake = _FakeRedis()
    queue = RedisTaskQueue("generic-queue", client=fake)
    payload = _task(attempts)

    if attempts >= 3:
        assert queue.requeue(payload, max_retries=3) is False
        assert fake.values == []
    else:
        assert queue.requeue(payload, max_retries=3) is True
        requeued = queue.dequeue()
        assert requeued is not None
        assert requeued.attempts == attempts + 1


def test_enqueue_reports_redis_failure() -> None:
    queue = RedisTaskQueue("generic-queue", client=_DownRedis())
    assert queue.enqueue(_task()) is False


def test_dequeue_raises_on_malformed_payload() -> None:
    fake = _FakeRedis()
    fake.values.append(json.dumps({"payload": {}}))
    queue = RedisTaskQueue("generic-queue", client=fake)

    with pytest.raises(KeyError):
        queue.dequeue()


def test_default_client_uses_configured_url(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[str | None] = []
    fake = _FakeRedis()

    def _fake_redis(redis_url: str | None = None) -> _FakeRedis:
        seen.append(redis_url)
        return fake

    monkeypatch.setattr(queue_module, "_redis_client", _fake_redis)
    queue = RedisTaskQueue("generic-queue", redis_url="redis://cache:6379/1")

    assert queue.enqueue(_task())
    assert seen == ["redis://cache:6379/1"]
