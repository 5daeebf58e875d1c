"""Transition event emitted after a task status change is committed."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from app.core.workflow_types import TaskStatus


@dataclass(frozen=True)
class TaskTransitionEvent:
    """Payload handed to notification fan-out for one committed transition."""

    task_id: int
    project_id: int
    task_title: str
    old_status: TaskStatus
    new_status: TaskStatus
    actor_user_id: int | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_payload(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "project_id": self.project_id,
            "task_title": self.task_title,
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "actor_user_id": self.actor_user_id,
            "occurred_at": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TaskTransitionEvent:
        actor = payload.get("actor_user_id")
        return cls(
            task_id=int(payload["task_id"]),
            project_id=int(payload["project_id"]),
            task_title=str(payload["task_title"]),
            old_status=TaskStatus(payload["old_status"]),
            new_status=TaskStatus(payload["new_status"]),
            actor_user_id=int(actor) if actor is not None else None,
            occurred_at=datetime.fromisoformat(payload["occurred_at"]),
        )


TransitionEventSink = Callable[[TaskTransitionEvent], Awaitable[None]]
