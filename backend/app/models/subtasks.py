"""Subtask model; completion of all subtasks drives automated task review."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Subtask(QueryModel, table=True):
    """Checklist item belonging to exactly one task."""

    __tablename__ = "subtasks"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", index=True)
    title: str
    completed: bool = Field(default=False)
    order: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
