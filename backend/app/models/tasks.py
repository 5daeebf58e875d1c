"""Task model representing project work items and their lifecycle status."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field

from app.core.time import utcnow
from app.core.workflow_types import TaskPriority, TaskStatus
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Task(QueryModel, table=True):
    """Project-scoped task entity with status, scheduling, and assignment fields."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)

    title: str
    description: str | None = None
    status: str = Field(default=TaskStatus.BACKLOG.value, index=True)
    priority: str = Field(default=TaskPriority.MEDIUM.value, index=True)
    start_date: datetime | None = None
    end_date: datetime | None = None
    order: int = Field(default=0)

    assignee_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    column_id: int | None = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
