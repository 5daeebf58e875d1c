"""Append-only activity trail model for task field changes."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class ActivityEntry(QueryModel, table=True):
    """Immutable record of one task field change, written once and never edited."""

    __tablename__ = "activity_entries"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    # No FK: the trail outlives deleted tasks.
    task_id: int = Field(index=True)
    task_title: str
    action: str = Field(default="TASK_STATUS_CHANGED", index=True)
    field: str = Field(default="status")
    old_value: str | None = None
    new_value: str | None = None
    actor_user_id: int | None = Field(default=None, index=True)
    description: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, index=True)
