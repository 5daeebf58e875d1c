"""Schemas for the project activity feed."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class ActivityEntryRead(SQLModel):
    """Activity entry payload returned by read endpoints."""

    id: int
    project_id: int
    task_id: int
    task_title: str
    action: str
    field: str
    old_value: str | None = None
    new_value: str | None = None
    actor_user_id: int | None = None
    description: str
    created_at: datetime
