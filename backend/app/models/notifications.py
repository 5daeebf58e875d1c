"""Per-user in-app notification model with read state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field

from app.core.time import utcnow
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Notification(QueryModel, table=True):
    """Notification addressed to one recipient; unread until marked read."""

    __tablename__ = "notifications"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    recipient_id: int = Field(foreign_key="users.id", index=True)
    type: str = Field(index=True)
    title: str
    message: str
    data: dict[str, object] | None = Field(default=None, sa_column=Column(JSON))
    is_read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
