"""Schemas for the notification read model."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field
from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class NotificationRead(SQLModel):
    """Notification payload returned by read endpoints."""

    id: int
    recipient_id: int
    type: str
    title: str
    message: str
    data: dict[str, object] | None = None
    is_read: bool
    created_at: datetime


class UnreadCountRead(SQLModel):
    count: int = Field(ge=0, description="Number of unread notifications for the caller.")


class MarkAllReadResponse(SQLModel):
    updated: int = Field(ge=0, description="Notifications that moved from unread to read.")
