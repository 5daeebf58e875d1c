"""Schemas for task create/update/read API operations."""

from __future__ import annotations

from datetime import datetime
from typing import Self

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from app.core.time import as_naive_utc
from app.core.workflow_types import TaskPriority, TaskStatus

_ERR_DATE_ORDER = "end_date must not be before start_date"
_ERR_NULL_FIELD = "{field} cannot be null"
_NON_NULLABLE = ("title", "status", "priority", "order", "tags")
RUNTIME_ANNOTATION_TYPES = (datetime,)


class TaskCreate(SQLModel):
    """Payload for creating a task inside a project."""

    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatus = TaskStatus.BACKLOG
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: datetime | None = None
    end_date: datetime | None = None
    order: int = 0
    assignee_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    column_id: int | None = None

    @field_validator("start_date", "end_date", mode="after")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return as_naive_utc(value)

    @model_validator(mode="after")
    def validate_dates(self) -> Self:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(_ERR_DATE_ORDER)
        return self


class TaskUpdate(SQLModel):
    """Partial task update; only fields present in the payload are applied."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    order: int | None = None
    assignee_id: int | None = None
    tags: list[str] | None = None
    column_id: int | None = None

    @field_validator("start_date", "end_date", mode="after")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return as_naive_utc(value)

    @model_validator(mode="after")
    def validate_present_fields(self) -> Self:
        for name in _NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(_ERR_NULL_FIELD.format(field=name))
        return self


class TaskRead(SQLModel):
    """Task payload returned from read endpoints."""

    id: int
    project_id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    start_date: datetime | None = None
    end_date: datetime | None = None
    order: int
    assignee_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    column_id: int | None = None
    created_at: datetime
    updated_at: datetime
