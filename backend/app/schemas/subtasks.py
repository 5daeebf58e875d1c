"""Schemas for subtask create/update/read API operations."""

from __future__ import annotations

from datetime import datetime
from typing import Self

from pydantic import model_validator
from sqlmodel import Field, SQLModel

_ERR_TITLE_REQUIRED = "title is required"
_ERR_NULL_FIELD = "{field} cannot be null"
RUNTIME_ANNOTATION_TYPES = (datetime,)


class SubtaskCreate(SQLModel):
    """Payload for creating a subtask."""

    title: str = Field(min_length=1)
    order: int = 0

    @model_validator(mode="after")
    def validate_title(self) -> Self:
        title = self.title.strip()
        if not title:
            raise ValueError(_ERR_TITLE_REQUIRED)
        self.title = title
        return self


class SubtaskUpdate(SQLModel):
    """Partial subtask update.

    Presence is tracked per field: a field omitted from the payload is left
    untouched, and explicit nulls are rejected. `touches_completion` reports
    whether `completed` was sent, which is what triggers task re-evaluation.
    """

    title: str | None = None
    completed: bool | None = None
    order: int | None = None

    @model_validator(mode="after")
    def validate_present_fields(self) -> Self:
        for name in ("title", "completed", "order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(_ERR_NULL_FIELD.format(field=name))
        if "title" in self.model_fields_set and self.title is not None:
            title = self.title.strip()
            if not title:
                raise ValueError(_ERR_TITLE_REQUIRED)
            self.title = title
        return self

    @property
    def touches_completion(self) -> bool:
        return "completed" in self.model_fields_set

    def changes(self) -> dict[str, object]:
        """Only the fields present in the payload."""
        return self.model_dump(include=self.model_fields_set)


class SubtaskRead(SQLModel):
    """Subtask payload returned from read endpoints."""

    id: int
    task_id: int
    title: str
    completed: bool
    order: int
    created_at: datetime
    updated_at: datetime
