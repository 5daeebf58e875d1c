"""Project model owning tasks and carrying the immutable workflow mode."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field

from app.core.time import utcnow
from app.core.workflow_types import WorkflowType
from app.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Project(QueryModel, table=True):
    """Project grouping tasks under one workflow mode."""

    __tablename__ = "projects"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    title: str
    description: str | None = None
    owner_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    # Set at creation only; the update schema does not accept it.
    workflow_type: str = Field(default=WorkflowType.CUSTOM.value, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
