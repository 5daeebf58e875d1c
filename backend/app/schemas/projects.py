"""Schemas for project create/update/read API operations."""

from __future__ import annotations

from datetime import datetime

from sqlmodel import Field, SQLModel
from sqlmodel._compat import SQLModelConfig

from app.core.workflow_types import WorkflowType

RUNTIME_ANNOTATION_TYPES = (datetime,)


class ProjectCreate(SQLModel):
    """Payload for creating a project; the workflow type cannot change later."""

    title: str = Field(min_length=1)
    description: str | None = None
    workflow_type: WorkflowType = WorkflowType.CUSTOM


class ProjectUpdate(SQLModel):
    """Payload for partial project updates."""

    # workflow_type is deliberately absent; sending it is a validation error.
    model_config = SQLModelConfig(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None


class ProjectRead(SQLModel):
    """Project payload returned from read endpoints."""

    id: int
    title: str
    description: str | None = None
    owner_id: int | None = None
    workflow_type: WorkflowType
    created_at: datetime
    updated_at: datetime
