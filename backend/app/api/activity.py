"""Project activity feed endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query

from app.api.deps import PROJECT_DEP, SESSION_DEP, USER_DEP
from app.models.projects import Project
from app.schemas.activity import ActivityEntryRead
from app.services.activity import list_project_activity

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(tags=["activity"], dependencies=[USER_DEP])


@router.get("/projects/{project_id}/activity", response_model=list[ActivityEntryRead])
async def list_activity(
    project: Project = PROJECT_DEP,
    session: AsyncSession = SESSION_DEP,
    limit: int | None = Query(default=None, ge=1, le=100),
) -> list[ActivityEntryRead]:
    """Return the project's activity trail, most recent first."""
    entries = await list_project_activity(session, int(project.id or 0), limit=limit)
    return [ActivityEntryRead.model_validate(e, from_attributes=True) for e in entries]
