"""Project endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, status

from app.api.deps import PROJECT_DEP, SESSION_DEP, USER_DEP
from app.core.logging import get_logger
from app.core.time import utcnow
from app.models.projects import Project
from app.models.users import User
from app.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/projects", tags=["projects"])
logger = get_logger(__name__)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> ProjectRead:
    """Create a project owned by the caller with its fixed workflow type."""
    now = utcnow()
    project = Project(
        title=payload.title,
        description=payload.description,
        owner_id=user.id,
        workflow_type=payload.workflow_type.value,
        created_at=now,
        updated_at=now,
    )
    session.add(project)
    await session.commit()
    await session.refresh(project)
    logger.info(
        "project.created",
        extra={"project_id": project.id, "workflow_type": project.workflow_type},
    )
    return ProjectRead.model_validate(project, from_attributes=True)


@router.get("/{project_id}", response_model=ProjectRead, dependencies=[USER_DEP])
async def get_project(project: Project = PROJECT_DEP) -> ProjectRead:
    return ProjectRead.model_validate(project, from_attributes=True)


@router.patch("/{project_id}", response_model=ProjectRead, dependencies=[USER_DEP])
async def update_project(
    payload: ProjectUpdate,
    project: Project = PROJECT_DEP,
    session: AsyncSession = SESSION_DEP,
) -> ProjectRead:
    """Update project details. The workflow type is not editable."""
    updates = payload.model_dump(exclude_unset=True)
    if "title" in updates and updates["title"] is None:
        updates.pop("title")
    for key, value in updates.items():
        setattr(project, key, value)
    project.updated_at = utcnow()
    session.add(project)
    await session.commit()
    await session.refresh(project)
    return ProjectRead.model_validate(project, from_attributes=True)
