"""Public schema exports shared across API route modules."""

from app.schemas.activity import ActivityEntryRead
from app.schemas.common import OkResponse
from app.schemas.errors import ErrorResponse
from app.schemas.notifications import MarkAllReadResponse, NotificationRead, UnreadCountRead
from app.schemas.projects import ProjectCreate, ProjectRead, ProjectUpdate
from app.schemas.subtasks import SubtaskCreate, SubtaskRead, SubtaskUpdate
from app.schemas.tasks import TaskCreate, TaskRead, TaskUpdate

__all__ = [
    "ActivityEntryRead",
    "ErrorResponse",
    "MarkAllReadResponse",
    "NotificationRead",
    "OkResponse",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "SubtaskCreate",
    "SubtaskRead",
    "SubtaskUpdate",
    "TaskCreate",
    "TaskRead",
    "TaskUpdate",
    "UnreadCountRead",
]
