"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from app.models.activity_entries import ActivityEntry
from app.models.notifications import Notification
from app.models.projects import Project
from app.models.subtasks import Subtask
from app.models.tasks import Task
from app.models.users import User

__all__ = [
    "ActivityEntry",
    "Notification",
    "Project",
    "Subtask",
    "Task",
    "User",
]
