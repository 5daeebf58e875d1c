"""Shared enum values for task lifecycle and project workflow configuration."""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    BACKLOG = "BACKLOG"
    IN_PROGRESS = "IN_PROGRESS"
    IN_REVIEW = "IN_REVIEW"
    COMPLETED = "COMPLETED"

    @property
    def display_name(self) -> str:
        return STATUS_DISPLAY_NAMES[self]


STATUS_DISPLAY_NAMES: dict[TaskStatus, str] = {
    TaskStatus.BACKLOG: "Backlog",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.IN_REVIEW: "In Review",
    TaskStatus.COMPLETED: "Completed",
}


class WorkflowType(str, Enum):
    """Per-project workflow mode, fixed when the project is created."""

    AUTOMATED = "AUTOMATED"
    CUSTOM = "CUSTOM"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class NotificationType(str, Enum):
    """Type tags carried by in-app notifications."""

    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
