"""Domain exceptions raised by the task workflow and notification services."""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for task workflow and ledger failures."""


class NotFoundError(WorkflowError):
    """A referenced record does not exist."""

    entity = "Record"

    def __init__(self, record_id: int | None) -> None:
        self.record_id = record_id
        super().__init__(f"{self.entity} {record_id} not found")


class TaskNotFoundError(NotFoundError):
    entity = "Task"


class ProjectNotFoundError(NotFoundError):
    entity = "Project"


class ProjectLinkBrokenError(WorkflowError):
    """An existing task points at a project that does not exist.

    Referential integrity should make this impossible, so it is reported as a
    data-integrity fault rather than treated as a benign race.
    """

    def __init__(self, *, task_id: int, project_id: int) -> None:
        self.task_id = task_id
        self.project_id = project_id
        super().__init__(f"Task {task_id} references missing project {project_id}")


class AuditWriteFailure(WorkflowError):
    """An activity entry could not be committed after all retry attempts."""

    def __init__(self, *, task_id: int, attempts: int) -> None:
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(f"Activity write for task {task_id} failed after {attempts} attempts")


class LedgerInconsistency(WorkflowError):
    """The unread-count invariant of the notification ledger does not hold."""
