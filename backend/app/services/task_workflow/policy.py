"""Workflow policy: which status a task moves to after a subtask change.

The decision is an explicit lookup over every (workflow, status, completion)
combination. Automated projects ratchet forward into review once every subtask
is done; custom projects never move automatically.
"""

from __future__ import annotations

from app.core.workflow_types import TaskStatus, WorkflowType

_COMPLETION_STATES = (True, False)

TRANSITION_TABLE: dict[tuple[WorkflowType, TaskStatus, bool], TaskStatus | None] = {
    # Custom workflows: statuses are managed by hand.
    **{
        (WorkflowType.CUSTOM, current, complete): None
        for current in TaskStatus
        for complete in _COMPLETION_STATES
    },
    # Automated workflows with outstanding subtasks stay put.
    **{(WorkflowType.AUTOMATED, current, False): None for current in TaskStatus},
    (WorkflowType.AUTOMATED, TaskStatus.BACKLOG, True): TaskStatus.IN_REVIEW,
    (WorkflowType.AUTOMATED, TaskStatus.IN_PROGRESS, True): TaskStatus.IN_REVIEW,
    (WorkflowType.AUTOMATED, TaskStatus.IN_REVIEW, True): None,
    (WorkflowType.AUTOMATED, TaskStatus.COMPLETED, True): None,
}


def decide_transition(
    workflow_type: WorkflowType | str,
    current_status: TaskStatus | str,
    all_subtasks_complete: bool,
) -> TaskStatus | None:
    """Return the status to move to, or None when no transition applies."""
    key = (WorkflowType(workflow_type), TaskStatus(current_status), bool(all_subtasks_complete))
    return TRANSITION_TABLE[key]
