"""Task completion workflow: aggregation, policy, and transition coordination."""

from app.services.task_workflow.aggregator import all_subtasks_complete
from app.services.task_workflow.coordinator import TaskTransitionCoordinator
from app.services.task_workflow.events import TaskTransitionEvent, TransitionEventSink
from app.services.task_workflow.policy import TRANSITION_TABLE, decide_transition
from app.services.task_workflow.store import (
    SqlTaskWorkflowStore,
    SubtaskState,
    TaskSnapshot,
    TaskWorkflowStore,
)

__all__ = [
    "TRANSITION_TABLE",
    "SqlTaskWorkflowStore",
    "SubtaskState",
    "TaskSnapshot",
    "TaskTransitionCoordinator",
    "TaskTransitionEvent",
    "TaskWorkflowStore",
    "TransitionEventSink",
    "all_subtasks_complete",
    "decide_transition",
]
