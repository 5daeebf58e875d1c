"""Subtask completion aggregation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable


class CompletableItem(Protocol):
    completed: bool


def all_subtasks_complete(subtasks: Iterable[CompletableItem]) -> bool:
    """Return True when at least one subtask exists and every one is completed.

    A task without subtasks never reports completion, so tasks that do not use
    subtasks as a checklist are not advanced automatically.
    """
    seen_any = False
    for subtask in subtasks:
        if not subtask.completed:
            return False
        seen_any = True
    return seen_any
