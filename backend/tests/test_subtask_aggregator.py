# ruff: noqa: INP001
"""Subtask completion aggregation tests."""

from __future__ import annotations

import pytest

from app.services.task_workflow import SubtaskState, all_subtasks_complete


def _states(*flags: bool) -> list[SubtaskState]:
    return [SubtaskState(id=index + 1, completed=flag) for index, flag in enumerate(flags)]


def test_no_subtasks_is_not_complete() -> None:
    assert all_subtasks_complete([]) is False


@pytest.mark.parametrize(
    ("flags", "expected"),
    [
        ((True,), True),
        ((False,), False),
        ((True, True, True), True),
        ((True, False, True), False),
        ((False, False), False),
    ],
)
def test_all_subtasks_complete(flags: tuple[bool, ...], expected: bool) -> None:
    assert all_subtasks_complete(_states(*flags)) is expected


def test_accepts_any_iterable_of_completable_items() -> None:
    generator = (state for state in _states(True, True))
    assert all_subtasks_complete(generator) is True
