"""Activity trail recording and querying for task status changes."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col

from app.core.config import settings
from app.core.errors import AuditWriteFailure
from app.core.logging import get_logger
from app.core.time import utcnow
from app.core.workflow_types import TaskStatus
from app.models.activity_entries import ActivityEntry

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

logger = get_logger(__name__)

STATUS_CHANGED_ACTION = "TASK_STATUS_CHANGED"
RETRYABLE_WRITE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError)


@dataclass(frozen=True)
class ActivityRecord:
    """One status change to append to a project's activity trail."""

    project_id: int
    task_id: int
    task_title: str
    old_value: str
    new_value: str
    field: str = "status"
    action: str = STATUS_CHANGED_ACTION
    actor_user_id: int | None = None


class ActivityRecorder(Protocol):
    async def record(self, entry: ActivityRecord) -> None: ...


def _display(value: str) -> str:
    try:
        return TaskStatus(value).display_name
    except ValueError:
        return value


def describe_status_change(*, task_title: str, old_value: str, new_value: str) -> str:
    """Render the human-readable line shown in activity feeds."""
    return f'Task "{task_title}" moved from {_display(old_value)} to {_display(new_value)}'


async def record_activity(
    session: AsyncSession,
    entry: ActivityRecord,
    *,
    commit: bool = True,
) -> ActivityEntry:
    """Create an append-only activity entry."""
    row = ActivityEntry(
        project_id=entry.project_id,
        task_id=entry.task_id,
        task_title=entry.task_title,
        action=entry.action,
        field=entry.field,
        old_value=entry.old_value,
        new_value=entry.new_value,
        actor_user_id=entry.actor_user_id,
        description=describe_status_change(
            task_title=entry.task_title,
            old_value=entry.old_value,
            new_value=entry.new_value,
        ),
        created_at=utcnow(),
    )
    session.add(row)
    if commit:
        await session.commit()
        await session.refresh(row)
    return row


class SqlActivityRecorder:
    """ActivityRecorder writing to the activity_entries table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, entry: ActivityRecord) -> None:
        try:
            await record_activity(self._session, entry)
        except SQLAlchemyError:
            # Leave the session usable for the next attempt.
            await self._session.rollback()
            raise


def _retry_delay(attempt: int, *, base_seconds: float, max_seconds: float) -> float:
    return float(min(base_seconds * (2 ** max(0, attempt - 1)), max_seconds))


async def record_with_retry(
    recorder: ActivityRecorder,
    entry: ActivityRecord,
    *,
    max_attempts: int | None = None,
    base_delay_seconds: float | None = None,
    max_delay_seconds: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Write an activity entry, retrying transient store failures.

    Returns the number of attempts used. Raises AuditWriteFailure once every
    attempt has failed; a duplicate entry from a retried write whose commit
    actually landed is tolerated.
    """
    attempts = max_attempts if max_attempts is not None else settings.activity_write_max_attempts
    base = (
        base_delay_seconds
        if base_delay_seconds is not None
        else settings.activity_write_retry_base_seconds
    )
    ceiling = (
        max_delay_seconds
        if max_delay_seconds is not None
        else settings.activity_write_retry_max_seconds
    )
    for attempt in range(1, attempts + 1):
        try:
            await recorder.record(entry)
            return attempt
        except RETRYABLE_WRITE_ERRORS as exc:
            logger.warning(
                "activity.record.attempt_failed",
                extra={
                    "task_id": entry.task_id,
                    "attempt": attempt,
                    "max_attempts": attempts,
                    "error": str(exc),
                },
            )
            if attempt < attempts:
                await sleep(_retry_delay(attempt, base_seconds=base, max_seconds=ceiling))
    raise AuditWriteFailure(task_id=entry.task_id, attempts=attempts)


async def list_project_activity(
    session: AsyncSession,
    project_id: int,
    *,
    limit: int | None = None,
) -> list[ActivityEntry]:
    """Return a project's activity entries, most recent first."""
    return await (
        ActivityEntry.objects.filter_by(project_id=project_id)
        .order_by(col(ActivityEntry.created_at).desc(), col(ActivityEntry.id).desc())
        .limit(limit or settings.activity_default_limit)
        .all(session)
    )
