"""Notification ledger: per-user notification records and their read state.

A notification is either unread or read; marking is idempotent and the
unread count is always derived from the rows themselves, so deleting a
notification can never leave a stale counter behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlmodel import col

from app.core.config import settings
from app.core.logging import get_logger
from app.core.time import utcnow
from app.models.notifications import Notification

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from app.core.workflow_types import NotificationType

logger = get_logger(__name__)


@dataclass(frozen=True)
class NotificationPage:
    items: list[Notification]
    total: int
    page: int
    limit: int


async def create_notification(
    session: AsyncSession,
    *,
    recipient_id: int,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: dict[str, object] | None = None,
    commit: bool = True,
) -> Notification:
    """Create an unread notification for one recipient."""
    notification = Notification(
        recipient_id=recipient_id,
        type=notification_type.value,
        title=title,
        message=message,
        data=data,
        is_read=False,
        created_at=utcnow(),
    )
    session.add(notification)
    if commit:
        await session.commit()
        await session.refresh(notification)
    return notification


async def get_unread_count(session: AsyncSession, user_id: int) -> int:
    return await Notification.objects.filter_by(recipient_id=user_id, is_read=False).count(session)


async def list_notifications(
    session: AsyncSession,
    user_id: int,
    *,
    page: int = 1,
    limit: int | None = None,
) -> NotificationPage:
    """Return one page of a user's notifications, newest first."""
    page = max(1, page)
    size = limit or settings.notifications_default_page_size
    query = Notification.objects.filter_by(recipient_id=user_id)
    items = await (
        query.order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
        .offset((page - 1) * size)
        .limit(size)
        .all(session)
    )
    total = await query.count(session)
    return NotificationPage(items=items, total=total, page=page, limit=size)


async def _get_owned(
    session: AsyncSession,
    notification_id: int,
    user_id: int,
) -> Notification | None:
    return await Notification.objects.filter_by(id=notification_id, recipient_id=user_id).first(
        session
    )


async def mark_as_read(session: AsyncSession, notification_id: int, *, user_id: int) -> bool:
    """Mark one notification read. Already-read notifications are left as is."""
    notification = await _get_owned(session, notification_id, user_id)
    if notification is None:
        return False
    if not notification.is_read:
        notification.is_read = True
        session.add(notification)
        await session.commit()
    return True


async def mark_all_as_read(session: AsyncSession, user_id: int) -> int:
    """Mark every unread notification of a user read in a single commit."""
    unread = await Notification.objects.filter_by(recipient_id=user_id, is_read=False).all(session)
    for notification in unread:
        notification.is_read = True
        session.add(notification)
    if unread:
        await session.commit()
    logger.info("notifications.mark_all_read", extra={"user_id": user_id, "count": len(unread)})
    return len(unread)


async def delete_notification(session: AsyncSession, notification_id: int, *, user_id: int) -> bool:
    """Delete a notification in any read state."""
    notification = await _get_owned(session, notification_id, user_id)
    if notification is None:
        return False
    await session.delete(notification)
    await session.commit()
    return True

