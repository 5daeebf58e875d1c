"""Notification read-model endpoints scoped to the calling user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi_pagination import Page, Params

from app.api.deps import SESSION_DEP, USER_DEP
from app.models.users import User
from app.schemas.common import OkResponse
from app.schemas.notifications import MarkAllReadResponse, NotificationRead, UnreadCountRead
from app.services.notifications import ledger

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/notifications", tags=["notifications"])
PARAMS_DEP = Depends()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")


@router.get("", response_model=Page[NotificationRead])
async def list_notifications(
    params: Params = PARAMS_DEP,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> Page[NotificationRead]:
    """List the caller's notifications, newest first."""
    page = await ledger.list_notifications(
        session,
        int(user.id or 0),
        page=params.page,
        limit=params.size,
    )
    return Page[NotificationRead].create(
        items=[NotificationRead.model_validate(n, from_attributes=True) for n in page.items],
        params=params,
        total=page.total,
    )


@router.get("/unread-count", response_model=UnreadCountRead)
async def get_unread_count(
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> UnreadCountRead:
    """Return how many of the caller's notifications are unread."""
    return UnreadCountRead(count=await ledger.get_unread_count(session, int(user.id or 0)))


@router.patch("/read-all", response_model=MarkAllReadResponse)
async def mark_all_as_read(
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> MarkAllReadResponse:
    """Mark every unread notification of the caller as read."""
    return MarkAllReadResponse(updated=await ledger.mark_all_as_read(session, int(user.id or 0)))


@router.patch("/{notification_id}/read", response_model=OkResponse)
async def mark_as_read(
    notification_id: int,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> OkResponse:
    """Mark one notification read; repeating the call is a no-op."""
    if not await ledger.mark_as_read(session, notification_id, user_id=int(user.id or 0)):
        raise _not_found()
    return OkResponse()


@router.delete("/{notification_id}", response_model=OkResponse)
async def delete_notification(
    notification_id: int,
    session: AsyncSession = SESSION_DEP,
    user: User = USER_DEP,
) -> OkResponse:
    """Delete one of the caller's notifications."""
    if not await ledger.delete_notification(session, notification_id, user_id=int(user.id or 0)):
        raise _not_found()
    return OkResponse()
