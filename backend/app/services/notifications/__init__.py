"""Notification ledger, transition fan-out, and queued delivery."""

from app.services.notifications.fanout import (
    InlineNotificationSink,
    notify_task_transition,
    transition_recipients,
)
from app.services.notifications.ledger import (
    NotificationPage,
    create_notification,
    delete_notification,
    get_unread_count,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)

__all__ = [
    "InlineNotificationSink",
    "NotificationPage",
    "create_notification",
    "delete_notification",
    "get_unread_count",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "notify_task_transition",
    "transition_recipients",
]
