"""
NotificationService — Per-user notification inbox.
"""

from __future__ import annotations

import logging

from django.db.models import QuerySet

from afrilink.conf import get_afrilink_setting
from afrilink.exceptions import NotFound
from afrilink.models import Notification


logger = logging.getLogger(__name__)


class NotificationService:
    """
    Read/mark/delete operations over a user's own notifications.

    Acting on a notification that belongs to someone else is reported as
    NotFound, never as a permission error, so ids do not leak.
    """

    @staticmethod
    def list_for_user(user_id: int, limit: int | None = None) -> list[Notification]:
        """Latest notifications of the user, newest first."""
        if limit is None:
            limit = get_afrilink_setting("NOTIFICATIONS_PAGE_SIZE")
        return list(Notification.objects.filter(user_id=user_id).order_by("-created_at", "-id")[:limit])

    @staticmethod
    def unread_count(user_id: int) -> int:
        return Notification.objects.filter(user_id=user_id, read=False).count()

    @staticmethod
    def _get_owned(user_id: int, notification_id: int) -> Notification:
        try:
            return Notification.objects.get(pk=notification_id, user_id=user_id)
        except (Notification.DoesNotExist, ValueError, TypeError):
            raise NotFound(
                code="notification_not_found",
                message=f"Notification not found: {notification_id}",
                context={"notification_id": notification_id},
            )

    @staticmethod
    def mark_as_read(user_id: int, notification_id: int) -> Notification:
        notification = NotificationService._get_owned(user_id, notification_id)
        if not notification.read:
            notification.read = True
            notification.save(update_fields=["read"])
        return notification

    @staticmethod
    def mark_all_as_read(user_id: int) -> int:
        """
        Marks every unread notification of the user as read.

        Saves row by row so the change feed sees each update.

        Returns:
            Number of notifications changed
        """
        changed = 0
        for notification in Notification.objects.filter(user_id=user_id, read=False):
            notification.read = True
            notification.save(update_fields=["read"])
            changed += 1
        logger.debug("Notifications marked as read", extra={"user_id": user_id, "count": changed})
        return changed

    @staticmethod
    def delete(user_id: int, notification_id: int) -> None:
        NotificationService._get_owned(user_id, notification_id).delete()

    @staticmethod
    def clear_all(user_id: int) -> int:
        """Deletes every notification of the user. Returns how many were removed."""
        removed = 0
        for notification in Notification.objects.filter(user_id=user_id):
            notification.delete()
            removed += 1
        return removed

    @staticmethod
    def since(user_id: int, since_id: int, limit: int | None = None) -> list[Notification]:
        """Notifications with id greater than since_id, oldest first (polling)."""
        if limit is None:
            limit = get_afrilink_setting("POLLING_BATCH_SIZE")
        return list(Notification.objects.filter(user_id=user_id, id__gt=since_id).order_by("id")[:limit])
