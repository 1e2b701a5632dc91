"""
Inbox Backend — Stores the notification for the recipient user.
"""

from __future__ import annotations

import logging
from typing import Any

from afrilink.contrib.notifications.protocols import NotificationResult

logger = logging.getLogger(__name__)


class InboxBackend:
    """
    Writes a Notification row. The recipient is the user's primary key.

    Context keys: title (required), message, type, link.
    """

    def send(
        self,
        *,
        event: str,
        recipient: str,
        context: dict[str, Any],
    ) -> NotificationResult:
        from afrilink.models import Notification

        title = context.get("title")
        if not title:
            return NotificationResult(success=False, error="Missing title")

        try:
            user_id = int(recipient)
        except (TypeError, ValueError):
            return NotificationResult(success=False, error=f"Invalid recipient: {recipient!r}")

        notification_type = context.get("type", Notification.Type.INFO)
        if notification_type not in Notification.Type.values:
            notification_type = Notification.Type.INFO

        notification = Notification.objects.create(
            user_id=user_id,
            title=title,
            message=context.get("message", ""),
            type=notification_type,
            link=context.get("link"),
        )

        return NotificationResult(success=True, message_id=f"inbox_{notification.pk}")
