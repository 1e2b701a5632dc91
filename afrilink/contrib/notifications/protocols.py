"""
AfriLink Notifications Protocols — Backend interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass
class NotificationResult:
    """Delivery outcome."""

    success: bool
    message_id: str | None = None
    error: str | None = None


@runtime_checkable
class NotificationBackend(Protocol):
    """
    Protocol for notification backends.

    Implement it to deliver through other channels (email, SMS, push).
    """

    def send(
        self,
        *,
        event: str,
        recipient: str,
        context: dict[str, Any],
    ) -> NotificationResult:
        """
        Delivers a notification.

        Args:
            event: Event type (e.g. "product.approved")
            recipient: Recipient (user id for the inbox backend)
            context: Message data: title, message, type, link

        Returns:
            NotificationResult with the outcome
        """
        ...
