"""
AfriLink Notifications Service — Backend registry and dispatch.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings

from .protocols import NotificationBackend, NotificationResult

logger = logging.getLogger(__name__)

_backends: dict[str, NotificationBackend] = {}


def register_backend(name: str, backend: NotificationBackend) -> None:
    """
    Registers a notification backend.

    Args:
        name: Backend name (e.g. "inbox", "console")
        backend: Backend instance
    """
    _backends[name] = backend
    logger.debug(f"Notification backend registered: {name}")


def get_backend(name: str | None = None) -> NotificationBackend | None:
    """
    Returns the backend by name, or the default one.

    Args:
        name: Backend name (None = default from settings)

    Returns:
        Backend, or None when not registered
    """
    if name is None:
        config = getattr(settings, "AFRILINK_NOTIFICATIONS", {})
        name = config.get("default_backend", "inbox")

    return _backends.get(name)


def notify(
    *,
    event: str,
    recipient: str,
    context: dict[str, Any],
    backend: str | None = None,
) -> NotificationResult:
    """
    Sends a notification. Never raises: failures come back as a failed result.

    Args:
        event: Event type (e.g. "product.approved")
        recipient: Recipient
        context: Message data
        backend: Backend name (None = default)

    Returns:
        NotificationResult
    """
    backend_instance = get_backend(backend)

    if not backend_instance:
        backend_name = backend or "default"
        logger.warning(f"Notification backend not found: {backend_name}")
        return NotificationResult(
            success=False,
            error=f"Backend not found: {backend_name}",
        )

    try:
        result = backend_instance.send(
            event=event,
            recipient=recipient,
            context=context,
        )
        if result.success:
            logger.info(f"Notification sent: {event} -> {recipient}")
        else:
            logger.warning(f"Notification failed: {event} -> {result.error}")
        return result

    except Exception as e:
        logger.exception(f"Notification error: {event}")
        return NotificationResult(
            success=False,
            error=str(e),
        )
