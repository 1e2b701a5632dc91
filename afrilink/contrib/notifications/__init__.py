"""
AfriLink Notifications — Pluggable delivery plus a realtime change feed.

Basic usage:
    from afrilink.contrib.notifications import notify

    notify(
        event="product.approved",
        recipient=str(vendor.pk),
        context={"title": "Product approved", "message": "...", "type": "success"},
    )

Available backends:
    - inbox: Stores a Notification row for the recipient user (default)
    - console: Logs to the console (development)

Settings:
    AFRILINK_NOTIFICATIONS = {
        "default_backend": "inbox",
    }

Realtime:
    from afrilink.contrib.notifications import feed

    subscription = feed.subscribe(user.pk, callback)
    ...
    subscription.unsubscribe()
"""

from .feed import ChangeEvent, NotificationFeed, NotificationInbox, Subscription, feed
from .protocols import NotificationBackend, NotificationResult
from .service import get_backend, notify, register_backend

__all__ = [
    "notify",
    "get_backend",
    "register_backend",
    "NotificationBackend",
    "NotificationResult",
    "ChangeEvent",
    "NotificationFeed",
    "NotificationInbox",
    "Subscription",
    "feed",
]
