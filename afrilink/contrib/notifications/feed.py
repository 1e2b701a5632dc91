"""
Notification change feed.

Server side, NotificationFeed fans out INSERT/UPDATE/DELETE events of
Notification rows to subscribers of the affected user. Client side,
NotificationInbox keeps a local copy of a user's notifications in sync with
those events.

The feed is in-process only. It knows nothing about products or the
lifecycle engine.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """One change to a notification row."""

    event_type: str
    user_id: int
    new: dict[str, Any] | None = None
    old: dict[str, Any] | None = None


Callback = Callable[[ChangeEvent], None]


@dataclass(eq=False)
class Subscription:
    user_id: int
    callback: Callback
    feed: NotificationFeed = field(repr=False)
    active: bool = True

    def unsubscribe(self) -> None:
        self.feed.unsubscribe(self)


class NotificationFeed:
    """Per-user publish/subscribe of notification changes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: dict[int, list[Subscription]] = {}

    def subscribe(self, user_id: int, callback: Callback) -> Subscription:
        subscription = Subscription(user_id=user_id, callback=callback, feed=self)
        with self._lock:
            self._subscriptions.setdefault(user_id, []).append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.user_id, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscriptions.pop(subscription.user_id, None)
        subscription.active = False

    def subscriber_count(self, user_id: int | None = None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._subscriptions.get(user_id, []))
            return sum(len(subs) for subs in self._subscriptions.values())

    def clear(self) -> None:
        with self._lock:
            subs = [s for group in self._subscriptions.values() for s in group]
            self._subscriptions.clear()
        for subscription in subs:
            subscription.active = False

    def publish(self, event: ChangeEvent) -> int:
        """
        Delivers the event to the user's subscribers.

        A failing callback is logged and does not stop delivery to the others.

        Returns:
            Number of callbacks that received the event
        """
        with self._lock:
            targets = list(self._subscriptions.get(event.user_id, []))

        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(event)
                delivered += 1
            except Exception:
                logger.exception(
                    "Notification feed callback failed",
                    extra={"user_id": event.user_id, "event_type": event.event_type},
                )
        return delivered


feed = NotificationFeed()


class NotificationInbox:
    """
    Local mirror of a user's notifications (newest first) with unread count.

    Usage:
        inbox = NotificationInbox(user.pk)
        inbox.load([n.as_payload() for n in NotificationService.list_for_user(user.pk)])
        subscription = feed.subscribe(user.pk, inbox.apply)
    """

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        self.notifications: list[dict[str, Any]] = []
        self.unread_count = 0

    def load(self, rows: list[dict[str, Any]]) -> None:
        self.notifications = list(rows)
        self._recount()

    def _recount(self) -> None:
        self.unread_count = sum(1 for n in self.notifications if not n.get("read"))

    def apply(self, event: ChangeEvent) -> None:
        if event.user_id != self.user_id:
            return

        if event.event_type == INSERT and event.new:
            if not any(n["id"] == event.new["id"] for n in self.notifications):
                self.notifications.insert(0, dict(event.new))
        elif event.event_type == UPDATE and event.new:
            self.notifications = [
                dict(event.new) if n["id"] == event.new["id"] else n for n in self.notifications
            ]
        elif event.event_type == DELETE and event.old:
            self.notifications = [n for n in self.notifications if n["id"] != event.old["id"]]
        else:
            logger.debug("Ignoring notification change", extra={"event_type": event.event_type})
            return

        self._recount()
