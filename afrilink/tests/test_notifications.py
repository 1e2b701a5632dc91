"""
Tests for notifications: inbox service, backends, lifecycle receivers and
the change feed.
"""
from __future__ import annotations

from unittest.mock import MagicMock

from django.contrib.auth import get_user_model
from django.db import transaction
from django.test import TestCase, override_settings

from afrilink.actors import Actor, Role
from afrilink.contrib.notifications import service
from afrilink.contrib.notifications.backends import ConsoleBackend, InboxBackend
from afrilink.contrib.notifications.feed import (
    DELETE,
    INSERT,
    UPDATE,
    ChangeEvent,
    NotificationFeed,
    NotificationInbox,
    feed,
)
from afrilink.contrib.notifications.protocols import NotificationBackend, NotificationResult
from afrilink.exceptions import InvalidTransition, NotFound
from afrilink.models import Notification, Product, Profile
from afrilink.services import CatalogService, LifecycleService, NotificationService

User = get_user_model()


class NotificationServiceTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="amina", password="testpass")
        self.other = User.objects.create_user(username="john", password="testpass")

    def make(self, user=None, **kwargs) -> Notification:
        kwargs.setdefault("title", "Hello")
        return Notification.objects.create(user=user or self.user, **kwargs)

    def test_list_is_newest_first_and_limited(self) -> None:
        created = [self.make(title=f"n{i}") for i in range(5)]
        self.make(user=self.other)

        listed = NotificationService.list_for_user(self.user.pk, limit=3)

        self.assertEqual(listed, list(reversed(created))[:3])

    @override_settings(AFRILINK={"NOTIFICATIONS_PAGE_SIZE": 2})
    def test_default_limit_from_settings(self) -> None:
        for i in range(4):
            self.make(title=f"n{i}")
        self.assertEqual(len(NotificationService.list_for_user(self.user.pk)), 2)

    def test_zero_limit_returns_nothing(self) -> None:
        self.make()
        self.assertEqual(NotificationService.list_for_user(self.user.pk, limit=0), [])
        self.assertEqual(NotificationService.since(self.user.pk, 0, limit=0), [])

    def test_unread_count(self) -> None:
        self.make()
        self.make(read=True)
        self.make(user=self.other)
        self.assertEqual(NotificationService.unread_count(self.user.pk), 1)

    def test_mark_as_read(self) -> None:
        notification = self.make()
        result = NotificationService.mark_as_read(self.user.pk, notification.pk)
        self.assertTrue(result.read)
        self.assertEqual(NotificationService.unread_count(self.user.pk), 0)

    def test_foreign_notification_is_not_found(self) -> None:
        notification = self.make(user=self.other)

        with self.assertRaises(NotFound) as ctx:
            NotificationService.mark_as_read(self.user.pk, notification.pk)
        self.assertEqual(ctx.exception.code, "notification_not_found")

        with self.assertRaises(NotFound):
            NotificationService.delete(self.user.pk, notification.pk)
        self.assertTrue(Notification.objects.filter(pk=notification.pk).exists())

    def test_non_numeric_id_is_not_found(self) -> None:
        for notification_id in ("abc", None):
            with self.subTest(notification_id=notification_id):
                with self.assertRaises(NotFound) as ctx:
                    NotificationService.mark_as_read(self.user.pk, notification_id)
                self.assertEqual(ctx.exception.code, "notification_not_found")

    def test_mark_all_as_read(self) -> None:
        self.make()
        self.make()
        self.make(read=True)
        other = self.make(user=self.other)

        self.assertEqual(NotificationService.mark_all_as_read(self.user.pk), 2)
        self.assertEqual(NotificationService.unread_count(self.user.pk), 0)
        other.refresh_from_db()
        self.assertFalse(other.read)

    def test_delete_and_clear_all(self) -> None:
        first = self.make()
        self.make()
        self.make()
        self.make(user=self.other)

        NotificationService.delete(self.user.pk, first.pk)
        self.assertEqual(NotificationService.clear_all(self.user.pk), 2)

        self.assertFalse(Notification.objects.filter(user=self.user).exists())
        self.assertTrue(Notification.objects.filter(user=self.other).exists())

    def test_since_is_oldest_first(self) -> None:
        first = self.make(title="first")
        second = self.make(title="second")
        third = self.make(title="third")

        self.assertEqual(NotificationService.since(self.user.pk, first.pk), [second, third])
        self.assertEqual(NotificationService.since(self.user.pk, third.pk), [])


class BackendRegistryTests(TestCase):
    def setUp(self) -> None:
        self._saved = dict(service._backends)
        service._backends.clear()

    def tearDown(self) -> None:
        service._backends.clear()
        service._backends.update(self._saved)

    def test_register_and_get(self) -> None:
        backend = ConsoleBackend()
        service.register_backend("console", backend)
        self.assertIs(service.get_backend("console"), backend)

    def test_default_backend_from_settings(self) -> None:
        backend = ConsoleBackend()
        service.register_backend("console", backend)
        with override_settings(AFRILINK_NOTIFICATIONS={"default_backend": "console"}):
            self.assertIs(service.get_backend(), backend)

    def test_missing_backend_returns_failed_result(self) -> None:
        result = service.notify(event="product.approved", recipient="1", context={}, backend="pigeon")
        self.assertFalse(result.success)
        self.assertIn("pigeon", result.error)

    def test_backend_exception_is_contained(self) -> None:
        backend = MagicMock()
        backend.send.side_effect = RuntimeError("smtp down")
        service.register_backend("broken", backend)

        result = service.notify(event="product.approved", recipient="1", context={}, backend="broken")

        self.assertFalse(result.success)
        self.assertEqual(result.error, "smtp down")

    def test_backends_satisfy_protocol(self) -> None:
        self.assertIsInstance(InboxBackend(), NotificationBackend)
        self.assertIsInstance(ConsoleBackend(), NotificationBackend)

    def test_console_backend(self) -> None:
        result = ConsoleBackend().send(event="product.approved", recipient="1", context={"title": "Hi"})
        self.assertTrue(result.success)
        self.assertTrue(result.message_id.startswith("console_"))


class InboxBackendTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="amina", password="testpass")
        self.backend = InboxBackend()

    def test_creates_notification(self) -> None:
        result = self.backend.send(
            event="product.approved",
            recipient=str(self.user.pk),
            context={"title": "Product approved", "message": "Live now", "type": "success", "link": "/products/1"},
        )

        self.assertTrue(result.success)
        notification = Notification.objects.get(user=self.user)
        self.assertEqual(result.message_id, f"inbox_{notification.pk}")
        self.assertEqual(notification.type, "success")
        self.assertEqual(notification.link, "/products/1")
        self.assertFalse(notification.read)

    def test_missing_title_fails(self) -> None:
        result = self.backend.send(event="x", recipient=str(self.user.pk), context={})
        self.assertFalse(result.success)
        self.assertFalse(Notification.objects.exists())

    def test_invalid_recipient_fails(self) -> None:
        result = self.backend.send(event="x", recipient="amina", context={"title": "Hi"})
        self.assertFalse(result.success)

    def test_unknown_type_falls_back_to_info(self) -> None:
        self.backend.send(event="x", recipient=str(self.user.pk), context={"title": "Hi", "type": "urgent"})
        self.assertEqual(Notification.objects.get().type, "info")


class LifecycleNotificationTests(TestCase):
    """Moderation outcomes land in the right inboxes."""

    def setUp(self) -> None:
        self.admin_user = User.objects.create_user(username="admin", password="testpass")
        Profile.objects.create(user=self.admin_user, role=Role.ADMIN)
        self.second_admin_user = User.objects.create_user(username="admin2", password="testpass")
        Profile.objects.create(user=self.second_admin_user, role=Role.ADMIN)
        self.vendor_user = User.objects.create_user(username="vendor", password="testpass")
        Profile.objects.create(user=self.vendor_user, role=Role.VENDOR)

        self.admin = Actor(user_id=self.admin_user.pk, role=Role.ADMIN, username="admin")
        self.vendor = Actor(user_id=self.vendor_user.pk, role=Role.VENDOR, username="vendor")
        self.product = CatalogService.create_product(
            self.vendor, title="Ankara Tote", category="Fashion", price_q=150000
        )

    def vendor_titles(self) -> list[str]:
        return list(
            Notification.objects.filter(user=self.vendor_user).order_by("id").values_list("title", flat=True)
        )

    def test_approval_notifies_vendor(self) -> None:
        LifecycleService.apply_transition(self.product.pk, Product.Action.APPROVE, self.admin)

        notification = Notification.objects.get(user=self.vendor_user)
        self.assertEqual(notification.title, "Product approved")
        self.assertEqual(notification.type, "success")
        self.assertIn("Ankara Tote", notification.message)
        self.assertEqual(notification.link, f"/products/{self.product.pk}")

    def test_rejection_notifies_vendor(self) -> None:
        LifecycleService.apply_transition(self.product.pk, Product.Action.REJECT, self.admin)
        self.assertEqual(self.vendor_titles(), ["Product rejected"])

    def test_takedown_request_notifies_every_admin(self) -> None:
        LifecycleService.apply_transition(self.product.pk, Product.Action.APPROVE, self.admin)
        LifecycleService.apply_transition(self.product.pk, Product.Action.REQUEST_TAKEDOWN, self.vendor)

        for user in (self.admin_user, self.second_admin_user):
            notification = Notification.objects.get(user=user)
            self.assertEqual(notification.title, "Takedown requested")
            self.assertEqual(notification.type, "warning")
        self.assertEqual(self.vendor_titles(), ["Product approved"])

    def test_takedown_request_notifies_staff_without_profile(self) -> None:
        staff = User.objects.create_user(username="ops", password="testpass", is_staff=True)
        root = User.objects.create_superuser(username="root", password="testpass", email="root@example.com")
        User.objects.create_user(username="inactive-ops", password="testpass", is_staff=True, is_active=False)
        LifecycleService.apply_transition(self.product.pk, Product.Action.APPROVE, self.admin)

        LifecycleService.apply_transition(self.product.pk, Product.Action.REQUEST_TAKEDOWN, self.vendor)

        notified = set(
            Notification.objects.filter(title="Takedown requested").values_list("user__username", flat=True)
        )
        self.assertEqual(notified, {"admin", "admin2", staff.username, root.username})

    def test_takedown_decisions_notify_vendor(self) -> None:
        for action in ("approve", "request_takedown", "reject_takedown", "request_takedown", "approve_takedown"):
            actor = self.vendor if action == "request_takedown" else self.admin
            LifecycleService.apply_transition(self.product.pk, action, actor)

        self.assertEqual(
            self.vendor_titles(),
            ["Product approved", "Takedown request rejected", "Takedown approved"],
        )

    def test_failed_transition_sends_nothing(self) -> None:
        with self.assertRaises(InvalidTransition):
            LifecycleService.apply_transition(self.product.pk, Product.Action.APPROVE_TAKEDOWN, self.admin)
        self.assertFalse(Notification.objects.exists())

    def test_failed_delivery_keeps_transition(self) -> None:
        saved = dict(service._backends)
        service._backends.clear()
        try:
            product = LifecycleService.apply_transition(self.product.pk, Product.Action.APPROVE, self.admin)
        finally:
            service._backends.update(saved)

        self.assertEqual(product.status, Product.Status.APPROVED)
        self.assertFalse(Notification.objects.exists())


class NotificationFeedTests(TestCase):
    def setUp(self) -> None:
        self.feed = NotificationFeed()

    def test_publish_reaches_only_the_users_subscribers(self) -> None:
        mine, theirs = [], []
        self.feed.subscribe(1, mine.append)
        self.feed.subscribe(2, theirs.append)

        delivered = self.feed.publish(ChangeEvent(event_type=INSERT, user_id=1, new={"id": 10}))

        self.assertEqual(delivered, 1)
        self.assertEqual(len(mine), 1)
        self.assertEqual(theirs, [])

    def test_unsubscribe_stops_delivery(self) -> None:
        received = []
        subscription = self.feed.subscribe(1, received.append)

        subscription.unsubscribe()
        self.feed.publish(ChangeEvent(event_type=INSERT, user_id=1, new={"id": 10}))

        self.assertEqual(received, [])
        self.assertFalse(subscription.active)
        self.assertEqual(self.feed.subscriber_count(1), 0)

    def test_unsubscribe_twice_is_harmless(self) -> None:
        subscription = self.feed.subscribe(1, lambda event: None)
        subscription.unsubscribe()
        subscription.unsubscribe()
        self.assertEqual(self.feed.subscriber_count(), 0)

    def test_failing_callback_does_not_stop_others(self) -> None:
        received = []

        def broken(event):
            raise RuntimeError("boom")

        self.feed.subscribe(1, broken)
        self.feed.subscribe(1, received.append)

        delivered = self.feed.publish(ChangeEvent(event_type=INSERT, user_id=1, new={"id": 10}))

        self.assertEqual(delivered, 1)
        self.assertEqual(len(received), 1)

    def test_clear(self) -> None:
        subscription = self.feed.subscribe(1, lambda event: None)
        self.feed.subscribe(2, lambda event: None)

        self.feed.clear()

        self.assertEqual(self.feed.subscriber_count(), 0)
        self.assertFalse(subscription.active)


class FeedIntegrationTests(TestCase):
    """Notification rows published to the shared feed once the write commits."""

    def setUp(self) -> None:
        self.user = User.objects.create_user(username="amina", password="testpass")
        self.events: list[ChangeEvent] = []
        self.subscription = feed.subscribe(self.user.pk, self.events.append)

    def tearDown(self) -> None:
        self.subscription.unsubscribe()

    def test_insert_update_delete_are_published(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            notification = Notification.objects.create(user=self.user, title="Hello")
        with self.captureOnCommitCallbacks(execute=True):
            NotificationService.mark_as_read(self.user.pk, notification.pk)
        with self.captureOnCommitCallbacks(execute=True):
            NotificationService.delete(self.user.pk, notification.pk)

        self.assertEqual([e.event_type for e in self.events], [INSERT, UPDATE, DELETE])
        self.assertEqual(self.events[0].new["title"], "Hello")
        self.assertTrue(self.events[1].new["read"])
        self.assertEqual(self.events[2].old, {"id": notification.pk})

    def test_nothing_is_published_before_commit(self) -> None:
        with self.captureOnCommitCallbacks() as callbacks:
            Notification.objects.create(user=self.user, title="Hello")
            self.assertEqual(self.events, [])

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(self.events, [])

    def test_rolled_back_insert_is_not_published(self) -> None:
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            try:
                with transaction.atomic():
                    Notification.objects.create(user=self.user, title="Ghost")
                    raise RuntimeError("abort")
            except RuntimeError:
                pass

        self.assertEqual(callbacks, [])
        self.assertEqual(self.events, [])
        self.assertFalse(Notification.objects.filter(title="Ghost").exists())

    def test_inbox_stays_in_sync(self) -> None:
        existing = Notification.objects.create(user=self.user, title="Old", read=True)
        inbox = NotificationInbox(self.user.pk)
        inbox.load([n.as_payload() for n in NotificationService.list_for_user(self.user.pk)])
        subscription = feed.subscribe(self.user.pk, inbox.apply)
        try:
            with self.captureOnCommitCallbacks(execute=True):
                fresh = Notification.objects.create(user=self.user, title="New")
            self.assertEqual([n["id"] for n in inbox.notifications], [fresh.pk, existing.pk])
            self.assertEqual(inbox.unread_count, 1)

            with self.captureOnCommitCallbacks(execute=True):
                NotificationService.mark_all_as_read(self.user.pk)
            self.assertEqual(inbox.unread_count, 0)

            with self.captureOnCommitCallbacks(execute=True):
                NotificationService.delete(self.user.pk, existing.pk)
            self.assertEqual([n["id"] for n in inbox.notifications], [fresh.pk])
        finally:
            subscription.unsubscribe()


class NotificationInboxTests(TestCase):
    def setUp(self) -> None:
        self.inbox = NotificationInbox(user_id=1)
        self.inbox.load([
            {"id": 2, "title": "b", "read": False},
            {"id": 1, "title": "a", "read": True},
        ])

    def test_load_counts_unread(self) -> None:
        self.assertEqual(self.inbox.unread_count, 1)

    def test_insert_prepends_once(self) -> None:
        event = ChangeEvent(event_type=INSERT, user_id=1, new={"id": 3, "title": "c", "read": False})
        self.inbox.apply(event)
        self.inbox.apply(event)

        self.assertEqual([n["id"] for n in self.inbox.notifications], [3, 2, 1])
        self.assertEqual(self.inbox.unread_count, 2)

    def test_update_replaces_in_place(self) -> None:
        self.inbox.apply(ChangeEvent(event_type=UPDATE, user_id=1, new={"id": 2, "title": "b", "read": True}))
        self.assertEqual([n["id"] for n in self.inbox.notifications], [2, 1])
        self.assertEqual(self.inbox.unread_count, 0)

    def test_delete_of_unread_recounts(self) -> None:
        self.inbox.apply(ChangeEvent(event_type=DELETE, user_id=1, old={"id": 2}))
        self.assertEqual([n["id"] for n in self.inbox.notifications], [1])
        self.assertEqual(self.inbox.unread_count, 0)

    def test_other_users_events_are_ignored(self) -> None:
        self.inbox.apply(ChangeEvent(event_type=INSERT, user_id=2, new={"id": 9, "read": False}))
        self.assertEqual(len(self.inbox.notifications), 2)

    def test_notification_result_defaults(self) -> None:
        result = NotificationResult(success=True)
        self.assertIsNone(result.message_id)
        self.assertIsNone(result.error)
