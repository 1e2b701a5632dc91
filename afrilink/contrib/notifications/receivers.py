"""
Signal receivers wiring notifications to the rest of AfriLink.

- product_status_changed → notify the vendor (decisions) or the admins
  (takedown requests)
- verification_decided → notify the profile owner
- Notification post_save/post_delete → publish to the change feed once the
  transaction commits
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save

from afrilink.actors import admin_user_ids
from afrilink.models import Notification, Product, Profile
from afrilink.signals import product_status_changed, verification_decided

from .feed import DELETE, INSERT, UPDATE, ChangeEvent, feed
from .service import notify

logger = logging.getLogger(__name__)


# action → (event, title, message template, type)
VENDOR_MESSAGES = {
    Product.Action.APPROVE: (
        "product.approved",
        "Product approved",
        "Your product \"{title}\" is now live in the marketplace.",
        Notification.Type.SUCCESS,
    ),
    Product.Action.REJECT: (
        "product.rejected",
        "Product rejected",
        "Your product \"{title}\" was not approved.",
        Notification.Type.ERROR,
    ),
    Product.Action.APPROVE_TAKEDOWN: (
        "product.taken_down",
        "Takedown approved",
        "Your product \"{title}\" has been taken down.",
        Notification.Type.WARNING,
    ),
    Product.Action.REJECT_TAKEDOWN: (
        "product.takedown_rejected",
        "Takedown request rejected",
        "Your product \"{title}\" remains active.",
        Notification.Type.INFO,
    ),
}


def product_link(product: Product) -> str:
    return f"/products/{product.pk}"


def on_product_status_changed(sender, product: Product, action: str, old_status, new_status, actor, **kwargs):
    if action == Product.Action.REQUEST_TAKEDOWN:
        for admin_id in admin_user_ids():
            notify(
                event="product.takedown_requested",
                recipient=str(admin_id),
                context={
                    "title": "Takedown requested",
                    "message": f"\"{product.title}\" is waiting for takedown review.",
                    "type": Notification.Type.WARNING,
                    "link": product_link(product),
                },
            )
        return

    entry = VENDOR_MESSAGES.get(Product.Action(action))
    if entry is None:
        return
    event, title, template, notification_type = entry
    notify(
        event=event,
        recipient=str(product.vendor_id),
        context={
            "title": title,
            "message": template.format(title=product.title),
            "type": notification_type,
            "link": product_link(product),
        },
    )


def on_verification_decided(sender, profile: Profile, approved: bool, actor, **kwargs):
    if approved:
        context = {
            "title": "Verification approved",
            "message": "Your identity has been verified.",
            "type": Notification.Type.SUCCESS,
        }
    else:
        context = {
            "title": "Verification rejected",
            "message": "Your verification photo was not accepted. Upload a new one to try again.",
            "type": Notification.Type.ERROR,
        }
    notify(
        event="profile.verification_approved" if approved else "profile.verification_rejected",
        recipient=str(profile.user_id),
        context={**context, "link": "/verification"},
    )


def on_notification_saved(sender, instance: Notification, created: bool, **kwargs):
    event = ChangeEvent(
        event_type=INSERT if created else UPDATE,
        user_id=instance.user_id,
        new=instance.as_payload(),
    )
    transaction.on_commit(lambda: feed.publish(event))


def on_notification_deleted(sender, instance: Notification, **kwargs):
    event = ChangeEvent(
        event_type=DELETE,
        user_id=instance.user_id,
        old={"id": instance.pk},
    )
    transaction.on_commit(lambda: feed.publish(event))


def connect() -> None:
    """Connects the receivers. Safe to call more than once."""
    product_status_changed.connect(
        on_product_status_changed, sender=Product, dispatch_uid="afrilink.notify_status_change"
    )
    verification_decided.connect(
        on_verification_decided, sender=Profile, dispatch_uid="afrilink.notify_verification"
    )
    post_save.connect(on_notification_saved, sender=Notification, dispatch_uid="afrilink.feed_saved")
    post_delete.connect(on_notification_deleted, sender=Notification, dispatch_uid="afrilink.feed_deleted")
