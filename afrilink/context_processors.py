"""
Context processors for the AfriLink admin.
"""

from __future__ import annotations

from django.http import HttpRequest


def moderation_queue(request: HttpRequest) -> dict:
    """
    Adds moderation queue sizes to the admin context.

    Used to show a banner when products are waiting for review.
    """
    if not request.path.startswith("/admin/"):
        return {}

    from afrilink.models import Product

    pending_count = Product.objects.filter(status=Product.Status.PENDING).count()
    takedown_count = Product.objects.filter(status=Product.Status.PENDING_TAKEDOWN).count()

    return {
        "afrilink_pending_review_count": pending_count,
        "afrilink_pending_takedown_count": takedown_count,
        "afrilink_has_moderation_work": (pending_count + takedown_count) > 0,
    }
