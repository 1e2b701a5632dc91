"""
Realtime updates via polling.

Clients poll every few seconds with ?since=<last_id>:
- /api/products/stream: new products for the moderation queue (admins)
- /api/notifications/stream: the caller's new notifications
"""
from __future__ import annotations

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from afrilink.actors import actor_for_user
from afrilink.conf import get_afrilink_setting
from afrilink.exceptions import Unauthorized
from afrilink.models import Notification, Product
from afrilink.services import NotificationService


def _parse_since(request):
    since_id = request.GET.get("since")
    if not since_id:
        return None
    return int(since_id)


@require_GET
def product_stream_view(request):
    """
    Polling endpoint for new products.

    Parameter: ?since=<product_id> returns products with a greater ID.
    Without it, returns only the latest ID (initialisation).
    """
    try:
        actor = actor_for_user(request.user)
    except Unauthorized:
        return JsonResponse({"error": "Authentication required"}, status=401)
    if not actor.is_admin:
        return JsonResponse({"error": "Admin role required"}, status=403)

    try:
        since_id = _parse_since(request)
    except ValueError:
        return JsonResponse({"error": "Invalid since parameter"}, status=400)

    if since_id is None:
        last_product = Product.objects.order_by("-id").first()
        return JsonResponse({
            "products": [],
            "last_id": last_product.id if last_product else 0,
        })

    new_products = list(
        Product.objects.filter(id__gt=since_id)
        .select_related("vendor")
        .order_by("id")[: get_afrilink_setting("POLLING_BATCH_SIZE")]
    )

    products_data = [
        {
            "id": product.id,
            "title": product.title,
            "vendor": product.vendor.get_username(),
            "category": product.category,
            "status": product.status,
            "price": product.price_display,
            "created_at": product.created_at.isoformat() if product.created_at else None,
        }
        for product in new_products
    ]

    last_id = new_products[-1].id if new_products else since_id

    return JsonResponse({
        "products": products_data,
        "last_id": last_id,
    })


@require_GET
def notification_stream_view(request):
    """
    Polling endpoint for the caller's notifications.

    Parameter: ?since=<notification_id> returns newer notifications (oldest first).
    Without it, returns only the latest ID. Always includes unread_count.
    """
    user = request.user
    if not getattr(user, "is_authenticated", False):
        return JsonResponse({"error": "Authentication required"}, status=401)

    try:
        since_id = _parse_since(request)
    except ValueError:
        return JsonResponse({"error": "Invalid since parameter"}, status=400)

    unread_count = NotificationService.unread_count(user.pk)

    if since_id is None:
        last = Notification.objects.filter(user_id=user.pk).order_by("-id").first()
        return JsonResponse({
            "notifications": [],
            "last_id": last.id if last else 0,
            "unread_count": unread_count,
        })

    new_notifications = NotificationService.since(user.pk, since_id)
    last_id = new_notifications[-1].id if new_notifications else since_id

    return JsonResponse({
        "notifications": [n.as_payload() for n in new_notifications],
        "last_id": last_id,
        "unread_count": unread_count,
    })
