from __future__ import annotations

from django.http import JsonResponse
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .polling import notification_stream_view, product_stream_view
from .views import ApplicationViewSet, NotificationViewSet, ProductViewSet, StatsView, VerificationViewSet


def health_check(request):
    """
    Healthcheck endpoint for monitoring.

    Returns:
        200 OK with {"status": "healthy", "version": "X.X.X"}
    """
    from afrilink import __version__

    return JsonResponse({
        "status": "healthy",
        "version": __version__,
    })


router = DefaultRouter(trailing_slash=False)
router.register("products", ProductViewSet, basename="products")
router.register("notifications", NotificationViewSet, basename="notifications")
router.register("applications", ApplicationViewSet, basename="applications")
router.register("verification", VerificationViewSet, basename="verification")

urlpatterns = [
    path("health", health_check, name="health-check"),
    path("stats", StatsView.as_view(), name="stats"),
    path("products/stream", product_stream_view, name="products-stream"),
    path("notifications/stream", notification_stream_view, name="notifications-stream"),
    path("", include(router.urls)),
]
