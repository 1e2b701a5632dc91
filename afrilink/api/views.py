"""
AfriLink API Views — ViewSets for the REST API.

Products, notifications, role applications, profile verification and
dashboard stats. Every endpoint resolves the caller's Actor once and hands
it to the services.

Throttling:
    Configure in settings.py:

    REST_FRAMEWORK = {
        'DEFAULT_THROTTLE_RATES': {
            'anon': '100/hour',
            'user': '1000/hour',
            'afrilink_moderation': '120/minute',  # lifecycle actions
        }
    }
"""

from __future__ import annotations

import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException, NotFound as DRFNotFound, PermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle
from rest_framework.views import APIView

from afrilink.actors import Actor, actor_for_user
from afrilink.conf import get_afrilink_setting
from afrilink.exceptions import (
    AfrilinkError,
    InvalidTransition,
    NotFound,
    StoreUnavailable,
    Unauthorized,
    ValidationError,
)
from afrilink.models import Application, Notification, Product, Profile
from afrilink.services import (
    ApplicationService,
    CatalogService,
    LifecycleService,
    NotificationService,
    VerificationService,
)

from .serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    NotificationSerializer,
    PhoneSerializer,
    PhotoSerializer,
    ProductCreateSerializer,
    ProductSerializer,
    VerificationSerializer,
)


logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable."
    default_code = "service_unavailable"


def to_api_exception(exc: AfrilinkError) -> APIException:
    """Maps a service error to the DRF exception carrying the same body."""
    body = {"code": exc.code, "message": exc.message, "context": exc.context}
    if isinstance(exc, ValidationError):
        return DRFValidationError(body)
    if isinstance(exc, Unauthorized):
        return PermissionDenied(body)
    if isinstance(exc, NotFound):
        return DRFNotFound(body)
    if isinstance(exc, InvalidTransition):
        return Conflict(body)
    if isinstance(exc, StoreUnavailable):
        return ServiceUnavailable(body)
    return DRFValidationError(body)


def get_actor(request) -> Actor:
    try:
        return actor_for_user(request.user)
    except Unauthorized as e:
        raise to_api_exception(e)


class ModerationRateThrottle(UserRateThrottle):
    """
    Throttle for lifecycle actions.

    Configure via 'afrilink_moderation' in DEFAULT_THROTTLE_RATES.
    """

    scope = "afrilink_moderation"


class ProductViewSet(viewsets.GenericViewSet):
    """
    ViewSet for products.

    Endpoints:
        GET  /api/products?status=X - Listing for the caller's role
        POST /api/products - Vendor creates a product (status pending)
        GET  /api/products/{id} - Product detail
        POST /api/products/{id}/approve - Admin
        POST /api/products/{id}/reject - Admin
        POST /api/products/{id}/request-takedown - Owning vendor
        POST /api/products/{id}/approve-takedown - Admin
        POST /api/products/{id}/reject-takedown - Admin

    Listing by role:
        - admin: all products, optional ?status= filter (all, pending, ...)
        - vendor: own products in every status
        - affiliate: approved products
    """

    serializer_class = ProductSerializer
    throttle_classes = [AnonRateThrottle, UserRateThrottle]

    def get_permissions(self):
        return [cls() for cls in get_afrilink_setting("DEFAULT_PERMISSION_CLASSES")]

    def get_queryset(self):
        return Product.objects.none()

    def _serialize(self, data, actor: Actor, many: bool = False):
        return ProductSerializer(data, many=many, context={"request": self.request, "actor": actor}).data

    def list(self, request, *args, **kwargs):
        actor = get_actor(request)
        status_filter = request.query_params.get("status", "all")
        try:
            qs = CatalogService.visible_products(actor, status_filter)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(self._serialize(qs, actor, many=True))

    def retrieve(self, request, pk=None, *args, **kwargs):
        actor = get_actor(request)
        try:
            product = CatalogService.get_product(int(pk), actor)
        except ValueError:
            raise DRFNotFound({"code": "product_not_found", "message": f"Product not found: {pk}", "context": {}})
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(self._serialize(product, actor))

    def create(self, request, *args, **kwargs):
        actor = get_actor(request)
        s = ProductCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            product = CatalogService.create_product(actor, **s.validated_data)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(self._serialize(product, actor), status=status.HTTP_201_CREATED)

    def _transition(self, request, pk, product_action: str) -> Response:
        actor = get_actor(request)
        try:
            product_id = int(pk)
        except (TypeError, ValueError):
            raise DRFNotFound({"code": "product_not_found", "message": f"Product not found: {pk}", "context": {}})

        try:
            product = LifecycleService.apply_transition(product_id, product_action, actor)
        except AfrilinkError as e:
            logger.warning(
                "Lifecycle action failed",
                extra={
                    "product_id": product_id,
                    "action": product_action,
                    "error_code": e.code,
                    "error_message": e.message,
                },
            )
            raise to_api_exception(e)
        return Response(self._serialize(product, actor), status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="approve", throttle_classes=[ModerationRateThrottle])
    def approve(self, request, pk=None):
        return self._transition(request, pk, Product.Action.APPROVE)

    @action(detail=True, methods=["post"], url_path="reject", throttle_classes=[ModerationRateThrottle])
    def reject(self, request, pk=None):
        return self._transition(request, pk, Product.Action.REJECT)

    @action(detail=True, methods=["post"], url_path="request-takedown", throttle_classes=[ModerationRateThrottle])
    def request_takedown(self, request, pk=None):
        return self._transition(request, pk, Product.Action.REQUEST_TAKEDOWN)

    @action(detail=True, methods=["post"], url_path="approve-takedown", throttle_classes=[ModerationRateThrottle])
    def approve_takedown(self, request, pk=None):
        return self._transition(request, pk, Product.Action.APPROVE_TAKEDOWN)

    @action(detail=True, methods=["post"], url_path="reject-takedown", throttle_classes=[ModerationRateThrottle])
    def reject_takedown(self, request, pk=None):
        return self._transition(request, pk, Product.Action.REJECT_TAKEDOWN)


class NotificationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for the caller's notifications.

    Endpoints:
        GET    /api/notifications - Latest notifications + unread count
        POST   /api/notifications/{id}/read - Mark one as read
        POST   /api/notifications/read-all - Mark all as read
        DELETE /api/notifications/{id} - Delete one
        POST   /api/notifications/clear - Delete all
    """

    serializer_class = NotificationSerializer
    throttle_classes = [AnonRateThrottle, UserRateThrottle]

    def get_permissions(self):
        return [cls() for cls in get_afrilink_setting("DEFAULT_PERMISSION_CLASSES")]

    def get_queryset(self):
        return Notification.objects.filter(user_id=self.request.user.pk)

    def _notification_id(self, pk) -> int:
        try:
            return int(pk)
        except (TypeError, ValueError):
            raise DRFNotFound(
                {"code": "notification_not_found", "message": f"Notification not found: {pk}", "context": {}}
            )

    def list(self, request, *args, **kwargs):
        user_id = request.user.pk
        return Response(
            {
                "notifications": NotificationSerializer(NotificationService.list_for_user(user_id), many=True).data,
                "unread_count": NotificationService.unread_count(user_id),
            }
        )

    def destroy(self, request, pk=None, *args, **kwargs):
        try:
            NotificationService.delete(request.user.pk, self._notification_id(pk))
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="read")
    def read(self, request, pk=None):
        try:
            notification = NotificationService.mark_as_read(request.user.pk, self._notification_id(pk))
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        changed = NotificationService.mark_all_as_read(request.user.pk)
        return Response({"updated": changed, "unread_count": 0})

    @action(detail=False, methods=["post"], url_path="clear")
    def clear(self, request):
        removed = NotificationService.clear_all(request.user.pk)
        return Response({"deleted": removed})


class ApplicationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for role applications.

    Endpoints:
        GET  /api/applications - Admin: all (?status=pending); others: own
        POST /api/applications - Apply for vendor/affiliate
        POST /api/applications/{id}/approve - Admin
        POST /api/applications/{id}/reject - Admin
    """

    serializer_class = ApplicationSerializer
    throttle_classes = [AnonRateThrottle, UserRateThrottle]

    def get_permissions(self):
        classes = list(get_afrilink_setting("DEFAULT_PERMISSION_CLASSES"))
        if self.action in ("approve", "reject"):
            classes += get_afrilink_setting("ADMIN_PERMISSION_CLASSES")
        return [cls() for cls in classes]

    def get_queryset(self):
        qs = Application.objects.select_related("user")
        try:
            actor = actor_for_user(self.request.user)
        except Unauthorized:
            actor = None
        if actor is None or not actor.is_admin:
            qs = qs.filter(user_id=self.request.user.pk)
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    def create(self, request, *args, **kwargs):
        s = ApplicationCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            application = ApplicationService.submit(request.user.pk, **s.validated_data)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)

    def _decide(self, request, pk, approve: bool) -> Response:
        actor = get_actor(request)
        try:
            application = ApplicationService.decide(int(pk), approve, actor)
        except ValueError:
            raise DRFNotFound({"code": "application_not_found", "message": f"Application not found: {pk}", "context": {}})
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(ApplicationSerializer(application).data)

    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        return self._decide(request, pk, approve=True)

    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        return self._decide(request, pk, approve=False)


class VerificationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for profile verification.

    Endpoints:
        GET  /api/verification - Caller's verification status
        POST /api/verification/phone - Set phone number
        POST /api/verification/photo - Submit photo for review
        POST /api/verification/request - Request re-verification
        GET  /api/verification/queue - Admin: profiles pending review
        POST /api/verification/{user_id}/approve - Admin
        POST /api/verification/{user_id}/reject - Admin
    """

    serializer_class = VerificationSerializer
    throttle_classes = [AnonRateThrottle, UserRateThrottle]

    def get_permissions(self):
        classes = list(get_afrilink_setting("DEFAULT_PERMISSION_CLASSES"))
        if self.action in ("queue", "approve", "reject"):
            classes += get_afrilink_setting("ADMIN_PERMISSION_CLASSES")
        return [cls() for cls in classes]

    def get_queryset(self):
        return Profile.objects.none()

    def list(self, request, *args, **kwargs):
        try:
            profile = VerificationService.get_status(request.user.pk)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(VerificationSerializer(profile).data)

    @action(detail=False, methods=["post"], url_path="phone")
    def phone(self, request):
        s = PhoneSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            profile = VerificationService.update_phone(request.user.pk, s.validated_data["phone"])
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(VerificationSerializer(profile).data)

    @action(detail=False, methods=["post"], url_path="photo")
    def photo(self, request):
        s = PhotoSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            profile = VerificationService.submit_photo(request.user.pk, s.validated_data["photo_url"])
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(VerificationSerializer(profile).data)

    @action(detail=False, methods=["post"], url_path="request")
    def request_reverification(self, request):
        try:
            profile = VerificationService.request_reverification(request.user.pk)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(VerificationSerializer(profile).data)

    @action(detail=False, methods=["get"], url_path="queue")
    def queue(self, request):
        return Response(VerificationSerializer(VerificationService.review_queue(), many=True).data)

    def _decide(self, request, pk, approve: bool) -> Response:
        actor = get_actor(request)
        try:
            profile = VerificationService.decide(pk, approve, actor)
        except AfrilinkError as e:
            raise to_api_exception(e)
        return Response(VerificationSerializer(profile).data)

    @action(detail=True, methods=["post"], url_path="approve", throttle_classes=[ModerationRateThrottle])
    def approve(self, request, pk=None):
        return self._decide(request, pk, approve=True)

    @action(detail=True, methods=["post"], url_path="reject", throttle_classes=[ModerationRateThrottle])
    def reject(self, request, pk=None):
        return self._decide(request, pk, approve=False)


class StatsView(APIView):
    """
    GET /api/stats

    Vendor: revenue, sales, active products, pending review.
    Admin: users, vendors, affiliates, pending applications/products/takedowns.
    """

    throttle_classes = [AnonRateThrottle, UserRateThrottle]

    def get_permissions(self):
        return [cls() for cls in get_afrilink_setting("DEFAULT_PERMISSION_CLASSES")]

    def get(self, request):
        actor = get_actor(request)
        if actor.is_admin:
            return Response({"role": actor.role, **CatalogService.admin_stats().as_dict()})
        if actor.is_vendor:
            return Response({"role": actor.role, **CatalogService.vendor_stats(actor.user_id).as_dict()})
        raise PermissionDenied({"code": "role_mismatch", "message": "No stats for this role", "context": {}})
