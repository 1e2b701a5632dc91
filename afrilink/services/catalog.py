"""
CatalogService — Product creation, listings and dashboard rollups.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.db.models import BigIntegerField, Count, F, Q, QuerySet, Sum

from afrilink.actors import Actor, Role
from afrilink.conf import get_afrilink_setting
from afrilink.exceptions import NotFound, StoreUnavailable, Unauthorized, ValidationError
from afrilink.models import Application, Product, Profile

from .lifecycle import LifecycleService


logger = logging.getLogger(__name__)


STATUS_FILTERS = ("all", *Product.Status.values)


@dataclass
class VendorStats:
    revenue: int
    sales: int
    active_products: int
    pending: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class AdminStats:
    total_users: int
    total_vendors: int
    total_affiliates: int
    pending_applications: int
    pending_products: int
    pending_takedowns: int

    def as_dict(self) -> dict:
        return asdict(self)


def _newest_first(qs: QuerySet) -> QuerySet:
    return qs.order_by("-created_at", "-id")


class CatalogService:
    """
    Vendor and admin views over products.

    Listings return querysets (lazy); callers iterate them inside the request.
    """

    # ------------------------------------------------------------------ vendor

    @staticmethod
    def create_product(
        actor: Actor,
        *,
        title: str,
        category: str,
        price_q: int,
        description: str = "",
        commission: int | None = None,
        images: list[str] | None = None,
    ) -> Product:
        """
        Creates a product for the calling vendor, always in status pending.

        Raises:
            Unauthorized: Actor is not a vendor
            ValidationError: Invalid field values
            StoreUnavailable: Database failure
        """
        if not actor.is_vendor:
            raise Unauthorized(
                code="role_mismatch",
                message="Only vendors can create products",
                context={"actor_role": actor.role},
            )

        if commission is None:
            commission = get_afrilink_setting("DEFAULT_COMMISSION")
        images = list(images or [])

        title = (title or "").strip()
        if not title:
            raise ValidationError(code="missing_title", message="Title is required")

        if category not in Product.Category.values:
            raise ValidationError(
                code="invalid_category",
                message=f"Unknown category: {category!r}",
                context={"category": category, "allowed": list(Product.Category.values)},
            )

        if isinstance(price_q, bool) or not isinstance(price_q, int) or price_q < 0:
            raise ValidationError(
                code="invalid_price",
                message="Price must be a non-negative integer in minor units",
                context={"price_q": price_q},
            )

        if (
            isinstance(commission, bool)
            or not isinstance(commission, int)
            or not Product.MIN_COMMISSION <= commission <= Product.MAX_COMMISSION
        ):
            raise ValidationError(
                code="invalid_commission",
                message=f"Commission must be between {Product.MIN_COMMISSION} and {Product.MAX_COMMISSION}",
                context={"commission": commission},
            )

        if not all(isinstance(url, str) and url for url in images):
            raise ValidationError(
                code="invalid_images",
                message="Images must be a list of non-empty URLs",
                context={"images": images},
            )

        try:
            product = Product.objects.create(
                vendor_id=actor.user_id,
                title=title,
                description=description or "",
                price_q=price_q,
                commission=commission,
                category=category,
                images=images,
            )
            product.emit_event(event_type="created", actor=actor.label, payload={"status": product.status})
        except DatabaseError as exc:
            logger.exception("Product creation failed", extra={"vendor_id": actor.user_id})
            raise StoreUnavailable(code="store_unavailable", message="Product store unavailable") from exc

        logger.info(
            "Product created",
            extra={"product_id": product.pk, "vendor_id": actor.user_id, "category": category},
        )
        return product

    @staticmethod
    def list_vendor_products(vendor_id: int) -> QuerySet:
        """Every product owned by the vendor, in any status, newest first."""
        return _newest_first(Product.objects.filter(vendor_id=vendor_id))

    @staticmethod
    def request_takedown(product_id: int, actor: Actor) -> Product:
        return LifecycleService.apply_transition(product_id, Product.Action.REQUEST_TAKEDOWN, actor)

    @staticmethod
    def vendor_stats(vendor_id: int) -> VendorStats:
        """
        Rollups over the vendor's products.

        revenue = Σ sales × price_q over every owned product, whatever its status.
        """
        totals = Product.objects.filter(vendor_id=vendor_id).aggregate(
            revenue=Sum(F("sales") * F("price_q"), output_field=BigIntegerField()),
            sales=Sum("sales"),
            active_products=Count("id", filter=Q(status=Product.Status.APPROVED)),
            pending=Count("id", filter=Q(status=Product.Status.PENDING)),
        )
        return VendorStats(
            revenue=totals["revenue"] or 0,
            sales=totals["sales"] or 0,
            active_products=totals["active_products"],
            pending=totals["pending"],
        )

    # ------------------------------------------------------------------ admin

    @staticmethod
    def list_products_by_status(status_filter: str = "all") -> QuerySet:
        """
        Moderation queue: all products, or only those in one status; newest first.

        Raises:
            ValidationError: Unknown filter
        """
        if status_filter not in STATUS_FILTERS:
            raise ValidationError(
                code="invalid_filter",
                message=f"Unknown status filter: {status_filter!r}",
                context={"filter": status_filter, "allowed": list(STATUS_FILTERS)},
            )
        qs = Product.objects.select_related("vendor")
        if status_filter != "all":
            qs = qs.filter(status=status_filter)
        return _newest_first(qs)

    @staticmethod
    def admin_stats() -> AdminStats:
        User = get_user_model()
        roles = dict(Profile.objects.values_list("role").annotate(n=Count("id")))
        products = Product.objects.aggregate(
            pending=Count("id", filter=Q(status=Product.Status.PENDING)),
            pending_takedown=Count("id", filter=Q(status=Product.Status.PENDING_TAKEDOWN)),
        )
        return AdminStats(
            total_users=User.objects.count(),
            total_vendors=roles.get(Role.VENDOR.value, 0),
            total_affiliates=roles.get(Role.AFFILIATE.value, 0),
            pending_applications=Application.objects.filter(status=Application.Status.PENDING).count(),
            pending_products=products["pending"],
            pending_takedowns=products["pending_takedown"],
        )

    # ------------------------------------------------------------------ shared

    @staticmethod
    def list_marketplace_products() -> QuerySet:
        """Approved products, as affiliates see the marketplace."""
        return _newest_first(Product.objects.filter(status=Product.Status.APPROVED))

    @staticmethod
    def visible_products(actor: Actor, status_filter: str = "all") -> QuerySet:
        """Listing for the actor's role: admin by status, vendor own, affiliate marketplace."""
        if actor.is_admin:
            return CatalogService.list_products_by_status(status_filter)
        if actor.is_vendor:
            return CatalogService.list_vendor_products(actor.user_id)
        return CatalogService.list_marketplace_products()

    @staticmethod
    def get_product(product_id: int, actor: Actor) -> Product:
        """
        Point read honouring visibility.

        Raises:
            NotFound: Product does not exist or is not visible to the actor
        """
        try:
            product = CatalogService.visible_products(actor).filter(pk=product_id).first()
        except (ValueError, TypeError):
            product = None
        if product is None:
            raise NotFound(
                code="product_not_found",
                message=f"Product not found: {product_id}",
                context={"product_id": product_id},
            )
        return product
