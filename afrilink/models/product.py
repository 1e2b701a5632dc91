from __future__ import annotations

from typing import NamedTuple

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from afrilink.actors import Role


# =============================================================================
# MONETARY VALUES
# =============================================================================
#
#   - Always in the smallest currency unit (kobo for NGN)
#   - Suffix "_q" means "quantum" (price_q)
#   - Type: int / BigIntegerField
#   - Example: ₦1,500.00 = 150000
#
# =============================================================================

CURRENCY = "NGN"
CURRENCY_SYMBOL = "₦"


def format_price(price_q: int | None) -> str:
    """Renders a price in kobo as whole naira, e.g. 150000 → "₦1,500"."""
    if not price_q:
        return f"{CURRENCY_SYMBOL}0"
    return f"{CURRENCY_SYMBOL}{price_q / 100:,.0f}"


class Transition(NamedTuple):
    role: str
    source: str
    target: str


class Product(models.Model):
    """
    Product listed by a vendor.

    Statuses:
    - pending: Waiting for admin review (the only initial status)
    - approved: Visible in the marketplace
    - rejected: Refused by an admin
    - pending_takedown: Vendor asked to remove it, waiting for an admin
    - taken_down: Removed from the marketplace

    Flow:
        pending ──approve──▶ approved ──request_takedown──▶ pending_takedown
           │                    ▲                               │
           └──reject──▶ rejected └────────reject_takedown───────┤
                                                                └──approve_takedown──▶ taken_down

    rejected and taken_down have no outgoing transitions.

    Status changes go through LifecycleService.apply_transition(); save()
    refuses any status change that is not a legal transition.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("pending")
        APPROVED = "approved", _("approved")
        REJECTED = "rejected", _("rejected")
        PENDING_TAKEDOWN = "pending_takedown", _("takedown requested")
        TAKEN_DOWN = "taken_down", _("taken down")

    class Action(models.TextChoices):
        APPROVE = "approve", _("approve")
        REJECT = "reject", _("reject")
        REQUEST_TAKEDOWN = "request_takedown", _("request takedown")
        APPROVE_TAKEDOWN = "approve_takedown", _("approve takedown")
        REJECT_TAKEDOWN = "reject_takedown", _("reject takedown")

    class Category(models.TextChoices):
        ELECTRONICS = "Electronics", _("Electronics")
        FASHION = "Fashion", _("Fashion")
        HOME_GARDEN = "Home & Garden", _("Home & Garden")
        BEAUTY = "Beauty", _("Beauty")
        SPORTS = "Sports", _("Sports")
        BOOKS = "Books", _("Books")
        TOYS = "Toys", _("Toys")
        FOOD_BEVERAGES = "Food & Beverages", _("Food & Beverages")
        HEALTH = "Health", _("Health")
        OTHER = "Other", _("Other")

    INITIAL_STATUS = Status.PENDING

    TRANSITIONS = {
        Action.APPROVE: Transition(Role.ADMIN, Status.PENDING, Status.APPROVED),
        Action.REJECT: Transition(Role.ADMIN, Status.PENDING, Status.REJECTED),
        Action.REQUEST_TAKEDOWN: Transition(Role.VENDOR, Status.APPROVED, Status.PENDING_TAKEDOWN),
        Action.APPROVE_TAKEDOWN: Transition(Role.ADMIN, Status.PENDING_TAKEDOWN, Status.TAKEN_DOWN),
        Action.REJECT_TAKEDOWN: Transition(Role.ADMIN, Status.PENDING_TAKEDOWN, Status.APPROVED),
    }

    TERMINAL_STATUSES = [Status.REJECTED, Status.TAKEN_DOWN]

    MIN_COMMISSION = 1
    MAX_COMMISSION = 50

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("vendor"),
        on_delete=models.PROTECT,
        related_name="products",
    )
    title = models.CharField(_("title"), max_length=200)
    description = models.TextField(_("description"), blank=True, default="")
    price_q = models.BigIntegerField(_("price (q)"), default=0)
    commission = models.PositiveSmallIntegerField(
        _("commission (%)"),
        default=10,
        validators=[MinValueValidator(MIN_COMMISSION), MaxValueValidator(MAX_COMMISSION)],
    )
    category = models.CharField(_("category"), max_length=32, choices=Category.choices)
    images = models.JSONField(_("images"), default=list, blank=True)

    status = models.CharField(
        _("status"),
        max_length=32,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    sales = models.PositiveIntegerField(_("sales"), default=0)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        app_label = "afrilink"
        verbose_name = _("product")
        verbose_name_plural = _("products")
        ordering = ("-created_at", "-id")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_q__gte=0),
                name="product_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(commission__gte=1) & models.Q(commission__lte=50),
                name="product_commission_range",
            ),
            models.CheckConstraint(
                condition=models.Q(
                    status__in=["pending", "approved", "rejected", "pending_takedown", "taken_down"]
                ),
                name="product_status_valid",
            ),
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._original_status = self.status

    def __str__(self) -> str:
        return self.title

    @property
    def primary_image(self) -> str:
        """First image of the ordered list, or "" when there is none."""
        return self.images[0] if self.images else ""

    @property
    def price_display(self) -> str:
        return format_price(self.price_q)

    # ------------------------------------------------------------------ status

    @classmethod
    def transition_for(cls, action: str) -> Transition | None:
        try:
            return cls.TRANSITIONS.get(cls.Action(action))
        except ValueError:
            return None

    def get_available_actions(self) -> list[str]:
        """Actions whose "from" status matches the current status (any role)."""
        return [action for action, rule in self.TRANSITIONS.items() if rule.source == self.status]

    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._original_status = self.status

    def save(self, *args, **kwargs):
        from afrilink.exceptions import InvalidTransition

        if self._state.adding and self.status != self.INITIAL_STATUS:
            raise InvalidTransition(
                code="invalid_initial_status",
                message=f"Products are created as '{self.INITIAL_STATUS}', not '{self.status}'",
                context={"requested_status": self.status},
            )

        if not self._state.adding and self.status != self._original_status:
            legal = any(
                rule.source == self._original_status and rule.target == self.status
                for rule in self.TRANSITIONS.values()
            )
            if not legal:
                raise InvalidTransition(
                    code="invalid_transition",
                    message=f"Transition {self._original_status} → {self.status} not allowed",
                    context={
                        "current_status": self._original_status,
                        "requested_status": self.status,
                    },
                )

        super().save(*args, **kwargs)
        self._original_status = self.status

    def emit_event(self, event_type: str, actor: str = "system", payload: dict | None = None) -> ProductEvent:
        """Appends an entry to the product's audit log."""
        return ProductEvent.objects.create(
            product=self,
            type=event_type,
            actor=actor,
            payload=payload or {},
        )


class ProductEvent(models.Model):
    """
    Append-only audit log for products.
    """

    product = models.ForeignKey(Product, verbose_name=_("product"), on_delete=models.CASCADE, related_name="events")

    type = models.CharField(_("type"), max_length=64, db_index=True)
    actor = models.CharField(_("actor"), max_length=128)
    payload = models.JSONField(_("payload"), default=dict)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        app_label = "afrilink"
        verbose_name = _("product event")
        verbose_name_plural = _("product events")
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return f"{self.type} @ {self.created_at}"
