from __future__ import annotations

import logging

from django.contrib import admin, messages
from django.http import HttpResponseRedirect
from django.urls import reverse
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin
from unfold.contrib.filters.admin.choice_filters import ChoicesRadioFilter
from unfold.decorators import action, display

from .actors import actor_for_user
from .exceptions import AfrilinkError
from .models import Application, Notification, Product, ProductEvent, Profile, format_price
from .services import ApplicationService, LifecycleService, VerificationService


logger = logging.getLogger(__name__)


def history_action(modeladmin, request, object_id):
    """Redirects to the object's history page."""
    url = reverse(
        f"admin:{modeladmin.model._meta.app_label}_{modeladmin.model._meta.model_name}_history",
        args=[object_id],
    )
    return HttpResponseRedirect(url)


def run_lifecycle_action(request, queryset, product_action: str) -> tuple[int, list[str]]:
    """
    Applies a lifecycle action to every selected product.

    Returns:
        (number applied, list of "title: error message")
    """
    try:
        actor = actor_for_user(request.user)
    except AfrilinkError as e:
        return 0, [e.message]

    applied = 0
    failures = []
    for product in queryset:
        try:
            LifecycleService.apply_transition(product.pk, product_action, actor)
            applied += 1
        except AfrilinkError as e:
            failures.append(f"{product.title}: {e.message}")
    return applied, failures


def _report(modeladmin, request, applied: int, failures: list[str], verb: str) -> None:
    if applied:
        modeladmin.message_user(request, _("%(n)d product(s) %(verb)s.") % {"n": applied, "verb": verb}, messages.SUCCESS)
    for failure in failures:
        modeladmin.message_user(request, failure, messages.ERROR)


class ProductEventInline(admin.TabularInline):
    model = ProductEvent
    extra = 0
    readonly_fields = ("type", "actor", "payload", "created_at")
    can_delete = False
    ordering = ("-created_at", "-id")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(ModelAdmin):
    list_display = (
        "title",
        "vendor",
        "category",
        "price_display",
        "commission",
        "status_badge",
        "created_at",
    )
    list_filter = (("status", ChoicesRadioFilter), "category")
    search_fields = ("title", "description", "vendor__username")
    ordering = ("-created_at", "-id")
    date_hierarchy = "created_at"
    list_filter_submit = True
    list_fullwidth = True
    compressed_fields = True

    inlines = [ProductEventInline]

    actions = ["approve_action", "reject_action", "approve_takedown_action", "reject_takedown_action"]
    actions_detail = ["history_detail_action"]

    @action(description=_("History"), url_path="history-action", icon="history")
    def history_detail_action(self, request, object_id):
        return history_action(self, request, object_id)

    fieldsets = (
        (
            _("Listing"),
            {
                "fields": ("title", "vendor", "category", "description", "images"),
                "classes": ("tab",),
            },
        ),
        (_("Pricing"), {"fields": ("price_q", "commission", "sales"), "classes": ("tab",)}),
        (_("Moderation"), {"fields": ("status", "created_at"), "classes": ("tab",)}),
    )
    # Status only changes through the moderation actions
    readonly_fields = ("vendor", "status", "sales", "created_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # Badge colours: info=pending, success=approved, danger=rejected, warning=takedown requested
    @display(
        description=_("status"),
        label={
            "pending": "info",
            "approved": "success",
            "rejected": "danger",
            "takedown requested": "warning",
            "taken down": "secondary",
        },
    )
    def status_badge(self, obj: Product) -> str:
        return obj.get_status_display()

    @display(description=_("price"), ordering="price_q")
    def price_display(self, obj: Product) -> str:
        return format_price(obj.price_q)

    @admin.action(description=_("Approve selected products"))
    def approve_action(self, request, queryset):
        applied, failures = run_lifecycle_action(request, queryset, Product.Action.APPROVE)
        _report(self, request, applied, failures, "approved")

    @admin.action(description=_("Reject selected products"))
    def reject_action(self, request, queryset):
        applied, failures = run_lifecycle_action(request, queryset, Product.Action.REJECT)
        _report(self, request, applied, failures, "rejected")

    @admin.action(description=_("Approve takedown of selected products"))
    def approve_takedown_action(self, request, queryset):
        applied, failures = run_lifecycle_action(request, queryset, Product.Action.APPROVE_TAKEDOWN)
        _report(self, request, applied, failures, "taken down")

    @admin.action(description=_("Reject takedown (keep active)"))
    def reject_takedown_action(self, request, queryset):
        applied, failures = run_lifecycle_action(request, queryset, Product.Action.REJECT_TAKEDOWN)
        _report(self, request, applied, failures, "kept active")

    def changelist_view(self, request, extra_context=None):
        # Default tab: the review queue
        if request.method == "GET" and not request.GET:
            return HttpResponseRedirect(f"{request.path}?status__exact=pending")
        return super().changelist_view(request, extra_context=extra_context)


@admin.register(Profile)
class ProfileAdmin(ModelAdmin):
    list_display = ("user", "role", "business_name", "verification_badge", "created_at")
    list_filter = (("role", ChoicesRadioFilter), ("verification_status", ChoicesRadioFilter))
    search_fields = ("user__username", "user__email", "business_name", "phone")
    list_filter_submit = True

    fieldsets = (
        (_("Account"), {"fields": ("user", "role", "business_name", "created_at"), "classes": ("tab",)}),
        (
            _("Verification"),
            {
                "fields": (
                    "verification_status",
                    "verification_photo_url",
                    "phone",
                    "email_verified",
                    "phone_verified",
                    "photo_verified",
                ),
                "classes": ("tab",),
            },
        ),
    )
    # Photo review only changes through the verify/reject actions
    readonly_fields = ("created_at", "verification_status", "verification_photo_url", "photo_verified")

    actions = ["verify_action", "reject_verification_action"]

    @display(
        description=_("verification"),
        label={
            "not submitted": "secondary",
            "pending review": "info",
            "verified": "success",
            "rejected": "danger",
        },
    )
    def verification_badge(self, obj: Profile) -> str:
        return obj.get_verification_status_display()

    def _decide(self, request, queryset, approve: bool) -> None:
        try:
            actor = actor_for_user(request.user)
        except AfrilinkError as e:
            self.message_user(request, e.message, messages.ERROR)
            return

        decided = 0
        for profile in queryset:
            try:
                VerificationService.decide(profile.user_id, approve, actor)
                decided += 1
            except AfrilinkError as e:
                self.message_user(request, f"{profile}: {e.message}", messages.ERROR)
        if decided:
            self.message_user(request, _("%(n)d verification(s) decided.") % {"n": decided}, messages.SUCCESS)

    @admin.action(description=_("Verify selected profiles"))
    def verify_action(self, request, queryset):
        self._decide(request, queryset, approve=True)

    @admin.action(description=_("Reject verification of selected profiles"))
    def reject_verification_action(self, request, queryset):
        self._decide(request, queryset, approve=False)


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):
    list_display = ("title", "user", "type_badge", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("title", "message", "user__username")
    readonly_fields = ("created_at",)

    @display(
        description=_("type"),
        label={"info": "info", "success": "success", "warning": "warning", "error": "danger"},
    )
    def type_badge(self, obj: Notification) -> str:
        return obj.type


@admin.register(Application)
class ApplicationAdmin(ModelAdmin):
    list_display = ("user", "role", "business_name", "status_badge", "applied_at")
    list_filter = (("status", ChoicesRadioFilter), "role")
    search_fields = ("user__username", "business_name")
    readonly_fields = ("user", "role", "status", "applied_at", "decided_at")

    actions = ["approve_action", "reject_action"]

    @display(
        description=_("status"),
        label={"pending": "info", "approved": "success", "rejected": "danger"},
    )
    def status_badge(self, obj: Application) -> str:
        return obj.get_status_display()

    def _decide(self, request, queryset, approve: bool) -> None:
        try:
            actor = actor_for_user(request.user)
        except AfrilinkError as e:
            self.message_user(request, e.message, messages.ERROR)
            return

        decided = 0
        for application in queryset:
            try:
                ApplicationService.decide(application.pk, approve, actor)
                decided += 1
            except AfrilinkError as e:
                self.message_user(request, f"{application}: {e.message}", messages.ERROR)
        if decided:
            self.message_user(request, _("%(n)d application(s) decided.") % {"n": decided}, messages.SUCCESS)

    @admin.action(description=_("Approve selected applications"))
    def approve_action(self, request, queryset):
        self._decide(request, queryset, approve=True)

    @admin.action(description=_("Reject selected applications"))
    def reject_action(self, request, queryset):
        self._decide(request, queryset, approve=False)
