from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Application(models.Model):
    """
    Request from a user to join the marketplace as vendor or affiliate.

    Decided once by an admin: pending → approved | rejected.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("pending")
        APPROVED = "approved", _("approved")
        REJECTED = "rejected", _("rejected")

    class Role(models.TextChoices):
        VENDOR = "vendor", _("vendor")
        AFFILIATE = "affiliate", _("affiliate")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("user"),
        on_delete=models.CASCADE,
        related_name="applications",
    )
    role = models.CharField(_("role"), max_length=16, choices=Role.choices)
    status = models.CharField(
        _("status"),
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    business_name = models.CharField(_("business name"), max_length=128, blank=True, default="")
    description = models.TextField(_("description"), blank=True, default="")

    applied_at = models.DateTimeField(_("applied at"), auto_now_add=True)
    decided_at = models.DateTimeField(_("decided at"), null=True, blank=True)

    class Meta:
        app_label = "afrilink"
        verbose_name = _("application")
        verbose_name_plural = _("applications")
        ordering = ("-applied_at", "-id")

    def __str__(self) -> str:
        return f"{self.user} → {self.role} ({self.status})"
