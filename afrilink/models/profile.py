from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from afrilink.actors import Role


class Profile(models.Model):
    """
    Marketplace identity of an auth user.

    The role decides which lifecycle actions the user may perform.

    Verification:
        pending ──submit_photo──▶ pending_review ──verify──▶ verified
                                        │
                                        └──reject──▶ rejected ──submit_photo──▶ pending_review

        verified/rejected ──request_reverification──▶ pending

    Changes go through VerificationService.
    """

    class VerificationStatus(models.TextChoices):
        PENDING = "pending", _("not submitted")
        PENDING_REVIEW = "pending_review", _("pending review")
        VERIFIED = "verified", _("verified")
        REJECTED = "rejected", _("rejected")

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        verbose_name=_("user"),
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(_("role"), max_length=16, choices=Role.choices, db_index=True)
    business_name = models.CharField(_("business name"), max_length=128, blank=True, default="")

    phone = models.CharField(_("phone"), max_length=32, blank=True, default="")
    email_verified = models.BooleanField(_("email verified"), default=False)
    phone_verified = models.BooleanField(_("phone verified"), default=False)
    photo_verified = models.BooleanField(_("photo verified"), default=False)
    verification_photo_url = models.URLField(_("verification photo"), max_length=500, null=True, blank=True)
    verification_status = models.CharField(
        _("verification status"),
        max_length=16,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
        db_index=True,
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        app_label = "afrilink"
        verbose_name = _("profile")
        verbose_name_plural = _("profiles")

    def __str__(self) -> str:
        return f"{self.user} ({self.role})"

    @property
    def is_fully_verified(self) -> bool:
        """Email, phone and photo all confirmed."""
        return self.email_verified and self.phone_verified and self.photo_verified
