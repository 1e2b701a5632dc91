from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """
    In-app notification delivered to a single user.
    """

    class Type(models.TextChoices):
        INFO = "info", _("info")
        SUCCESS = "success", _("success")
        WARNING = "warning", _("warning")
        ERROR = "error", _("error")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("user"),
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title = models.CharField(_("title"), max_length=200)
    message = models.TextField(_("message"), blank=True, default="")
    type = models.CharField(_("type"), max_length=16, choices=Type.choices, default=Type.INFO)
    read = models.BooleanField(_("read"), default=False, db_index=True)
    link = models.CharField(_("link"), max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        app_label = "afrilink"
        verbose_name = _("notification")
        verbose_name_plural = _("notifications")
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return self.title

    def as_payload(self) -> dict:
        """Plain-dict form used by the change feed and polling endpoint."""
        return {
            "id": self.pk,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "read": self.read,
            "link": self.link,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
