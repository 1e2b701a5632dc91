"""
Django AppConfig for AfriLink.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AfrilinkConfig(AppConfig):
    name = "afrilink"
    label = "afrilink"
    verbose_name = _("AfriLink")
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        """Registers notification backends and connects moderation receivers."""
        from afrilink.contrib.notifications import receivers, service
        from afrilink.contrib.notifications.backends import ConsoleBackend, InboxBackend

        service.register_backend("inbox", InboxBackend())
        service.register_backend("console", ConsoleBackend())
        receivers.connect()
