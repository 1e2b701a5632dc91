from __future__ import annotations

from django.conf import settings
from django.utils.module_loading import import_string


AFRILINK_DEFAULTS = {
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "ADMIN_PERMISSION_CLASSES": ["afrilink.api.permissions.IsAdminActor"],
    "NOTIFICATIONS_PAGE_SIZE": 20,
    "POLLING_BATCH_SIZE": 10,
    "DEFAULT_COMMISSION": 10,
}


def get_afrilink_setting(key: str):
    """Retrieve an AfriLink setting, falling back to AFRILINK_DEFAULTS."""
    user_settings = getattr(settings, "AFRILINK", {})
    value = user_settings.get(key, AFRILINK_DEFAULTS.get(key))
    if isinstance(value, list) and value and isinstance(value[0], str):
        return [import_string(cls) for cls in value]
    return value
