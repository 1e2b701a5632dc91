"""
AfriLink Services.

    from afrilink.services import LifecycleService, CatalogService, ...
"""

from .applications import ApplicationService  # noqa: F401
from .catalog import AdminStats, CatalogService, VendorStats  # noqa: F401
from .lifecycle import LifecycleService  # noqa: F401
from .notifications import NotificationService  # noqa: F401
from .verification import VerificationService  # noqa: F401
