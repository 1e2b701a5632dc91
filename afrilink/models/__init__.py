"""
AfriLink Models.

Re-exports every model:
    from afrilink.models import Product, ProductEvent, Profile, Notification, Application
"""

from .application import Application  # noqa: F401
from .notification import Notification  # noqa: F401
from .product import Product, ProductEvent, Transition, format_price  # noqa: F401
from .profile import Profile  # noqa: F401
