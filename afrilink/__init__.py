"""
AfriLink — Marketplace core for Django.

Basic usage:
    from afrilink.models import Product, Profile, Notification
    from afrilink.services import LifecycleService, CatalogService
    from afrilink.actors import actor_for_user

Notifications (contrib):
    from afrilink.contrib.notifications import notify, feed
"""

__title__ = "AfriLink"
__version__ = "0.1.0a1"
