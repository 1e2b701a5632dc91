from __future__ import annotations

from rest_framework.permissions import BasePermission

from afrilink.actors import Role, actor_for_user
from afrilink.exceptions import Unauthorized


class IsAdminActor(BasePermission):
    """Marketplace admin (Profile role "admin", or staff without profile)."""

    message = "Admin role required."

    def has_permission(self, request, view) -> bool:
        try:
            return actor_for_user(request.user).role == Role.ADMIN
        except Unauthorized:
            return False
