"""
Actors — explicit caller context for service calls.

Services never look up the current user on their own: the caller resolves an
``Actor`` once (usually from ``request.user``) and passes it into every call.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.db import models
from django.utils.translation import gettext_lazy as _

from afrilink.exceptions import Unauthorized, ValidationError


class Role(models.TextChoices):
    VENDOR = "vendor", _("vendor")
    ADMIN = "admin", _("admin")
    AFFILIATE = "affiliate", _("affiliate")


@dataclass(frozen=True)
class Actor:
    """Identity and role of whoever is calling a service."""

    user_id: int
    role: Role
    username: str = ""

    @property
    def label(self) -> str:
        return self.username or f"user:{self.user_id}"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_vendor(self) -> bool:
        return self.role == Role.VENDOR


def coerce_role(value) -> Role:
    """Validates a loose role value against the closed Role enumeration."""
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(
            code="invalid_role",
            message=f"Unknown role: {value!r}",
            context={"role": value, "allowed": list(Role.values)},
        )


def actor_for_user(user) -> Actor:
    """
    Resolves the Actor for an authenticated Django user.

    The role comes from the user's Profile. Staff users without a profile act
    as admins.

    Raises:
        Unauthorized: If the user is anonymous or has no role
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise Unauthorized(code="no_role", message="Authentication required")

    profile = getattr(user, "profile", None)
    if profile is not None:
        return Actor(user_id=user.pk, role=Role(profile.role), username=user.get_username())

    if user.is_staff or user.is_superuser:
        return Actor(user_id=user.pk, role=Role.ADMIN, username=user.get_username())

    raise Unauthorized(
        code="no_role",
        message="User has no marketplace role",
        context={"user_id": user.pk},
    )


def admin_user_ids() -> list[int]:
    """
    Ids of the active users that resolve to the admin role.

    Mirrors actor_for_user: admin profiles, plus staff/superusers without a
    profile.
    """
    from django.contrib.auth import get_user_model
    from django.db.models import Q

    User = get_user_model()
    staff_without_profile = Q(profile__isnull=True) & (Q(is_staff=True) | Q(is_superuser=True))
    return list(
        User.objects.filter(is_active=True)
        .filter(Q(profile__role=Role.ADMIN) | staff_without_profile)
        .order_by("pk")
        .values_list("pk", flat=True)
        .distinct()
    )
