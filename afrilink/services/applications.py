"""
ApplicationService — Vendor/affiliate role applications.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from afrilink.actors import Actor
from afrilink.exceptions import InvalidTransition, NotFound, Unauthorized, ValidationError
from afrilink.models import Application, Profile


logger = logging.getLogger(__name__)


class ApplicationService:
    @staticmethod
    def submit(user_id: int, role: str, business_name: str = "", description: str = "") -> Application:
        """
        Opens an application for a role.

        Raises:
            ValidationError: Unknown role, or a pending application already exists
        """
        if role not in Application.Role.values:
            raise ValidationError(
                code="invalid_role",
                message=f"Cannot apply for role: {role!r}",
                context={"role": role, "allowed": list(Application.Role.values)},
            )

        if Application.objects.filter(user_id=user_id, status=Application.Status.PENDING).exists():
            raise ValidationError(
                code="already_pending",
                message="User already has a pending application",
                context={"user_id": user_id},
            )

        application = Application.objects.create(
            user_id=user_id,
            role=role,
            business_name=business_name or "",
            description=description or "",
        )
        logger.info("Application submitted", extra={"application_id": application.pk, "role": role})
        return application

    @staticmethod
    @transaction.atomic
    def decide(application_id: int, approve: bool, actor: Actor) -> Application:
        """
        Approves or rejects a pending application.

        Approval grants the applied role through the user's Profile.

        Raises:
            Unauthorized: Actor is not an admin
            NotFound: Application does not exist
            InvalidTransition: Application already decided
        """
        if not actor.is_admin:
            raise Unauthorized(
                code="role_mismatch",
                message="Only admins can decide applications",
                context={"actor_role": actor.role},
            )

        try:
            application = Application.objects.select_for_update().get(pk=application_id)
        except (Application.DoesNotExist, ValueError, TypeError):
            raise NotFound(
                code="application_not_found",
                message=f"Application not found: {application_id}",
                context={"application_id": application_id},
            )

        if application.status != Application.Status.PENDING:
            raise InvalidTransition(
                code="invalid_transition",
                message=f"Application already {application.status}",
                context={"current_status": application.status},
            )

        application.status = Application.Status.APPROVED if approve else Application.Status.REJECTED
        application.decided_at = timezone.now()
        application.save(update_fields=["status", "decided_at"])

        if approve:
            Profile.objects.update_or_create(
                user_id=application.user_id,
                defaults={"role": application.role, "business_name": application.business_name},
            )

        logger.info(
            "Application decided",
            extra={
                "application_id": application.pk,
                "status": application.status,
                "actor": actor.label,
            },
        )
        return application
