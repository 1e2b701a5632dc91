"""
VerificationService — Identity verification of marketplace profiles.
"""

from __future__ import annotations

import logging
import re

from django.db import transaction
from django.db.models import QuerySet

from afrilink.actors import Actor
from afrilink.exceptions import InvalidTransition, NotFound, Unauthorized, ValidationError
from afrilink.models import Profile
from afrilink.signals import verification_decided


logger = logging.getLogger(__name__)


PHONE_RE = re.compile(r"^\+?[0-9][0-9 \-]{6,19}$")

Status = Profile.VerificationStatus


class VerificationService:
    """
    Phone and photo verification of a user's Profile.

    Users submit a phone number and a photo; an admin verifies or rejects the
    photo. Status changes are guarded the same way product transitions are:
    a call from the wrong status raises InvalidTransition and changes nothing.
    """

    @staticmethod
    def _get(user_id: int, lock: bool = False) -> Profile:
        qs = Profile.objects.select_for_update() if lock else Profile.objects.all()
        try:
            return qs.get(user_id=user_id)
        except (Profile.DoesNotExist, ValueError, TypeError):
            raise NotFound(
                code="profile_not_found",
                message=f"Profile not found for user: {user_id}",
                context={"user_id": user_id},
            )

    @staticmethod
    def get_status(user_id: int) -> Profile:
        return VerificationService._get(user_id)

    @staticmethod
    @transaction.atomic
    def update_phone(user_id: int, phone: str) -> Profile:
        """
        Stores a new phone number. The number must be confirmed again.

        Raises:
            ValidationError: Malformed phone number
            NotFound: User has no profile
        """
        phone = (phone or "").strip()
        if not PHONE_RE.match(phone):
            raise ValidationError(
                code="invalid_phone",
                message="Phone must be 7 to 20 digits, optionally starting with +",
                context={"phone": phone},
            )

        profile = VerificationService._get(user_id, lock=True)
        profile.phone = phone
        profile.phone_verified = False
        profile.save(update_fields=["phone", "phone_verified"])
        logger.info("Phone updated", extra={"user_id": user_id})
        return profile

    @staticmethod
    @transaction.atomic
    def submit_photo(user_id: int, photo_url: str) -> Profile:
        """
        Sends a verification photo for admin review.

        Allowed while not verified; a rejected profile may submit again.

        Raises:
            ValidationError: Missing or non-http(s) URL
            InvalidTransition: Profile already verified
            NotFound: User has no profile
        """
        photo_url = (photo_url or "").strip()
        if not photo_url.startswith(("http://", "https://")):
            raise ValidationError(
                code="invalid_photo",
                message="Photo must be an http(s) URL",
                context={"photo_url": photo_url},
            )

        profile = VerificationService._get(user_id, lock=True)
        if profile.verification_status == Status.VERIFIED:
            raise InvalidTransition(
                code="already_verified",
                message="Profile is already verified; request re-verification first",
                context={"current_status": profile.verification_status},
            )

        profile.verification_photo_url = photo_url
        profile.photo_verified = False
        profile.verification_status = Status.PENDING_REVIEW
        profile.save(update_fields=["verification_photo_url", "photo_verified", "verification_status"])
        logger.info("Verification photo submitted", extra={"user_id": user_id})
        return profile

    @staticmethod
    @transaction.atomic
    def request_reverification(user_id: int) -> Profile:
        """
        Restarts verification of a verified or rejected profile.

        Raises:
            InvalidTransition: Verification is not settled yet
            NotFound: User has no profile
        """
        profile = VerificationService._get(user_id, lock=True)
        if profile.verification_status not in (Status.VERIFIED, Status.REJECTED):
            raise InvalidTransition(
                code="invalid_transition",
                message=f"Cannot request verification while '{profile.verification_status}'",
                context={"current_status": profile.verification_status},
            )

        profile.verification_status = Status.PENDING
        profile.photo_verified = False
        profile.save(update_fields=["verification_status", "photo_verified"])
        logger.info("Re-verification requested", extra={"user_id": user_id})
        return profile

    @staticmethod
    def decide(user_id: int, approve: bool, actor: Actor) -> Profile:
        """
        Verifies or rejects a profile waiting for review.

        Raises:
            Unauthorized: Actor is not an admin
            NotFound: User has no profile
            InvalidTransition: Profile is not pending review
        """
        if not actor.is_admin:
            raise Unauthorized(
                code="role_mismatch",
                message="Only admins can decide verifications",
                context={"actor_role": actor.role},
            )

        with transaction.atomic():
            profile = VerificationService._get(user_id, lock=True)
            if profile.verification_status != Status.PENDING_REVIEW:
                raise InvalidTransition(
                    code="invalid_transition",
                    message=f"Profile verification is '{profile.verification_status}', not pending review",
                    context={"current_status": profile.verification_status},
                )

            profile.verification_status = Status.VERIFIED if approve else Status.REJECTED
            profile.photo_verified = approve
            profile.save(update_fields=["verification_status", "photo_verified"])

        logger.info(
            "Verification decided",
            extra={"user_id": user_id, "status": profile.verification_status, "actor": actor.label},
        )

        for receiver, response in verification_decided.send_robust(
            sender=Profile, profile=profile, approved=approve, actor=actor
        ):
            if isinstance(response, Exception):
                logger.error(
                    "verification_decided receiver failed",
                    extra={"user_id": user_id, "receiver": repr(receiver), "error": str(response)},
                )
        return profile

    @staticmethod
    def review_queue() -> QuerySet:
        """Profiles waiting for an admin decision, oldest first."""
        return (
            Profile.objects.filter(verification_status=Status.PENDING_REVIEW)
            .select_related("user")
            .order_by("created_at", "id")
        )
