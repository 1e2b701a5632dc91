"""
Tests for vendor/affiliate role applications.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from afrilink.actors import Actor, Role, actor_for_user
from afrilink.exceptions import InvalidTransition, NotFound, Unauthorized, ValidationError
from afrilink.models import Application, Profile
from afrilink.services import ApplicationService

User = get_user_model()


class ApplicationServiceTests(TestCase):
    def setUp(self) -> None:
        self.applicant = User.objects.create_user(username="chidi", password="testpass")
        admin_user = User.objects.create_user(username="admin", password="testpass")
        Profile.objects.create(user=admin_user, role=Role.ADMIN)
        self.admin = Actor(user_id=admin_user.pk, role=Role.ADMIN, username="admin")

    def test_submit(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor", business_name="Chidi Crafts")
        self.assertEqual(application.status, Application.Status.PENDING)
        self.assertEqual(application.role, "vendor")
        self.assertIsNone(application.decided_at)

    def test_cannot_apply_for_admin(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            ApplicationService.submit(self.applicant.pk, "admin")
        self.assertEqual(ctx.exception.code, "invalid_role")

    def test_one_pending_application_at_a_time(self) -> None:
        ApplicationService.submit(self.applicant.pk, "vendor")
        with self.assertRaises(ValidationError) as ctx:
            ApplicationService.submit(self.applicant.pk, "affiliate")
        self.assertEqual(ctx.exception.code, "already_pending")

    def test_approval_grants_role(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "affiliate", business_name="Chidi Deals")

        application = ApplicationService.decide(application.pk, True, self.admin)

        self.assertEqual(application.status, Application.Status.APPROVED)
        self.assertIsNotNone(application.decided_at)
        profile = Profile.objects.get(user=self.applicant)
        self.assertEqual(profile.role, Role.AFFILIATE)
        self.assertEqual(profile.business_name, "Chidi Deals")
        self.assertEqual(actor_for_user(User.objects.get(pk=self.applicant.pk)).role, Role.AFFILIATE)

    def test_rejection_grants_nothing(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")

        application = ApplicationService.decide(application.pk, False, self.admin)

        self.assertEqual(application.status, Application.Status.REJECTED)
        self.assertFalse(Profile.objects.filter(user=self.applicant).exists())

    def test_decided_application_cannot_be_decided_again(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")
        ApplicationService.decide(application.pk, False, self.admin)

        with self.assertRaises(InvalidTransition):
            ApplicationService.decide(application.pk, True, self.admin)
        self.assertFalse(Profile.objects.filter(user=self.applicant).exists())

    def test_only_admins_decide(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")
        vendor = Actor(user_id=self.applicant.pk, role=Role.VENDOR)

        with self.assertRaises(Unauthorized):
            ApplicationService.decide(application.pk, True, vendor)

    def test_missing_application(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            ApplicationService.decide(999999, True, self.admin)
        self.assertEqual(ctx.exception.code, "application_not_found")

    def test_non_numeric_id_is_not_found(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            ApplicationService.decide("abc", True, self.admin)
        self.assertEqual(ctx.exception.code, "application_not_found")


class ApplicationApiTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.client = APIClient()
        self.applicant = User.objects.create_user(username="chidi", password="testpass")
        self.admin_user = User.objects.create_user(username="admin", password="testpass")
        Profile.objects.create(user=self.admin_user, role=Role.ADMIN)

    def test_apply_and_list_own(self) -> None:
        self.client.force_authenticate(user=self.applicant)

        resp = self.client.post("/api/applications", {"role": "vendor", "business_name": "Chidi Crafts"}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["status"], "pending")

        resp = self.client.get("/api/applications")
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["username"], "chidi")

    def test_duplicate_pending_is_400(self) -> None:
        ApplicationService.submit(self.applicant.pk, "vendor")
        self.client.force_authenticate(user=self.applicant)

        resp = self.client.post("/api/applications", {"role": "affiliate"}, format="json")

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "already_pending")

    def test_admin_lists_pending(self) -> None:
        ApplicationService.submit(self.applicant.pk, "vendor")
        other = User.objects.create_user(username="zola", password="testpass")
        decided = ApplicationService.submit(other.pk, "affiliate")
        Application.objects.filter(pk=decided.pk).update(status=Application.Status.REJECTED)
        self.client.force_authenticate(user=self.admin_user)

        resp = self.client.get("/api/applications", {"status": "pending"})

        self.assertEqual([a["username"] for a in resp.data], ["chidi"])

    def test_admin_approves(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")
        self.client.force_authenticate(user=self.admin_user)

        resp = self.client.post(f"/api/applications/{application.pk}/approve")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "approved")
        self.assertEqual(Profile.objects.get(user=self.applicant).role, Role.VENDOR)

    def test_admin_rejects_twice_is_409(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")
        self.client.force_authenticate(user=self.admin_user)

        self.client.post(f"/api/applications/{application.pk}/reject")
        resp = self.client.post(f"/api/applications/{application.pk}/reject")

        self.assertEqual(resp.status_code, 409)

    def test_non_admin_cannot_decide(self) -> None:
        application = ApplicationService.submit(self.applicant.pk, "vendor")
        self.client.force_authenticate(user=self.applicant)

        resp = self.client.post(f"/api/applications/{application.pk}/approve")

        self.assertEqual(resp.status_code, 403)
        application.refresh_from_db()
        self.assertEqual(application.status, Application.Status.PENDING)
