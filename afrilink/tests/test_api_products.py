"""
Tests for the products API: listing, creation, lifecycle actions and stats.
"""
from __future__ import annotations

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import OperationalError
from django.db.models import QuerySet
from django.test import TestCase
from rest_framework.test import APIClient

from afrilink.actors import Actor, Role
from afrilink.models import Product, Profile
from afrilink.services import CatalogService, LifecycleService

User = get_user_model()


class ProductApiTestCase(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.client = APIClient()
        self.admin_user = self.make_user("admin", Role.ADMIN)
        self.vendor_user = self.make_user("vendor", Role.VENDOR)
        self.other_vendor_user = self.make_user("other_vendor", Role.VENDOR)
        self.affiliate_user = self.make_user("affiliate", Role.AFFILIATE)

        self.admin = Actor(user_id=self.admin_user.pk, role=Role.ADMIN, username="admin")
        self.vendor = Actor(user_id=self.vendor_user.pk, role=Role.VENDOR, username="vendor")

    def make_user(self, username: str, role: Role):
        user = User.objects.create_user(username=username, password="testpass")
        Profile.objects.create(user=user, role=role)
        return user

    def make_product(self, *actions: str, title: str = "Ankara Tote") -> Product:
        product = CatalogService.create_product(self.vendor, title=title, category="Fashion", price_q=150000)
        for action in actions:
            actor = self.vendor if action == "request_takedown" else self.admin
            LifecycleService.apply_transition(product.pk, action, actor)
        product.refresh_from_db()
        return product

    def login(self, user) -> None:
        self.client.force_authenticate(user=user)


class ProductCreateApiTests(ProductApiTestCase):
    def test_vendor_creates_product(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.post(
            "/api/products",
            {
                "title": "Ankara Tote",
                "category": "Fashion",
                "price_q": 150000,
                "commission": 12,
                "images": ["https://img.example/tote.jpg"],
            },
            format="json",
        )

        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["status"], "pending")
        self.assertEqual(resp.data["price_display"], "₦1,500")
        self.assertEqual(resp.data["primary_image"], "https://img.example/tote.jpg")
        self.assertEqual(resp.data["vendor_username"], "vendor")
        self.assertEqual(resp.data["allowed_actions"], [])

    def test_invalid_category_is_400(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.post(
            "/api/products",
            {"title": "Mystery", "category": "Weapons", "price_q": 100},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "invalid_category")
        self.assertFalse(Product.objects.exists())

    def test_commission_out_of_range_is_400(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.post(
            "/api/products",
            {"title": "Too generous", "category": "Books", "price_q": 100, "commission": 80},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "invalid_commission")

    def test_missing_fields_is_400(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.post("/api/products", {"title": "No price"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_admin_cannot_create(self) -> None:
        self.login(self.admin_user)
        resp = self.client.post(
            "/api/products",
            {"title": "Admin item", "category": "Books", "price_q": 100},
            format="json",
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], "role_mismatch")

    def test_anonymous_is_rejected(self) -> None:
        resp = self.client.post("/api/products", {"title": "X"}, format="json")
        self.assertIn(resp.status_code, (401, 403))

    def test_user_without_role_is_403(self) -> None:
        self.login(User.objects.create_user(username="visitor", password="testpass"))
        resp = self.client.get("/api/products")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], "no_role")


class ProductListApiTests(ProductApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.pending = self.make_product(title="Pending")
        self.approved = self.make_product("approve", title="Approved")
        self.takedown = self.make_product("approve", "request_takedown", title="Takedown")

    def test_admin_lists_by_status(self) -> None:
        self.login(self.admin_user)

        resp = self.client.get("/api/products", {"status": "pending_takedown"})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["id"] for p in resp.data], [self.takedown.pk])
        self.assertEqual(resp.data[0]["allowed_actions"], ["approve_takedown", "reject_takedown"])

    def test_admin_lists_all_by_default(self) -> None:
        self.login(self.admin_user)
        resp = self.client.get("/api/products")
        self.assertEqual(len(resp.data), 3)

    def test_admin_unknown_filter_is_400(self) -> None:
        self.login(self.admin_user)
        resp = self.client.get("/api/products", {"status": "archived"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "invalid_filter")

    def test_vendor_lists_own_products(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.get("/api/products")
        self.assertEqual({p["id"] for p in resp.data}, {self.pending.pk, self.approved.pk, self.takedown.pk})

        approved = next(p for p in resp.data if p["id"] == self.approved.pk)
        self.assertEqual(approved["allowed_actions"], ["request_takedown"])

    def test_other_vendor_sees_nothing(self) -> None:
        self.login(self.other_vendor_user)
        resp = self.client.get("/api/products")
        self.assertEqual(resp.data, [])

    def test_affiliate_sees_marketplace(self) -> None:
        self.login(self.affiliate_user)
        resp = self.client.get("/api/products")
        self.assertEqual([p["id"] for p in resp.data], [self.approved.pk])

    def test_retrieve(self) -> None:
        self.login(self.vendor_user)
        resp = self.client.get(f"/api/products/{self.pending.pk}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["title"], "Pending")

    def test_retrieve_not_visible_is_404(self) -> None:
        self.login(self.other_vendor_user)
        resp = self.client.get(f"/api/products/{self.pending.pk}")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], "product_not_found")


class ProductActionApiTests(ProductApiTestCase):
    def test_admin_approves(self) -> None:
        product = self.make_product()
        self.login(self.admin_user)

        resp = self.client.post(f"/api/products/{product.pk}/approve")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "approved")
        product.refresh_from_db()
        self.assertEqual(product.status, Product.Status.APPROVED)

    def test_admin_rejects(self) -> None:
        product = self.make_product()
        self.login(self.admin_user)
        resp = self.client.post(f"/api/products/{product.pk}/reject")
        self.assertEqual(resp.data["status"], "rejected")

    def test_takedown_round_trip(self) -> None:
        product = self.make_product("approve")

        self.login(self.vendor_user)
        resp = self.client.post(f"/api/products/{product.pk}/request-takedown")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "pending_takedown")

        self.login(self.admin_user)
        resp = self.client.post(f"/api/products/{product.pk}/reject-takedown")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["status"], "approved")

    def test_approve_takedown(self) -> None:
        product = self.make_product("approve", "request_takedown")
        self.login(self.admin_user)
        resp = self.client.post(f"/api/products/{product.pk}/approve-takedown")
        self.assertEqual(resp.data["status"], "taken_down")

    def test_wrong_status_is_409(self) -> None:
        product = self.make_product()
        self.login(self.admin_user)

        resp = self.client.post(f"/api/products/{product.pk}/approve-takedown")

        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.data["code"], "invalid_transition")
        self.assertEqual(resp.data["context"]["current_status"], "pending")
        product.refresh_from_db()
        self.assertEqual(product.status, Product.Status.PENDING)

    def test_vendor_cannot_approve(self) -> None:
        product = self.make_product()
        self.login(self.vendor_user)

        resp = self.client.post(f"/api/products/{product.pk}/approve")

        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], "role_mismatch")

    def test_vendor_cannot_take_down_foreign_product(self) -> None:
        product = self.make_product("approve")
        self.login(self.other_vendor_user)

        resp = self.client.post(f"/api/products/{product.pk}/request-takedown")

        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.data["code"], "not_owner")

    def test_missing_product_is_404(self) -> None:
        self.login(self.admin_user)
        resp = self.client.post("/api/products/999999/approve")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], "product_not_found")

    def test_store_failure_is_503(self) -> None:
        product = self.make_product()
        self.login(self.admin_user)

        with patch.object(QuerySet, "update", side_effect=OperationalError("database is locked")):
            resp = self.client.post(f"/api/products/{product.pk}/approve")

        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.data["code"], "store_unavailable")


class StatsApiTests(ProductApiTestCase):
    def test_vendor_stats(self) -> None:
        product = self.make_product("approve")
        Product.objects.filter(pk=product.pk).update(sales=3)
        self.login(self.vendor_user)

        resp = self.client.get("/api/stats")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["role"], "vendor")
        self.assertEqual(resp.data["revenue"], 450000)
        self.assertEqual(resp.data["sales"], 3)
        self.assertEqual(resp.data["active_products"], 1)

    def test_admin_stats(self) -> None:
        self.make_product()
        self.login(self.admin_user)

        resp = self.client.get("/api/stats")

        self.assertEqual(resp.data["role"], "admin")
        self.assertEqual(resp.data["pending_products"], 1)
        self.assertEqual(resp.data["total_vendors"], 2)

    def test_affiliate_has_no_stats(self) -> None:
        self.login(self.affiliate_user)
        resp = self.client.get("/api/stats")
        self.assertEqual(resp.status_code, 403)


class HealthApiTests(TestCase):
    def test_health(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "healthy")
