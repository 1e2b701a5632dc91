"""
Management command that seeds a demo marketplace.

Usage:
    python manage.py seed_marketplace
    python manage.py seed_marketplace --password secret

Creates an admin, a vendor and an affiliate (with profiles) and a handful of
products driven through the lifecycle, so every moderation queue has content.
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from afrilink.actors import Actor, Role
from afrilink.models import Product, Profile
from afrilink.services import CatalogService, LifecycleService


DEMO_USERS = [
    ("admin", "admin@afrilink.example", Role.ADMIN, ""),
    ("john.kamau", "john@example.com", Role.VENDOR, "Kamau Digital"),
    ("amina.hassan", "amina@example.com", Role.AFFILIATE, ""),
]

# title, description, price_q, commission, category, sales, actions
DEMO_PRODUCTS = [
    ("Digital Marketing Course", "Master social media marketing", 15000000, 30, "Books", 45, ["approve"]),
    ("E-Commerce Guide", "Launch your online store", 8500000, 25, "Books", 32, ["approve"]),
    ("SEO Toolkit", "Boost your rankings", 12000000, 35, "Other", 28, ["approve", "request_takedown"]),
    ("Ankara Print Tote", "Handmade tote bag", 1500000, 15, "Fashion", 0, []),
    ("Shea Butter Set", "Raw unrefined shea butter", 650000, 10, "Beauty", 0, ["reject"]),
]


class Command(BaseCommand):
    help = "Seeds demo users and products for the AfriLink marketplace"

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            default="afrilink",
            help="Password for the demo users (default: afrilink)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()
        actors = {}

        for username, email, role, business_name in DEMO_USERS:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={"email": email, "is_staff": role == Role.ADMIN},
            )
            if created:
                user.set_password(options["password"])
                user.save()
            Profile.objects.update_or_create(user=user, defaults={"role": role, "business_name": business_name})
            actors[role] = Actor(user_id=user.pk, role=role, username=username)
            self.stdout.write(f"  user {username} ({role})")

        vendor = actors[Role.VENDOR]
        if Product.objects.filter(vendor_id=vendor.user_id).exists():
            self.stdout.write(self.style.WARNING("Vendor already has products, skipping product seed."))
            return

        for title, description, price_q, commission, category, sales, steps in DEMO_PRODUCTS:
            product = CatalogService.create_product(
                vendor,
                title=title,
                description=description,
                price_q=price_q,
                commission=commission,
                category=category,
            )
            if sales:
                Product.objects.filter(pk=product.pk).update(sales=sales)
            for step in steps:
                action = Product.Action(step)
                rule = Product.TRANSITIONS[action]
                LifecycleService.apply_transition(product.pk, action, actors[rule.role])
            product.refresh_from_db()
            self.stdout.write(f"  product {title!r} → {product.status}")

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(DEMO_PRODUCTS)} products."))
