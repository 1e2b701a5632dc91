import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("vendor", "vendor"), ("admin", "admin"), ("affiliate", "affiliate")],
                        db_index=True,
                        max_length=16,
                        verbose_name="role",
                    ),
                ),
                ("business_name", models.CharField(blank=True, default="", max_length=128, verbose_name="business name")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "profile",
                "verbose_name_plural": "profiles",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                ("description", models.TextField(blank=True, default="", verbose_name="description")),
                ("price_q", models.BigIntegerField(default=0, verbose_name="price (q)")),
                (
                    "commission",
                    models.PositiveSmallIntegerField(
                        default=10,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(50),
                        ],
                        verbose_name="commission (%)",
                    ),
                ),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Electronics", "Electronics"),
                            ("Fashion", "Fashion"),
                            ("Home & Garden", "Home & Garden"),
                            ("Beauty", "Beauty"),
                            ("Sports", "Sports"),
                            ("Books", "Books"),
                            ("Toys", "Toys"),
                            ("Food & Beverages", "Food & Beverages"),
                            ("Health", "Health"),
                            ("Other", "Other"),
                        ],
                        max_length=32,
                        verbose_name="category",
                    ),
                ),
                ("images", models.JSONField(blank=True, default=list, verbose_name="images")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("approved", "approved"),
                            ("rejected", "rejected"),
                            ("pending_takedown", "takedown requested"),
                            ("taken_down", "taken down"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=32,
                        verbose_name="status",
                    ),
                ),
                ("sales", models.PositiveIntegerField(default=0, verbose_name="sales")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="products",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="vendor",
                    ),
                ),
            ],
            options={
                "verbose_name": "product",
                "verbose_name_plural": "products",
                "ordering": ("-created_at", "-id"),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price_q__gte=0),
                        name="product_price_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(commission__gte=1) & models.Q(commission__lte=50),
                        name="product_commission_range",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            status__in=["pending", "approved", "rejected", "pending_takedown", "taken_down"]
                        ),
                        name="product_status_valid",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(db_index=True, max_length=64, verbose_name="type")),
                ("actor", models.CharField(max_length=128, verbose_name="actor")),
                ("payload", models.JSONField(default=dict, verbose_name="payload")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="afrilink.product",
                        verbose_name="product",
                    ),
                ),
            ],
            options={
                "verbose_name": "product event",
                "verbose_name_plural": "product events",
                "ordering": ("created_at", "id"),
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                ("message", models.TextField(blank=True, default="", verbose_name="message")),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("info", "info"),
                            ("success", "success"),
                            ("warning", "warning"),
                            ("error", "error"),
                        ],
                        default="info",
                        max_length=16,
                        verbose_name="type",
                    ),
                ),
                ("read", models.BooleanField(db_index=True, default=False, verbose_name="read")),
                ("link", models.CharField(blank=True, max_length=255, null=True, verbose_name="link")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "notification",
                "verbose_name_plural": "notifications",
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "role",
                    models.CharField(
                        choices=[("vendor", "vendor"), ("affiliate", "affiliate")],
                        max_length=16,
                        verbose_name="role",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "pending"), ("approved", "approved"), ("rejected", "rejected")],
                        db_index=True,
                        default="pending",
                        max_length=16,
                        verbose_name="status",
                    ),
                ),
                ("business_name", models.CharField(blank=True, default="", max_length=128, verbose_name="business name")),
                ("description", models.TextField(blank=True, default="", verbose_name="description")),
                ("applied_at", models.DateTimeField(auto_now_add=True, verbose_name="applied at")),
                ("decided_at", models.DateTimeField(blank=True, null=True, verbose_name="decided at")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="applications",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="user",
                    ),
                ),
            ],
            options={
                "verbose_name": "application",
                "verbose_name_plural": "applications",
                "ordering": ("-applied_at", "-id"),
            },
        ),
    ]
