from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("afrilink", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="profile",
            name="phone",
            field=models.CharField(blank=True, default="", max_length=32, verbose_name="phone"),
        ),
        migrations.AddField(
            model_name="profile",
            name="email_verified",
            field=models.BooleanField(default=False, verbose_name="email verified"),
        ),
        migrations.AddField(
            model_name="profile",
            name="phone_verified",
            field=models.BooleanField(default=False, verbose_name="phone verified"),
        ),
        migrations.AddField(
            model_name="profile",
            name="photo_verified",
            field=models.BooleanField(default=False, verbose_name="photo verified"),
        ),
        migrations.AddField(
            model_name="profile",
            name="verification_photo_url",
            field=models.URLField(blank=True, max_length=500, null=True, verbose_name="verification photo"),
        ),
        migrations.AddField(
            model_name="profile",
            name="verification_status",
            field=models.CharField(
                choices=[
                    ("pending", "not submitted"),
                    ("pending_review", "pending review"),
                    ("verified", "verified"),
                    ("rejected", "rejected"),
                ],
                db_index=True,
                default="pending",
                max_length=16,
                verbose_name="verification status",
            ),
        ),
    ]
