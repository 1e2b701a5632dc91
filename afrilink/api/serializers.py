from __future__ import annotations

from rest_framework import serializers

from afrilink.models import Application, Notification, Product, Profile


class ProductSerializer(serializers.ModelSerializer):
    vendor_username = serializers.CharField(source="vendor.username", read_only=True)
    primary_image = serializers.CharField(read_only=True)
    price_display = serializers.CharField(read_only=True)
    allowed_actions = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = (
            "id",
            "vendor",
            "vendor_username",
            "title",
            "description",
            "price_q",
            "price_display",
            "commission",
            "category",
            "images",
            "primary_image",
            "status",
            "sales",
            "created_at",
            "allowed_actions",
        )
        read_only_fields = fields

    def get_allowed_actions(self, obj: Product) -> list[str]:
        from afrilink.services import LifecycleService

        actor = self.context.get("actor")
        if actor is None:
            return []
        return LifecycleService.allowed_actions(obj, actor)


class ProductCreateSerializer(serializers.Serializer):
    """
    POST /api/products

    Shape validation only; business rules (ranges, role) live in CatalogService.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    price_q = serializers.IntegerField()
    commission = serializers.IntegerField(required=False)
    category = serializers.CharField(max_length=32)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False, default=list)


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ("id", "title", "message", "type", "read", "link", "created_at")
        read_only_fields = fields


class ApplicationSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Application
        fields = (
            "id",
            "user",
            "username",
            "role",
            "status",
            "business_name",
            "description",
            "applied_at",
            "decided_at",
        )
        read_only_fields = fields


class ApplicationCreateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Application.Role.choices)
    business_name = serializers.CharField(required=False, allow_blank=True, max_length=128, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


class VerificationSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    is_fully_verified = serializers.BooleanField(read_only=True)

    class Meta:
        model = Profile
        fields = (
            "user",
            "username",
            "role",
            "phone",
            "email_verified",
            "phone_verified",
            "photo_verified",
            "verification_status",
            "verification_photo_url",
            "is_fully_verified",
        )
        read_only_fields = fields


class PhoneSerializer(serializers.Serializer):
    phone = serializers.CharField(max_length=32)


class PhotoSerializer(serializers.Serializer):
    photo_url = serializers.CharField(max_length=500)
