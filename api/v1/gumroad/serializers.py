"""
Serializers for Gumroad endpoints.
"""

from rest_framework import serializers


class WebhookResponseSerializer(serializers.Serializer):
    """Serializer for webhook intake response."""

    success = serializers.BooleanField()
    message = serializers.CharField()
    licenseKey = serializers.CharField(source="license_key")
    gumroadLicenseKey = serializers.CharField(source="license_key")


class VerifyLicenseRequestSerializer(serializers.Serializer):
    """Serializer for upstream verification request."""

    licenseKey = serializers.CharField(
        max_length=255,
        error_messages={"required": "License key is required", "blank": "License key is required"},
    )
    productPermalink = serializers.CharField(required=False, allow_blank=True, max_length=255)


class PurchaseSerializer(serializers.Serializer):
    """Serializer for purchase details returned by the provider."""

    email = serializers.CharField()
    purchase_id = serializers.CharField(allow_null=True)
    full_name = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)
    refunded = serializers.BooleanField()
    chargebacked = serializers.BooleanField()


class VerifyLicenseResponseSerializer(serializers.Serializer):
    """Serializer for upstream verification response."""

    success = serializers.BooleanField()
    valid = serializers.BooleanField()
    message = serializers.CharField()
    purchase = PurchaseSerializer(allow_null=True)
