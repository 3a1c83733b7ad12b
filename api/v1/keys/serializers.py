"""
Serializers for license key endpoints.
"""

from rest_framework import serializers

from api.v1.serializers import CompactSerializer

DEVICE_REQUIRED = "Device ID and Machine ID are required"
LICENSE_KEY_REQUIRED = "License key is required"
LICENSE_KEY_FIELDS = ("gumroadLicenseKey", "licenseKey", "key")


class DeviceRequestSerializer(serializers.Serializer):
    """
    Base serializer for requests naming a license key and a device.

    The key is accepted as ``gumroadLicenseKey``, ``licenseKey`` or ``key``,
    first non-empty one wins.
    """

    gumroadLicenseKey = serializers.CharField(required=False, allow_blank=True, max_length=255)
    licenseKey = serializers.CharField(required=False, allow_blank=True, max_length=255)
    key = serializers.CharField(required=False, allow_blank=True, max_length=255)
    deviceId = serializers.CharField(
        max_length=255,
        error_messages={"required": DEVICE_REQUIRED, "blank": DEVICE_REQUIRED, "null": DEVICE_REQUIRED},
    )
    machineId = serializers.CharField(
        max_length=255,
        error_messages={"required": DEVICE_REQUIRED, "blank": DEVICE_REQUIRED, "null": DEVICE_REQUIRED},
    )

    def validate(self, attrs):
        license_key = next(
            (attrs[name].strip() for name in LICENSE_KEY_FIELDS if attrs.get(name, "").strip()),
            None,
        )
        if not license_key:
            raise serializers.ValidationError({"licenseKey": LICENSE_KEY_REQUIRED}, code="required")
        attrs["license_key"] = license_key
        return attrs


class VerifiedDeviceRequestSerializer(DeviceRequestSerializer):
    """Device request that may assert the key was already verified upstream."""

    verified = serializers.BooleanField(required=False, default=False)
    gumroadValidated = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        attrs["caller_verified"] = bool(attrs.get("verified") or attrs.get("gumroadValidated"))
        return attrs


class ActivateLicenseRequestSerializer(VerifiedDeviceRequestSerializer):
    """Serializer for activate license request."""


class ValidateLicenseRequestSerializer(VerifiedDeviceRequestSerializer):
    """Serializer for validate license request."""


class DeactivateLicenseRequestSerializer(DeviceRequestSerializer):
    """Serializer for deactivate license request."""


class ActivateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for activate license response."""

    success = serializers.BooleanField()
    message = serializers.CharField()


class DeactivateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for deactivate license response."""

    success = serializers.BooleanField()
    message = serializers.CharField()
    cooldownEnds = serializers.DateTimeField(source="cooldown_ends_at")


class ValidateLicenseResponseSerializer(CompactSerializer):
    """Serializer for validate license response."""

    valid = serializers.BooleanField()
    activated = serializers.BooleanField()
    message = serializers.CharField(required=False, allow_null=True)
    cooldown = serializers.SerializerMethodField()
    cooldownEnds = serializers.DateTimeField(source="cooldown_ends_at", allow_null=True)
    hoursRemaining = serializers.IntegerField(source="hours_remaining", allow_null=True)
    reconciled = serializers.SerializerMethodField()

    def get_cooldown(self, obj):
        return True if obj.cooldown else None

    def get_reconciled(self, obj):
        return True if obj.reconciled else None


class DenialResponseSerializer(serializers.Serializer):
    """Serializer for refused requests (rendered with HTTP 200)."""

    success = serializers.BooleanField()
    code = serializers.CharField()
    message = serializers.CharField()
    cooldown = serializers.BooleanField(required=False)
    cooldownEnds = serializers.DateTimeField(required=False)
    hoursRemaining = serializers.IntegerField(required=False)


class GenerateLicenseKeyRequestSerializer(serializers.Serializer):
    """Serializer for local key generation request."""

    email = serializers.EmailField()
    gumroadLicenseKey = serializers.CharField(max_length=255)
    gumroadPurchaseId = serializers.CharField(max_length=255)


class GenerateLicenseKeyResponseSerializer(serializers.Serializer):
    """Serializer for local key generation response."""

    key = serializers.CharField()
