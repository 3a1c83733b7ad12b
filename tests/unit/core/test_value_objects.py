"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import (
    ActivationState,
    DeviceFingerprint,
    Email,
    ValidationVerdict,
)


class TestEmail:
    """Tests for Email value object."""

    def test_valid_email(self):
        """Test valid email creation."""
        email = Email("test@example.com")
        assert str(email) == "test@example.com"
        assert email.value == "test@example.com"

    def test_invalid_email_no_at(self):
        """Test invalid email without @."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("invalid-email")

    def test_invalid_email_empty(self):
        """Test invalid empty email."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("")


class TestDeviceFingerprint:
    """Tests for DeviceFingerprint value object."""

    def test_equal_by_value(self):
        assert DeviceFingerprint("d1", "m1") == DeviceFingerprint("d1", "m1")
        assert DeviceFingerprint("d1", "m1") != DeviceFingerprint("d2", "m1")
        assert hash(DeviceFingerprint("d1", "m1")) == hash(DeviceFingerprint("d1", "m1"))

    def test_str(self):
        assert str(DeviceFingerprint("d1", "m1")) == "d1/m1"

    @pytest.mark.parametrize("device_id,machine_id", [("", "m1"), ("d1", ""), ("   ", "m1")])
    def test_empty_identifiers_rejected(self, device_id, machine_id):
        """Test that blank identifiers are rejected."""
        with pytest.raises(ValueError, match="cannot be empty"):
            DeviceFingerprint(device_id, machine_id)

    def test_too_long_identifier_rejected(self):
        with pytest.raises(ValueError, match="too long"):
            DeviceFingerprint("d" * 256, "m1")


class TestEnums:
    """Tests for state enums."""

    def test_activation_state_str(self):
        assert str(ActivationState.COOLDOWN) == "cooldown"

    def test_validation_verdict_str(self):
        assert str(ValidationVerdict.ACTIVATED_ELSEWHERE) == "activated_elsewhere"
