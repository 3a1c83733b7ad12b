"""
Unit tests for Activation and CooldownPeriod domain entities.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from activations.domain.activation import Activation
from activations.domain.cooldown import CooldownPeriod, hours_remaining
from activations.domain.policy import ActivationPolicy
from core.domain.value_objects import DeviceFingerprint

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestActivationEntity:
    """Tests for Activation domain entity."""

    def test_create_activation(self):
        license_id = uuid.uuid4()
        activation = Activation.create(license_id, "device-1", "machine-1", now=NOW)

        assert activation.license_id == license_id
        assert activation.device_id == "device-1"
        assert activation.machine_id == "machine-1"
        assert activation.activated_at == NOW
        assert activation.deactivated_at is None
        assert activation.is_active is True

    def test_create_rejects_blank_device(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            Activation.create(uuid.uuid4(), "", "machine-1")

    def test_is_bound_to_exact_pair_only(self):
        activation = Activation.create(uuid.uuid4(), "device-1", "machine-1")
        assert activation.is_bound_to(DeviceFingerprint("device-1", "machine-1"))
        assert not activation.is_bound_to(DeviceFingerprint("device-2", "machine-1"))
        assert not activation.is_bound_to(DeviceFingerprint("device-1", "machine-2"))

    def test_deactivate_and_reactivate(self):
        """Test deactivation keeps identity and reactivation refreshes timestamps."""
        activation = Activation.create(uuid.uuid4(), "device-1", "machine-1", now=NOW)
        later = NOW + timedelta(hours=1)

        deactivated = activation.deactivate(later)
        assert deactivated.id == activation.id
        assert deactivated.is_active is False
        assert deactivated.deactivated_at == later
        assert deactivated.deactivate(NOW) is deactivated

        reactivated = deactivated.reactivate(later + timedelta(hours=1))
        assert reactivated.id == activation.id
        assert reactivated.is_active is True
        assert reactivated.deactivated_at is None
        assert reactivated.activated_at == later + timedelta(hours=1)

    def test_rebind_device_keeps_machine(self):
        activation = Activation.create(uuid.uuid4(), "device-1", "machine-1", now=NOW)
        rebound = activation.rebind_device("device-2")

        assert rebound.id == activation.id
        assert rebound.device_id == "device-2"
        assert rebound.machine_id == "machine-1"
        assert rebound.activated_at == NOW


class TestHoursRemaining:
    """Tests for cooldown hour rounding."""

    @pytest.mark.parametrize(
        "remaining,expected",
        [
            (timedelta(hours=2), 2),
            (timedelta(hours=1, minutes=1), 2),
            (timedelta(hours=1), 1),
            (timedelta(seconds=1), 1),
            (timedelta(0), 0),
            (timedelta(minutes=-5), 0),
        ],
    )
    def test_rounds_up_and_never_negative(self, remaining, expected):
        assert hours_remaining(NOW + remaining, NOW) == expected


class TestCooldownPeriod:
    """Tests for CooldownPeriod domain entity."""

    def test_start(self):
        license_id = uuid.uuid4()
        cooldown = CooldownPeriod.start(license_id, now=NOW, window=timedelta(hours=2))

        assert cooldown.license_id == license_id
        assert cooldown.started_at == NOW
        assert cooldown.ends_at == NOW + timedelta(hours=2)
        assert cooldown.is_active is True

    def test_cannot_end_before_start(self):
        with pytest.raises(ValueError, match="end before it starts"):
            CooldownPeriod(uuid.uuid4(), uuid.uuid4(), NOW, NOW - timedelta(seconds=1), True)

    def test_is_live(self):
        cooldown = CooldownPeriod.start(uuid.uuid4(), now=NOW, window=timedelta(hours=2))

        assert cooldown.is_live(NOW)
        assert cooldown.is_live(NOW + timedelta(hours=1, minutes=59))
        assert not cooldown.is_live(NOW + timedelta(hours=2))
        assert not cooldown.clear().is_live(NOW)

    def test_is_garbage(self):
        cooldown = CooldownPeriod.start(uuid.uuid4(), now=NOW, window=timedelta(hours=2))

        assert not cooldown.is_garbage(NOW)
        assert cooldown.is_garbage(NOW + timedelta(hours=3))
        assert cooldown.clear().is_garbage(NOW)

    def test_hours_remaining(self):
        cooldown = CooldownPeriod.start(uuid.uuid4(), now=NOW, window=timedelta(hours=2))

        assert cooldown.hours_remaining(NOW + timedelta(minutes=30)) == 2
        assert cooldown.clear().hours_remaining(NOW) == 0


class TestActivationPolicy:
    """Tests for ActivationPolicy."""

    def test_defaults(self):
        policy = ActivationPolicy()
        assert policy.cooldown_window == timedelta(hours=2)
        assert policy.reconcile_machine_id is True
        assert policy.activation_retention == timedelta(days=90)

    def test_window_must_be_positive(self):
        with pytest.raises(ValueError, match="must be positive"):
            ActivationPolicy(cooldown_window=timedelta(0))

    def test_from_settings(self, settings):
        settings.LICENSE_COOLDOWN_HOURS = 0.5
        settings.LICENSE_RECONCILE_MACHINE_ID = False
        settings.LICENSE_ACTIVATION_RETENTION_DAYS = 7

        policy = ActivationPolicy.from_settings()

        assert policy.cooldown_window == timedelta(minutes=30)
        assert policy.reconcile_machine_id is False
        assert policy.activation_retention == timedelta(days=7)
