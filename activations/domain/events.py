"""
Activation domain events.

Domain events represent something that happened in the activation domain.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class LicenseActivated(DomainEvent):
    """Event raised when a license is bound to a device (new or reactivated)."""

    payload_fields = ("activation_id", "license_id", "device_id", "machine_id", "reactivated")

    def __init__(
        self,
        activation_id: uuid.UUID,
        license_id: uuid.UUID,
        device_id: str,
        machine_id: str,
        reactivated: bool = False,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseActivated event.

        Args:
            activation_id: Activation UUID
            license_id: License UUID
            device_id: Device identifier
            machine_id: Machine identifier
            reactivated: True when an existing row was reused
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(activation_id), occurred_at=occurred_at)
        self.activation_id = activation_id
        self.license_id = license_id
        self.device_id = device_id
        self.machine_id = machine_id
        self.reactivated = reactivated


class LicenseDeactivatedOnDevice(DomainEvent):
    """Event raised when a device binding is released and a cooldown starts."""

    payload_fields = ("activation_id", "license_id", "device_id", "machine_id", "cooldown_ends_at")

    def __init__(
        self,
        activation_id: uuid.UUID,
        license_id: uuid.UUID,
        device_id: str,
        machine_id: str,
        cooldown_ends_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(activation_id), occurred_at=occurred_at)
        self.activation_id = activation_id
        self.license_id = license_id
        self.device_id = device_id
        self.machine_id = machine_id
        self.cooldown_ends_at = cooldown_ends_at


class ActivationDenied(DomainEvent):
    """Event raised when an activation request is refused."""

    payload_fields = ("license_id", "device_id", "machine_id", "reason")

    def __init__(
        self,
        license_id: uuid.UUID,
        device_id: str,
        machine_id: str,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_id), occurred_at=occurred_at)
        self.license_id = license_id
        self.device_id = device_id
        self.machine_id = machine_id
        self.reason = reason


class DeviceReconciled(DomainEvent):
    """Event raised when validation moved an activation to a new device id on the same machine."""

    payload_fields = ("activation_id", "license_id", "previous_device_id", "device_id", "machine_id")

    def __init__(
        self,
        activation_id: uuid.UUID,
        license_id: uuid.UUID,
        previous_device_id: str,
        device_id: str,
        machine_id: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(activation_id), occurred_at=occurred_at)
        self.activation_id = activation_id
        self.license_id = license_id
        self.previous_device_id = previous_device_id
        self.device_id = device_id
        self.machine_id = machine_id


class StaleRecordsPurged(DomainEvent):
    """Event raised after a cleanup run removed rows."""

    payload_fields = ("cooldowns_removed", "activations_removed")

    def __init__(
        self,
        cooldowns_removed: int,
        activations_removed: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id="maintenance", occurred_at=occurred_at)
        self.cooldowns_removed = cooldowns_removed
        self.activations_removed = activations_removed
