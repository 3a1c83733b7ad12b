"""
Activation domain entity.

This is the core domain entity representing the binding of a license
to one device/machine pair. It is independent of infrastructure.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import DeviceFingerprint


@dataclass(frozen=True)
class Activation:
    """
    Activation domain entity.

    At most one activation per license is active at any time. The
    (license, device, machine) tuple identifies the row, so reactivating
    a device reuses it.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    fingerprint: DeviceFingerprint
    activated_at: datetime
    deactivated_at: Optional[datetime]
    is_active: bool

    def __post_init__(self):
        """Validate activation entity."""
        if not self.license_id:
            raise ValueError("License ID is required")
        if not self.fingerprint:
            raise ValueError("Device fingerprint is required")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        device_id: str,
        machine_id: str,
        now: Optional[datetime] = None,
        activation_id: Optional[uuid.UUID] = None,
    ) -> "Activation":
        """
        Create a new active Activation.

        Args:
            license_id: License UUID
            device_id: Device identifier reported by the client
            machine_id: Machine (hardware) identifier reported by the client
            now: Activation time (defaults to now)
            activation_id: Optional UUID (generated if not provided)

        Returns:
            Activation entity instance
        """
        return cls(
            id=activation_id or uuid.uuid4(),
            license_id=license_id,
            fingerprint=DeviceFingerprint(device_id, machine_id),
            activated_at=now or datetime.now(timezone.utc),
            deactivated_at=None,
            is_active=True,
        )

    @property
    def device_id(self) -> str:
        return self.fingerprint.device_id

    @property
    def machine_id(self) -> str:
        return self.fingerprint.machine_id

    def is_bound_to(self, fingerprint: DeviceFingerprint) -> bool:
        """Check whether this activation belongs to exactly this device/machine pair."""
        return self.fingerprint == fingerprint

    def deactivate(self, now: Optional[datetime] = None) -> "Activation":
        """
        Create a new Activation instance with deactivated status.

        Returns:
            New Activation instance with deactivated status
        """
        if not self.is_active:
            return self

        return Activation(
            id=self.id,
            license_id=self.license_id,
            fingerprint=self.fingerprint,
            activated_at=self.activated_at,
            deactivated_at=now or datetime.now(timezone.utc),
            is_active=False,
        )

    def reactivate(self, now: Optional[datetime] = None) -> "Activation":
        """
        Create a new Activation instance with reactivated status.

        The activation time is refreshed and the deactivation time cleared.
        """
        return Activation(
            id=self.id,
            license_id=self.license_id,
            fingerprint=self.fingerprint,
            activated_at=now or datetime.now(timezone.utc),
            deactivated_at=None,
            is_active=True,
        )

    def rebind_device(self, device_id: str) -> "Activation":
        """Keep the machine binding but record a new device id."""
        return Activation(
            id=self.id,
            license_id=self.license_id,
            fingerprint=DeviceFingerprint(device_id, self.machine_id),
            activated_at=self.activated_at,
            deactivated_at=self.deactivated_at,
            is_active=self.is_active,
        )
