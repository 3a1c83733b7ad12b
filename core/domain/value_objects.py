"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class DeviceFingerprint(ValueObject):
    """The device/machine pair a license is bound to."""

    device_id: str
    machine_id: str

    def __post_init__(self):
        """Validate both identifiers."""
        for name in ("device_id", "machine_id"):
            value = getattr(self, name)
            if not value or len(value.strip()) == 0:
                raise ValueError(f"{name} cannot be empty")
            if len(value) > 255:
                raise ValueError(f"{name} too long")

    def __str__(self) -> str:
        """Return fingerprint as device/machine."""
        return f"{self.device_id}/{self.machine_id}"


class ActivationState(Enum):
    """Activation state of a license."""

    UNACTIVATED = "unactivated"
    ACTIVATED = "activated"
    COOLDOWN = "cooldown"

    def __str__(self) -> str:
        """Return state as string."""
        return self.value


class ValidationVerdict(Enum):
    """Read-only classification of a license for a device."""

    ACTIVATED_HERE = "activated_here"
    ACTIVATED_ELSEWHERE = "activated_elsewhere"
    IN_COOLDOWN = "in_cooldown"
    AVAILABLE = "available"

    def __str__(self) -> str:
        """Return verdict as string."""
        return self.value
