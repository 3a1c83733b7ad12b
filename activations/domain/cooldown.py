"""
CooldownPeriod domain entity.

A cooldown starts when a device is deactivated and keeps other devices
from taking over the license until it ends.
"""

import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

ONE_HOUR = timedelta(hours=1)


def hours_remaining(ends_at: datetime, now: datetime) -> int:
    """
    Whole hours left until ``ends_at``, rounded up and never negative.

    Args:
        ends_at: End of the cooldown
        now: Current time

    Returns:
        ceil((ends_at - now) / 1 hour), or 0 once the cooldown is over
    """
    remaining = ends_at - now
    if remaining <= timedelta(0):
        return 0
    return math.ceil(remaining / ONE_HOUR)


@dataclass(frozen=True)
class CooldownPeriod:
    """CooldownPeriod domain entity."""

    id: uuid.UUID
    license_id: uuid.UUID
    started_at: datetime
    ends_at: datetime
    is_active: bool

    def __post_init__(self):
        """Validate cooldown entity."""
        if not self.license_id:
            raise ValueError("License ID is required")
        if self.ends_at < self.started_at:
            raise ValueError("Cooldown cannot end before it starts")

    @classmethod
    def start(
        cls,
        license_id: uuid.UUID,
        now: datetime,
        window: timedelta,
        cooldown_id: Optional[uuid.UUID] = None,
    ) -> "CooldownPeriod":
        """Open a cooldown of ``window`` length starting at ``now``."""
        return cls(
            id=cooldown_id or uuid.uuid4(),
            license_id=license_id,
            started_at=now,
            ends_at=now + window,
            is_active=True,
        )

    def is_live(self, now: datetime) -> bool:
        """A cooldown blocks activations only while active and not yet over."""
        return self.is_active and self.ends_at > now

    def is_garbage(self, now: datetime) -> bool:
        """Expired or cleared cooldowns carry no meaning and may be purged."""
        return self.ends_at < now or not self.is_active

    def hours_remaining(self, now: datetime) -> int:
        return hours_remaining(self.ends_at, now) if self.is_active else 0

    def clear(self) -> "CooldownPeriod":
        """Return a copy that no longer blocks activations."""
        return replace(self, is_active=False)
