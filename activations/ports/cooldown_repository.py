"""
Cooldown repository port (interface).

This defines the contract for cooldown period persistence operations.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
import uuid

from activations.domain.cooldown import CooldownPeriod


class CooldownRepository(ABC):
    """Abstract repository for CooldownPeriod entities."""

    @abstractmethod
    async def save(self, cooldown: CooldownPeriod) -> CooldownPeriod:
        """
        Save a cooldown period.

        Args:
            cooldown: CooldownPeriod entity to save

        Returns:
            Saved cooldown entity
        """
        pass

    @abstractmethod
    async def find_live(
        self, license_id: uuid.UUID, now: datetime
    ) -> Optional[CooldownPeriod]:
        """
        Find the live cooldown for a license.

        A cooldown is live when it is active and ends after ``now``. When
        several are live the one ending last is returned.

        Args:
            license_id: License UUID
            now: Current time

        Returns:
            CooldownPeriod entity or None
        """
        pass

    @abstractmethod
    async def clear_for_license(self, license_id: uuid.UUID) -> int:
        """
        Mark every active cooldown of a license inactive.

        Args:
            license_id: License UUID

        Returns:
            Number of cooldowns cleared
        """
        pass

    @abstractmethod
    async def count_expired(self, now: datetime) -> int:
        """
        Count cooldowns that ended before ``now`` or are inactive.

        Args:
            now: Current time

        Returns:
            Number of garbage cooldowns
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """
        Delete cooldowns that ended before ``now`` or are inactive.

        Never touches a live cooldown.

        Args:
            now: Current time

        Returns:
            Number of deleted cooldowns
        """
        pass
