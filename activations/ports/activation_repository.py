"""
Activation repository port (interface).

This defines the contract for activation persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
import uuid

from activations.domain.activation import Activation
from core.domain.value_objects import DeviceFingerprint


class ActivationRepository(ABC):
    """
    Abstract repository for Activation entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, activation: Activation) -> Activation:
        """
        Save an activation entity.

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity

        Raises:
            AlreadyActivatedElsewhereError: If saving would leave two active
                activations for the same license
        """
        pass

    @abstractmethod
    async def find_by_id(
        self, activation_id: uuid.UUID
    ) -> Optional[Activation]:
        """
        Find an activation by ID.

        Args:
            activation_id: Activation UUID

        Returns:
            Activation entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_fingerprint(
        self, license_id: uuid.UUID, fingerprint: DeviceFingerprint
    ) -> Optional[Activation]:
        """
        Find the activation of a license on an exact device/machine pair.

        Args:
            license_id: License UUID
            fingerprint: Device/machine pair

        Returns:
            Activation entity (active or not) or None if not found
        """
        pass

    @abstractmethod
    async def find_active_by_license(
        self, license_id: uuid.UUID
    ) -> Optional[Activation]:
        """
        Find the active activation for a license.

        Args:
            license_id: License UUID

        Returns:
            The active Activation entity or None
        """
        pass

    @abstractmethod
    async def find_all_by_license(
        self, license_id: uuid.UUID
    ) -> List[Activation]:
        """
        Find all activations for a license (active and inactive).

        Args:
            license_id: License UUID

        Returns:
            List of Activation entities
        """
        pass

    @abstractmethod
    async def count_inactive_before(self, cutoff: datetime) -> int:
        """
        Count inactive activations deactivated before ``cutoff``.

        Args:
            cutoff: Deactivation time threshold

        Returns:
            Number of matching activations
        """
        pass

    @abstractmethod
    async def delete_inactive_before(self, cutoff: datetime) -> int:
        """
        Delete inactive activations deactivated before ``cutoff``.

        Args:
            cutoff: Deactivation time threshold

        Returns:
            Number of deleted activations
        """
        pass
