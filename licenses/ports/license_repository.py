"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import Optional
import uuid

from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, license: License) -> License:
        """
        Save a license entity.

        Args:
            license: License entity to save

        Returns:
            Saved license entity

        Raises:
            LicenseConflictError: If a unique key or purchase id is taken
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_external_key(self, external_key: str) -> Optional[License]:
        """
        Find a license by the exact external (provider-issued) key.

        Args:
            external_key: Key as issued by the payment provider

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by the exact locally issued key.

        Args:
            key: Locally issued key

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_active_by_normalized_key(self, normalized_key: str) -> Optional[License]:
        """
        Find an active license whose external or local key normalizes to the given form.

        Args:
            normalized_key: Output of normalize_license_key

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_purchase_id(self, purchase_id: str) -> Optional[License]:
        """
        Find a license by external purchase id.

        Args:
            purchase_id: External purchase (sale) id

        Returns:
            License entity or None if not found
        """
        pass
