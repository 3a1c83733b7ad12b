"""
GenerateLicenseKeyHandler.

Issues a local license key for a purchase.
"""

from core.domain.exceptions import LicenseConflictError
from core.infrastructure.events import event_bus
from licenses.application.commands.generate_license_key import GenerateLicenseKeyCommand
from licenses.application.dto.license_dto import GeneratedKeyDTO
from licenses.domain.events import LicenseKeyIssued
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.ports.license_repository import LicenseRepository


class GenerateLicenseKeyHandler:
    """Handler for GenerateLicenseKeyCommand."""

    def __init__(self, license_repository: LicenseRepository, key_generator=generate_license_key):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.key_generator = key_generator

    async def handle(self, command: GenerateLicenseKeyCommand) -> GeneratedKeyDTO:
        """
        Handle generate license key command.

        Idempotent per purchase id: the key of a known purchase is returned
        as is, and a known purchase without a local key is given one.

        Args:
            command: GenerateLicenseKeyCommand

        Returns:
            GeneratedKeyDTO
        """
        existing = await self.license_repository.find_by_purchase_id(command.purchase_id)
        if existing and existing.key:
            return GeneratedKeyDTO(key=existing.key, license_id=existing.id, created=False)

        if existing:
            license = existing.with_local_key(self.key_generator())
        else:
            license = License.create(
                email=command.email,
                external_key=command.external_key,
                key=self.key_generator(),
                purchase_id=command.purchase_id,
            )

        try:
            saved = await self.license_repository.save(license)
        except LicenseConflictError:
            # Another request issued the key first
            existing = await self.license_repository.find_by_purchase_id(command.purchase_id)
            if existing is None or not existing.key:
                raise
            return GeneratedKeyDTO(key=existing.key, license_id=existing.id, created=False)

        await event_bus.publish(
            LicenseKeyIssued(license_id=saved.id, purchase_id=command.purchase_id)
        )
        return GeneratedKeyDTO(key=saved.key, license_id=saved.id, created=existing is None)
