"""
RecordPurchaseHandler.

Handles purchases pushed by the payment provider's webhook.
"""

import logging

from core.domain.exceptions import LicenseConflictError
from core.infrastructure.events import event_bus
from licenses.application.commands.record_purchase import RecordPurchaseCommand
from licenses.application.dto.license_dto import PurchaseRecordedDTO
from licenses.domain.events import PurchaseRecorded
from licenses.domain.license import License
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class RecordPurchaseHandler:
    """Handler for RecordPurchaseCommand."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository

    async def handle(self, command: RecordPurchaseCommand) -> PurchaseRecordedDTO:
        """
        Handle record purchase command.

        Idempotent per purchase id: a known purchase only has its external
        key updated, and only when it changed. A concurrent insert of the
        same purchase is resolved by re-reading and updating.

        Args:
            command: RecordPurchaseCommand

        Returns:
            PurchaseRecordedDTO

        Raises:
            LicenseConflictError: If the key already belongs to another purchase
        """
        license_key = command.license_key.strip()
        existing = await self.license_repository.find_by_purchase_id(command.purchase_id)
        if existing:
            return await self._update(existing, license_key)

        license = License.create(
            email=command.email,
            external_key=license_key,
            purchase_id=command.purchase_id,
        )
        try:
            saved = await self.license_repository.save(license)
        except LicenseConflictError:
            existing = await self.license_repository.find_by_purchase_id(command.purchase_id)
            if existing is None:
                raise
            logger.info("Purchase %s was recorded concurrently", command.purchase_id)
            return await self._update(existing, license_key)

        logger.info(
            "Stored license %s for purchase %s",
            saved.id,
            command.purchase_id,
            extra={"license_id": str(saved.id)},
        )
        await event_bus.publish(
            PurchaseRecorded(
                license_id=saved.id,
                purchase_id=command.purchase_id,
                created=True,
                key_changed=False,
            )
        )
        return PurchaseRecordedDTO(
            success=True,
            message="License key processed successfully",
            license_id=saved.id,
            license_key=license_key,
            created=True,
            key_changed=False,
        )

    async def _update(self, existing: License, license_key: str) -> PurchaseRecordedDTO:
        key_changed = existing.external_key != license_key
        license = existing
        if key_changed:
            license = await self.license_repository.save(existing.with_external_key(license_key))
            logger.info(
                "Updated external key for purchase %s",
                existing.purchase_id,
                extra={"license_id": str(existing.id)},
            )
        await event_bus.publish(
            PurchaseRecorded(
                license_id=license.id,
                purchase_id=existing.purchase_id,
                created=False,
                key_changed=key_changed,
            )
        )
        return PurchaseRecordedDTO(
            success=True,
            message="License key processed successfully",
            license_id=license.id,
            license_key=license_key,
            created=False,
            key_changed=key_changed,
        )
