"""
DeactivateLicenseHandler.

Handler for releasing a device binding.
"""

import logging
from typing import AsyncContextManager, Callable

from activations.application.commands.deactivate_license import DeactivateLicenseCommand
from activations.application.dto.activation_dto import DeactivationResponseDTO
from activations.domain.events import LicenseDeactivatedOnDevice
from activations.domain.services import ActivationStateMachine
from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import DeviceFingerprint
from core.infrastructure.database import async_transaction
from core.infrastructure.events import event_bus
from licenses.application.services.license_resolution import find_license
from licenses.domain.services import LicenseResolver

logger = logging.getLogger(__name__)


class DeactivateLicenseHandler:
    """Handler for DeactivateLicenseCommand."""

    def __init__(
        self,
        license_resolver: LicenseResolver,
        state_machine: ActivationStateMachine,
        transaction: Callable[[], AsyncContextManager] = async_transaction,
    ):
        """Initialize handler with collaborators."""
        self.license_resolver = license_resolver
        self.state_machine = state_machine
        self.transaction = transaction

    async def handle(self, command: DeactivateLicenseCommand) -> DeactivationResponseDTO:
        """
        Handle deactivate license command.

        The device binding is released and a cooldown opened in one
        transaction. Expired cooldowns are purged afterwards.

        Args:
            command: DeactivateLicenseCommand

        Returns:
            DeactivationResponseDTO with the cooldown end

        Raises:
            LicenseNotFoundError: If the key resolves to no license
            LicenseDeactivatedError: If the license was deactivated
            NotActivatedOnDeviceError: If the device holds no active binding
        """
        fingerprint = DeviceFingerprint(command.device_id, command.machine_id)
        license = await find_license(self.license_resolver, command.license_key)

        async with self.transaction():
            result = await self.state_machine.deactivate(license, fingerprint)

        await event_bus.publish(
            LicenseDeactivatedOnDevice(
                activation_id=result.activation.id,
                license_id=license.id,
                device_id=fingerprint.device_id,
                machine_id=fingerprint.machine_id,
                cooldown_ends_at=result.cooldown_ends_at,
            )
        )

        try:
            purged = await self.state_machine.cooldowns.purge_expired(self.state_machine.clock())
            if purged:
                logger.debug("Purged %d expired cooldowns", purged)
        except StoreUnavailableError:
            # The deactivation is committed; the next purge picks these up.
            logger.warning("Opportunistic cooldown purge failed", exc_info=True)

        return DeactivationResponseDTO(
            success=True,
            message="License key deactivated successfully",
            license_id=license.id,
            cooldown_ends_at=result.cooldown_ends_at,
        )
