"""
ActivateLicenseHandler.

Handler for binding a license to a device.
"""

import logging
from typing import AsyncContextManager, Callable

from activations.application.commands.activate_license import ActivateLicenseCommand
from activations.application.dto.activation_dto import ActivationResponseDTO
from activations.domain.events import ActivationDenied, LicenseActivated
from activations.domain.services import (
    OUTCOME_ACTIVATED,
    OUTCOME_ALREADY_ACTIVATED,
    OUTCOME_REACTIVATED,
    ActivationStateMachine,
)
from core.domain.exceptions import ActivationException, LicenseDeactivatedError
from core.domain.value_objects import DeviceFingerprint
from core.infrastructure.database import async_transaction
from core.infrastructure.events import event_bus
from licenses.application.services.license_resolution import resolve_license
from licenses.domain.services import LicenseResolver

logger = logging.getLogger(__name__)

MESSAGES = {
    OUTCOME_ACTIVATED: "License key activated successfully",
    OUTCOME_REACTIVATED: "License key reactivated successfully",
    OUTCOME_ALREADY_ACTIVATED: "License key is already activated on this device",
}


class ActivateLicenseHandler:
    """Handler for ActivateLicenseCommand."""

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

    async def handle(self, command: ActivateLicenseCommand) -> ActivationResponseDTO:
        """
        Handle activate license command.

        Args:
            command: ActivateLicenseCommand

        Returns:
            ActivationResponseDTO

        Raises:
            LicenseNotFoundError: If the key resolves to no license
            LicenseDeactivatedError: If the license was deactivated
            AlreadyActivatedElsewhereError: If another device holds the license
            InCooldownError: If a live cooldown blocks this device
        """
        fingerprint = DeviceFingerprint(command.device_id, command.machine_id)
        license = await resolve_license(
            self.license_resolver,
            command.license_key,
            caller_verified=command.caller_verified,
        )

        try:
            async with self.transaction():
                result = await self.state_machine.activate(license, fingerprint)
        except (ActivationException, LicenseDeactivatedError) as e:
            await event_bus.publish(
                ActivationDenied(
                    license_id=license.id,
                    device_id=fingerprint.device_id,
                    machine_id=fingerprint.machine_id,
                    reason=e.code,
                )
            )
            raise

        if result.changed:
            await event_bus.publish(
                LicenseActivated(
                    activation_id=result.activation.id,
                    license_id=license.id,
                    device_id=fingerprint.device_id,
                    machine_id=fingerprint.machine_id,
                    reactivated=result.outcome == OUTCOME_REACTIVATED,
                )
            )

        return ActivationResponseDTO(
            success=True,
            message=MESSAGES[result.outcome],
            outcome=result.outcome,
            license_id=license.id,
            activation_id=result.activation.id,
        )
