"""
ValidateLicenseHandler.

Handler for classifying a license for a device.
"""

from typing import AsyncContextManager, Callable

from activations.application.dto.activation_dto import ValidationResponseDTO
from activations.application.queries.validate_license import ValidateLicenseQuery
from activations.domain.events import DeviceReconciled
from activations.domain.services import ActivationStateMachine, ValidationResult
from core.domain.value_objects import DeviceFingerprint, ValidationVerdict
from core.infrastructure.database import async_transaction
from core.infrastructure.events import event_bus
from licenses.application.services.license_resolution import resolve_license
from licenses.domain.services import LicenseResolver


class ValidateLicenseHandler:
    """Handler for ValidateLicenseQuery."""

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

    async def handle(self, query: ValidateLicenseQuery) -> ValidationResponseDTO:
        """
        Handle validate license query.

        Args:
            query: ValidateLicenseQuery

        Returns:
            ValidationResponseDTO

        Raises:
            LicenseNotFoundError: If the key resolves to no license
            LicenseDeactivatedError: If the license was deactivated
        """
        fingerprint = DeviceFingerprint(query.device_id, query.machine_id)
        license = await resolve_license(
            self.license_resolver,
            query.license_key,
            caller_verified=query.caller_verified,
        )

        async with self.transaction():
            result = await self.state_machine.validate(license, fingerprint)

        if result.reconciled:
            await event_bus.publish(
                DeviceReconciled(
                    activation_id=result.activation.id,
                    license_id=license.id,
                    previous_device_id=result.previous_device_id,
                    device_id=fingerprint.device_id,
                    machine_id=fingerprint.machine_id,
                )
            )

        return self._to_dto(result)

    @staticmethod
    def _to_dto(result: ValidationResult) -> ValidationResponseDTO:
        verdict = result.verdict
        if verdict == ValidationVerdict.ACTIVATED_HERE:
            return ValidationResponseDTO(
                valid=True,
                activated=True,
                verdict=verdict.value,
                reconciled=result.reconciled,
            )
        if verdict == ValidationVerdict.ACTIVATED_ELSEWHERE:
            return ValidationResponseDTO(
                valid=True,
                activated=False,
                verdict=verdict.value,
                message="This key is already activated on another device. Please deactivate it first.",
            )
        if verdict == ValidationVerdict.IN_COOLDOWN:
            return ValidationResponseDTO(
                valid=True,
                activated=False,
                verdict=verdict.value,
                message=(
                    "This key is in a cooldown period. "
                    f"Please try again in {result.hours_remaining} hours."
                ),
                cooldown=True,
                cooldown_ends_at=result.cooldown.ends_at,
                hours_remaining=result.hours_remaining,
            )
        return ValidationResponseDTO(valid=True, activated=False, verdict=verdict.value)
