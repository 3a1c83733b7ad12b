"""
Activation domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity: the cooldown tracker and the activation
state machine that decides every activate/deactivate/validate request.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from activations.domain.activation import Activation
from activations.domain.cooldown import CooldownPeriod, hours_remaining
from activations.domain.policy import ActivationPolicy
from activations.ports.activation_repository import ActivationRepository
from activations.ports.cooldown_repository import CooldownRepository
from core.domain.exceptions import (
    AlreadyActivatedElsewhereError,
    InCooldownError,
    LicenseDeactivatedError,
    NotActivatedOnDeviceError,
)
from core.domain.value_objects import ActivationState, DeviceFingerprint, ValidationVerdict
from licenses.domain.license import License

logger = logging.getLogger(__name__)

OUTCOME_ACTIVATED = "activated"
OUTCOME_REACTIVATED = "reactivated"
OUTCOME_ALREADY_ACTIVATED = "already_activated"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ActivationResult:
    """Outcome of a successful activate call."""

    activation: Activation
    outcome: str
    cooldowns_cleared: int = 0

    @property
    def changed(self) -> bool:
        return self.outcome != OUTCOME_ALREADY_ACTIVATED


@dataclass(frozen=True)
class DeactivationResult:
    """Outcome of a successful deactivate call."""

    activation: Activation
    cooldown: CooldownPeriod

    @property
    def cooldown_ends_at(self) -> datetime:
        return self.cooldown.ends_at


@dataclass(frozen=True)
class ValidationResult:
    """Read-only classification of a license for one device."""

    verdict: ValidationVerdict
    activation: Optional[Activation] = None
    cooldown: Optional[CooldownPeriod] = None
    hours_remaining: int = 0
    reconciled: bool = False
    previous_device_id: Optional[str] = None


@dataclass(frozen=True)
class LicenseSnapshot:
    """Current state of a license."""

    state: ActivationState
    activation: Optional[Activation] = None
    cooldown: Optional[CooldownPeriod] = None


class CooldownTracker:
    """Domain service owning the post-deactivation lockout."""

    def __init__(
        self,
        repository: CooldownRepository,
        window: timedelta,
    ):
        """
        Initialize tracker.

        Args:
            repository: Cooldown repository
            window: Length of every cooldown
        """
        self.repository = repository
        self.window = window

    @staticmethod
    def hours_remaining(ends_at: datetime, now: datetime) -> int:
        """Whole hours left, rounded up, never negative."""
        return hours_remaining(ends_at, now)

    async def start(self, license_id: uuid.UUID, now: datetime) -> CooldownPeriod:
        """Open a new cooldown for a license."""
        cooldown = CooldownPeriod.start(license_id, now=now, window=self.window)
        return await self.repository.save(cooldown)

    async def live_for(self, license_id: uuid.UUID, now: datetime) -> Optional[CooldownPeriod]:
        """Return the live cooldown of a license, if any."""
        return await self.repository.find_live(license_id, now)

    async def clear(self, license_id: uuid.UUID) -> int:
        """Lift every active cooldown of a license."""
        return await self.repository.clear_for_license(license_id)

    async def purge_expired(self, now: datetime, dry_run: bool = False) -> int:
        """
        Remove expired or inactive cooldowns.

        Args:
            now: Current time
            dry_run: Only count what would be removed

        Returns:
            Number of cooldowns removed (or removable)
        """
        if dry_run:
            return await self.repository.count_expired(now)
        return await self.repository.delete_expired(now)


class ActivationStateMachine:
    """
    Decide activation requests for a single license.

    Every operation refuses licenses that were deactivated administratively,
    whatever their activation or cooldown state.
    """

    def __init__(
        self,
        activation_repository: ActivationRepository,
        cooldown_tracker: CooldownTracker,
        policy: Optional[ActivationPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize state machine.

        Args:
            activation_repository: Activation repository
            cooldown_tracker: Cooldown tracker
            policy: Activation policy (defaults to built-in values)
            clock: Source of the current time
        """
        self.activations = activation_repository
        self.cooldowns = cooldown_tracker
        self.policy = policy or ActivationPolicy()
        self.clock = clock

    @staticmethod
    def _ensure_license_active(license: License) -> None:
        if not license.is_active:
            raise LicenseDeactivatedError()

    async def snapshot(self, license: License) -> LicenseSnapshot:
        """
        Report the state of a license.

        Args:
            license: License entity

        Returns:
            LicenseSnapshot
        """
        now = self.clock()
        activation = await self.activations.find_active_by_license(license.id)
        if activation:
            return LicenseSnapshot(ActivationState.ACTIVATED, activation=activation)
        cooldown = await self.cooldowns.live_for(license.id, now)
        if cooldown:
            return LicenseSnapshot(ActivationState.COOLDOWN, cooldown=cooldown)
        return LicenseSnapshot(ActivationState.UNACTIVATED)

    async def activate(self, license: License, fingerprint: DeviceFingerprint) -> ActivationResult:
        """
        Bind a license to a device.

        Args:
            license: License entity
            fingerprint: Device/machine pair asking for the license

        Returns:
            ActivationResult

        Raises:
            LicenseDeactivatedError: If the license is deactivated
            AlreadyActivatedElsewhereError: If another device holds the license
            InCooldownError: If a live cooldown blocks a new device
        """
        self._ensure_license_active(license)
        now = self.clock()

        existing = await self.activations.find_by_fingerprint(license.id, fingerprint)
        if existing and existing.is_active:
            return ActivationResult(existing, OUTCOME_ALREADY_ACTIVATED)

        current = await self.activations.find_active_by_license(license.id)
        if current is not None:
            raise AlreadyActivatedElsewhereError()

        if existing:
            # Same device coming back bypasses its own cooldown
            activation = await self.activations.save(existing.reactivate(now))
            cleared = await self.cooldowns.clear(license.id)
            return ActivationResult(activation, OUTCOME_REACTIVATED, cooldowns_cleared=cleared)

        cooldown = await self.cooldowns.live_for(license.id, now)
        if cooldown is not None:
            raise InCooldownError(cooldown.hours_remaining(now), cooldown.ends_at)

        activation = Activation.create(
            license_id=license.id,
            device_id=fingerprint.device_id,
            machine_id=fingerprint.machine_id,
            now=now,
        )
        try:
            activation = await self.activations.save(activation)
        except AlreadyActivatedElsewhereError:
            # A concurrent request may have bound this same device first
            winner = await self.activations.find_by_fingerprint(license.id, fingerprint)
            if winner is None or not winner.is_active:
                raise
            logger.info(
                "Concurrent activation of license %s on the same device",
                license.id,
                extra={"activation_id": str(winner.id)},
            )
            return ActivationResult(winner, OUTCOME_ALREADY_ACTIVATED)
        return ActivationResult(activation, OUTCOME_ACTIVATED)

    async def deactivate(self, license: License, fingerprint: DeviceFingerprint) -> DeactivationResult:
        """
        Release a device binding and start a cooldown.

        Raises:
            LicenseDeactivatedError: If the license is deactivated
            NotActivatedOnDeviceError: If the device holds no active binding
        """
        self._ensure_license_active(license)
        now = self.clock()

        existing = await self.activations.find_by_fingerprint(license.id, fingerprint)
        if existing is None or not existing.is_active:
            raise NotActivatedOnDeviceError()

        activation = await self.activations.save(existing.deactivate(now))
        cooldown = await self.cooldowns.start(license.id, now)
        return DeactivationResult(activation, cooldown)

    async def validate(self, license: License, fingerprint: DeviceFingerprint) -> ValidationResult:
        """
        Classify a license for a device without changing its state.

        The one write allowed here is machine-id reconciliation: when the
        active binding has the caller's machine id under another device id,
        and the caller's exact pair has no row yet, the binding adopts the
        caller's device id.

        Raises:
            LicenseDeactivatedError: If the license is deactivated
        """
        self._ensure_license_active(license)
        now = self.clock()

        current = await self.activations.find_active_by_license(license.id)
        if current is not None:
            if current.is_bound_to(fingerprint):
                return ValidationResult(ValidationVerdict.ACTIVATED_HERE, activation=current)
            if self.policy.reconcile_machine_id and current.machine_id == fingerprint.machine_id:
                reconciled = await self._reconcile(current, fingerprint)
                if reconciled is not None:
                    return reconciled
            return ValidationResult(ValidationVerdict.ACTIVATED_ELSEWHERE, activation=current)

        cooldown = await self.cooldowns.live_for(license.id, now)
        if cooldown is not None:
            return ValidationResult(
                ValidationVerdict.IN_COOLDOWN,
                cooldown=cooldown,
                hours_remaining=cooldown.hours_remaining(now),
            )
        return ValidationResult(ValidationVerdict.AVAILABLE)

    async def _reconcile(
        self, current: Activation, fingerprint: DeviceFingerprint
    ) -> Optional[ValidationResult]:
        if await self.activations.find_by_fingerprint(current.license_id, fingerprint) is not None:
            return None
        updated = await self.activations.save(current.rebind_device(fingerprint.device_id))
        logger.info(
            "Reconciled activation %s to device %s",
            updated.id,
            fingerprint.device_id,
            extra={"license_id": str(updated.license_id), "machine_id": fingerprint.machine_id},
        )
        return ValidationResult(
            ValidationVerdict.ACTIVATED_HERE,
            activation=updated,
            reconciled=True,
            previous_device_id=current.device_id,
        )
