"""
Unit tests for ActivationStateMachine and CooldownTracker domain services.
"""

from datetime import timedelta

import pytest

from activations.domain.activation import Activation
from activations.domain.policy import ActivationPolicy
from activations.domain.services import (
    OUTCOME_ACTIVATED,
    OUTCOME_ALREADY_ACTIVATED,
    OUTCOME_REACTIVATED,
    ActivationStateMachine,
    CooldownTracker,
)
from core.domain.exceptions import (
    AlreadyActivatedElsewhereError,
    InCooldownError,
    LicenseDeactivatedError,
    NotActivatedOnDeviceError,
)
from core.domain.value_objects import ActivationState, DeviceFingerprint, ValidationVerdict


def let_concurrent_request_win(activation_repository, license_id, fingerprint):
    """Make the next save find a row another request committed in the meantime."""
    original_save = activation_repository.save
    winner = Activation.create(license_id, fingerprint.device_id, fingerprint.machine_id)

    async def save(activation):
        activation_repository.save = original_save
        activation_repository.activations[winner.id] = winner
        return await original_save(activation)

    activation_repository.save = save
    return winner


@pytest.mark.asyncio
class TestActivate:
    """Tests for activation decisions."""

    async def test_first_activation(self, state_machine, sample_license, device_a):
        result = await state_machine.activate(sample_license, device_a)

        assert result.outcome == OUTCOME_ACTIVATED
        assert result.changed is True
        assert result.activation.is_bound_to(device_a)
        assert result.activation.is_active

    async def test_same_device_is_idempotent(self, state_machine, sample_license, device_a):
        first = await state_machine.activate(sample_license, device_a)
        second = await state_machine.activate(sample_license, device_a)

        assert second.outcome == OUTCOME_ALREADY_ACTIVATED
        assert second.changed is False
        assert second.activation.id == first.activation.id

    async def test_other_device_is_refused(self, state_machine, sample_license, device_a, device_b):
        await state_machine.activate(sample_license, device_a)

        with pytest.raises(AlreadyActivatedElsewhereError):
            await state_machine.activate(sample_license, device_b)

    async def test_concurrent_insert_for_same_device(
        self, state_machine, activation_repository, sample_license, device_a
    ):
        winner = let_concurrent_request_win(activation_repository, sample_license.id, device_a)

        result = await state_machine.activate(sample_license, device_a)

        assert result.outcome == OUTCOME_ALREADY_ACTIVATED
        assert result.activation.id == winner.id
        assert len(await activation_repository.find_all_by_license(sample_license.id)) == 1

    async def test_concurrent_insert_for_other_device(
        self, state_machine, activation_repository, sample_license, device_a, device_b
    ):
        winner = let_concurrent_request_win(activation_repository, sample_license.id, device_b)

        with pytest.raises(AlreadyActivatedElsewhereError):
            await state_machine.activate(sample_license, device_a)

        assert await activation_repository.find_active_by_license(sample_license.id) == winner
        assert len(await activation_repository.find_all_by_license(sample_license.id)) == 1

    async def test_same_device_other_machine_is_refused(self, state_machine, sample_license, device_a):
        await state_machine.activate(sample_license, device_a)

        with pytest.raises(AlreadyActivatedElsewhereError):
            await state_machine.activate(sample_license, DeviceFingerprint("device-a", "machine-z"))

    async def test_cooldown_blocks_new_device(
        self, state_machine, sample_license, device_a, device_b, clock
    ):
        await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)
        clock.advance(minutes=30)

        with pytest.raises(InCooldownError) as exc_info:
            await state_machine.activate(sample_license, device_b)

        assert exc_info.value.hours_remaining == 2
        assert exc_info.value.details()["cooldown"] is True
        assert exc_info.value.details()["hoursRemaining"] == 2

    async def test_same_device_bypasses_its_cooldown(
        self, state_machine, sample_license, device_a, cooldown_repository, clock
    ):
        first = await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)
        clock.advance(minutes=10)

        result = await state_machine.activate(sample_license, device_a)

        assert result.outcome == OUTCOME_REACTIVATED
        assert result.activation.id == first.activation.id
        assert result.cooldowns_cleared == 1
        assert await cooldown_repository.find_live(sample_license.id, clock()) is None

    async def test_new_device_after_cooldown(
        self, state_machine, sample_license, device_a, device_b, clock
    ):
        await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)
        clock.advance(hours=2)

        result = await state_machine.activate(sample_license, device_b)

        assert result.outcome == OUTCOME_ACTIVATED
        assert result.activation.is_bound_to(device_b)

    async def test_returning_device_refused_while_other_is_active(
        self, state_machine, sample_license, device_a, device_b, clock
    ):
        await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)
        clock.advance(hours=3)
        await state_machine.activate(sample_license, device_b)

        with pytest.raises(AlreadyActivatedElsewhereError):
            await state_machine.activate(sample_license, device_a)

    async def test_deactivated_license_is_refused(self, state_machine, sample_license, device_a):
        with pytest.raises(LicenseDeactivatedError):
            await state_machine.activate(sample_license.deactivate(), device_a)

    async def test_deactivated_license_refused_even_when_active_here(
        self, state_machine, sample_license, device_a
    ):
        await state_machine.activate(sample_license, device_a)

        with pytest.raises(LicenseDeactivatedError):
            await state_machine.activate(sample_license.deactivate(), device_a)


@pytest.mark.asyncio
class TestDeactivate:
    """Tests for deactivation decisions."""

    async def test_deactivate_starts_cooldown(
        self, state_machine, sample_license, device_a, clock
    ):
        await state_machine.activate(sample_license, device_a)

        result = await state_machine.deactivate(sample_license, device_a)

        assert result.activation.is_active is False
        assert result.activation.deactivated_at == clock()
        assert result.cooldown_ends_at == clock() + timedelta(hours=2)

    async def test_deactivate_unknown_device(self, state_machine, sample_license, device_a, device_b):
        await state_machine.activate(sample_license, device_a)

        with pytest.raises(NotActivatedOnDeviceError):
            await state_machine.deactivate(sample_license, device_b)

    async def test_deactivate_twice(self, state_machine, sample_license, device_a):
        await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)

        with pytest.raises(NotActivatedOnDeviceError):
            await state_machine.deactivate(sample_license, device_a)

    async def test_deactivate_never_activated(self, state_machine, sample_license, device_a):
        with pytest.raises(NotActivatedOnDeviceError):
            await state_machine.deactivate(sample_license, device_a)

    async def test_deactivated_license_is_refused(self, state_machine, sample_license, device_a):
        await state_machine.activate(sample_license, device_a)

        with pytest.raises(LicenseDeactivatedError):
            await state_machine.deactivate(sample_license.deactivate(), device_a)

    async def test_cooldown_uses_policy_window(
        self, activation_repository, cooldown_repository, sample_license, device_a, clock
    ):
        policy = ActivationPolicy(cooldown_window=timedelta(minutes=15))
        machine = ActivationStateMachine(
            activation_repository,
            CooldownTracker(cooldown_repository, policy.cooldown_window),
            policy=policy,
            clock=clock,
        )
        await machine.activate(sample_license, device_a)

        result = await machine.deactivate(sample_license, device_a)

        assert result.cooldown_ends_at == clock() + timedelta(minutes=15)


@pytest.mark.asyncio
class TestValidate:
    """Tests for validation verdicts."""

    async def test_available(self, state_machine, sample_license, device_a):
        result = await state_machine.validate(sample_license, device_a)
        assert result.verdict == ValidationVerdict.AVAILABLE

    async def test_activated_here(self, state_machine, sample_license, device_a):
        await state_machine.activate(sample_license, device_a)

        result = await state_machine.validate(sample_license, device_a)

        assert result.verdict == ValidationVerdict.ACTIVATED_HERE
        assert result.reconciled is False

    async def test_activated_elsewhere(self, state_machine, sample_license, device_a, device_b):
        await state_machine.activate(sample_license, device_a)

        result = await state_machine.validate(sample_license, device_b)

        assert result.verdict == ValidationVerdict.ACTIVATED_ELSEWHERE

    async def test_in_cooldown(self, state_machine, sample_license, device_a, device_b, clock):
        await state_machine.activate(sample_license, device_a)
        await state_machine.deactivate(sample_license, device_a)
        clock.advance(minutes=61)

        result = await state_machine.validate(sample_license, device_b)

        assert result.verdict == ValidationVerdict.IN_COOLDOWN
        assert result.hours_remaining == 1
        assert result.cooldown.ends_at == clock() + timedelta(minutes=59)

    async def test_validate_does_not_write(
        self, state_machine, sample_license, device_a, device_b, activation_repository
    ):
        await state_machine.activate(sample_license, device_a)
        before = dict(activation_repository.activations)

        await state_machine.validate(sample_license, device_b)
        await state_machine.validate(sample_license, device_a)

        assert activation_repository.activations == before

    async def test_machine_id_reconciliation(
        self, state_machine, sample_license, device_a, activation_repository
    ):
        """A new device id on the same machine takes over the binding."""
        first = await state_machine.activate(sample_license, device_a)
        renamed = DeviceFingerprint("device-a-reinstalled", device_a.machine_id)

        result = await state_machine.validate(sample_license, renamed)

        assert result.verdict == ValidationVerdict.ACTIVATED_HERE
        assert result.reconciled is True
        assert result.previous_device_id == "device-a"
        stored = await activation_repository.find_by_id(first.activation.id)
        assert stored.device_id == "device-a-reinstalled"
        assert stored.is_active is True

    async def test_reconciliation_disabled(
        self, activation_repository, cooldown_tracker, sample_license, device_a, clock
    ):
        machine = ActivationStateMachine(
            activation_repository,
            cooldown_tracker,
            policy=ActivationPolicy(reconcile_machine_id=False),
            clock=clock,
        )
        await machine.activate(sample_license, device_a)

        result = await machine.validate(
            sample_license, DeviceFingerprint("device-a-reinstalled", device_a.machine_id)
        )

        assert result.verdict == ValidationVerdict.ACTIVATED_ELSEWHERE

    async def test_no_reconciliation_when_pair_has_history(
        self, state_machine, sample_license, device_a, clock
    ):
        """An existing row for the caller's exact pair blocks reconciliation."""
        other = DeviceFingerprint("device-old", device_a.machine_id)
        await state_machine.activate(sample_license, other)
        await state_machine.deactivate(sample_license, other)
        clock.advance(hours=3)
        await state_machine.activate(sample_license, device_a)

        result = await state_machine.validate(sample_license, other)

        assert result.verdict == ValidationVerdict.ACTIVATED_ELSEWHERE
        assert result.reconciled is False

    async def test_deactivated_license(self, state_machine, sample_license, device_a):
        with pytest.raises(LicenseDeactivatedError):
            await state_machine.validate(sample_license.deactivate(), device_a)


@pytest.mark.asyncio
class TestSnapshot:
    """Tests for license state snapshots."""

    async def test_states(self, state_machine, sample_license, device_a, clock):
        assert (await state_machine.snapshot(sample_license)).state == ActivationState.UNACTIVATED

        await state_machine.activate(sample_license, device_a)
        snapshot = await state_machine.snapshot(sample_license)
        assert snapshot.state == ActivationState.ACTIVATED
        assert snapshot.activation.is_bound_to(device_a)

        await state_machine.deactivate(sample_license, device_a)
        snapshot = await state_machine.snapshot(sample_license)
        assert snapshot.state == ActivationState.COOLDOWN

        clock.advance(hours=2)
        assert (await state_machine.snapshot(sample_license)).state == ActivationState.UNACTIVATED


@pytest.mark.asyncio
class TestLicenseLifecycle:
    """End-to-end walk through one license's life."""

    async def test_walkthrough(self, state_machine, sample_license, clock):
        """ABCDE-12345 moves between two laptops."""
        laptop = DeviceFingerprint("laptop", "hw-1")
        desktop = DeviceFingerprint("desktop", "hw-2")

        assert (await state_machine.activate(sample_license, laptop)).outcome == OUTCOME_ACTIVATED
        with pytest.raises(AlreadyActivatedElsewhereError):
            await state_machine.activate(sample_license, desktop)

        await state_machine.deactivate(sample_license, laptop)
        clock.advance(minutes=20)
        with pytest.raises(InCooldownError) as exc_info:
            await state_machine.activate(sample_license, desktop)
        assert exc_info.value.hours_remaining == 2

        clock.advance(hours=1, minutes=40)
        assert (await state_machine.activate(sample_license, desktop)).outcome == OUTCOME_ACTIVATED

        verdict = await state_machine.validate(sample_license, laptop)
        assert verdict.verdict == ValidationVerdict.ACTIVATED_ELSEWHERE


@pytest.mark.asyncio
class TestCooldownTracker:
    """Tests for CooldownTracker."""

    async def test_purge_expired(self, cooldown_tracker, cooldown_repository, sample_license, clock):
        ended = await cooldown_tracker.start(sample_license.id, clock() - timedelta(hours=5))
        live = await cooldown_tracker.start(sample_license.id, clock())
        cleared = await cooldown_repository.save(
            (await cooldown_tracker.start(sample_license.id, clock())).clear()
        )

        assert await cooldown_tracker.purge_expired(clock(), dry_run=True) == 2
        assert len(cooldown_repository.cooldowns) == 3

        assert await cooldown_tracker.purge_expired(clock()) == 2
        assert set(cooldown_repository.cooldowns) == {live.id}
        assert ended.id not in cooldown_repository.cooldowns
        assert cleared.id not in cooldown_repository.cooldowns

    async def test_live_for_and_clear(self, cooldown_tracker, sample_license, clock):
        await cooldown_tracker.start(sample_license.id, clock())

        assert await cooldown_tracker.live_for(sample_license.id, clock()) is not None
        assert await cooldown_tracker.clear(sample_license.id) == 1
        assert await cooldown_tracker.live_for(sample_license.id, clock()) is None


def test_tracker_hours_remaining(clock):
    assert CooldownTracker.hours_remaining(clock() + timedelta(minutes=90), clock()) == 2
