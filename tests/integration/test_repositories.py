"""
Integration tests for repository implementations.
"""

import uuid
from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from django.db import IntegrityError, transaction
from django.utils import timezone

from activations.domain.activation import Activation
from activations.domain.cooldown import CooldownPeriod
from activations.domain.policy import ActivationPolicy
from activations.domain.services import (
    OUTCOME_ALREADY_ACTIVATED,
    ActivationStateMachine,
    CooldownTracker,
)
from activations.infrastructure.models import Activation as ActivationModel
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.repositories.django_cooldown_repository import (
    DjangoCooldownRepository,
)
from core.domain.exceptions import AlreadyActivatedElsewhereError, LicenseConflictError
from core.domain.value_objects import DeviceFingerprint
from licenses.domain.license import License


@pytest.fixture
def stored_license(db, django_license_repository):
    """Fixture for a License saved in database."""
    license = License.create(
        email="buyer@example.com",
        external_key="ABCDE-12345",
        purchase_id="sale-1",
    )
    return async_to_sync(django_license_repository.save)(license)


@pytest.mark.django_db
@pytest.mark.integration
class TestLicenseRepository:
    """Integration tests for LicenseRepository."""

    def test_save_and_find(self, django_license_repository, stored_license):
        """Test saving and finding a license."""
        found = async_to_sync(django_license_repository.find_by_id)(stored_license.id)

        assert found is not None
        assert found.external_key == "ABCDE-12345"
        assert str(found.email) == "buyer@example.com"
        assert found.is_active is True

    def test_find_not_found(self, django_license_repository):
        """Test finding non-existent license."""
        assert async_to_sync(django_license_repository.find_by_id)(uuid.uuid4()) is None

    def test_exact_lookups(self, django_license_repository, stored_license):
        repo = django_license_repository
        assert async_to_sync(repo.find_by_external_key)("ABCDE-12345").id == stored_license.id
        assert async_to_sync(repo.find_by_external_key)("abcde-12345") is None
        assert async_to_sync(repo.find_by_purchase_id)("sale-1").id == stored_license.id
        assert async_to_sync(repo.find_by_key)("ABCDE-12345") is None

    def test_normalized_lookup(self, django_license_repository, stored_license):
        found = async_to_sync(django_license_repository.find_active_by_normalized_key)("ABCDE12345")
        assert found.id == stored_license.id

    def test_normalized_lookup_matches_local_key(self, django_license_repository):
        license = License.create(email="a@example.com", key="FFFFF-00000")
        async_to_sync(django_license_repository.save)(license)

        found = async_to_sync(django_license_repository.find_active_by_normalized_key)("FFFFF00000")
        assert found.id == license.id

    def test_normalized_lookup_skips_inactive(self, django_license_repository, stored_license):
        async_to_sync(django_license_repository.save)(stored_license.deactivate())

        found = async_to_sync(django_license_repository.find_active_by_normalized_key)("ABCDE12345")
        assert found is None

    def test_update(self, django_license_repository, stored_license):
        updated = stored_license.with_external_key("NEW-KEY").with_local_key("LOCAL-KEY")
        async_to_sync(django_license_repository.save)(updated)

        found = async_to_sync(django_license_repository.find_by_id)(stored_license.id)
        assert found.external_key == "NEW-KEY"
        assert found.key == "LOCAL-KEY"

    def test_duplicate_external_key(self, django_license_repository, stored_license):
        duplicate = License.create(email="other@example.com", external_key="ABCDE-12345")

        with pytest.raises(LicenseConflictError):
            async_to_sync(django_license_repository.save)(duplicate)

    def test_duplicate_purchase_id(self, django_license_repository, stored_license):
        duplicate = License.create(email="other@example.com", external_key="OTHER", purchase_id="sale-1")

        with pytest.raises(LicenseConflictError):
            async_to_sync(django_license_repository.save)(duplicate)


@pytest.mark.django_db
@pytest.mark.integration
class TestActivationRepository:
    """Integration tests for ActivationRepository."""

    def test_save_and_find(self, django_activation_repository, stored_license):
        repo = django_activation_repository
        activation = Activation.create(stored_license.id, "device-a", "machine-a")
        async_to_sync(repo.save)(activation)

        assert async_to_sync(repo.find_by_id)(activation.id).device_id == "device-a"
        assert async_to_sync(repo.find_active_by_license)(stored_license.id).id == activation.id
        found = async_to_sync(repo.find_by_fingerprint)(
            stored_license.id, DeviceFingerprint("device-a", "machine-a")
        )
        assert found.id == activation.id
        missing = async_to_sync(repo.find_by_fingerprint)(
            stored_license.id, DeviceFingerprint("device-a", "machine-b")
        )
        assert missing is None

    def test_second_active_activation_is_refused(self, django_activation_repository, stored_license):
        """Only one activation per license may be active, whoever writes first."""
        repo = django_activation_repository
        async_to_sync(repo.save)(Activation.create(stored_license.id, "device-a", "machine-a"))

        with pytest.raises(AlreadyActivatedElsewhereError):
            async_to_sync(repo.save)(Activation.create(stored_license.id, "device-b", "machine-b"))

        assert len(async_to_sync(repo.find_all_by_license)(stored_license.id)) == 1

    def test_database_enforces_single_active_row(self, stored_license):
        ActivationModel.objects.create(license_id=stored_license.id, device_id="a", machine_id="a")

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                ActivationModel.objects.create(license_id=stored_license.id, device_id="b", machine_id="b")

    def test_inactive_rows_may_coexist(self, django_activation_repository, stored_license):
        repo = django_activation_repository
        first = Activation.create(stored_license.id, "device-a", "machine-a")
        async_to_sync(repo.save)(first.deactivate())
        async_to_sync(repo.save)(Activation.create(stored_license.id, "device-b", "machine-b"))

        assert len(async_to_sync(repo.find_all_by_license)(stored_license.id)) == 2

    def test_delete_inactive_before(self, django_activation_repository, stored_license):
        repo = django_activation_repository
        now = timezone.now()
        old = Activation.create(stored_license.id, "old", "old", now=now - timedelta(days=200))
        async_to_sync(repo.save)(old.deactivate(now - timedelta(days=100)))
        recent = Activation.create(stored_license.id, "recent", "recent", now=now - timedelta(days=2))
        async_to_sync(repo.save)(recent.deactivate(now - timedelta(days=1)))

        cutoff = now - timedelta(days=90)
        assert async_to_sync(repo.count_inactive_before)(cutoff) == 1
        assert async_to_sync(repo.delete_inactive_before)(cutoff) == 1
        assert async_to_sync(repo.find_by_id)(old.id) is None
        assert async_to_sync(repo.find_by_id)(recent.id) is not None


@pytest.mark.django_db
@pytest.mark.integration
class TestCooldownRepository:
    """Integration tests for CooldownRepository."""

    def test_find_live_and_clear(self, django_cooldown_repository, stored_license):
        repo = django_cooldown_repository
        now = timezone.now()
        cooldown = CooldownPeriod.start(stored_license.id, now=now, window=timedelta(hours=2))
        async_to_sync(repo.save)(cooldown)

        assert async_to_sync(repo.find_live)(stored_license.id, now).id == cooldown.id
        assert async_to_sync(repo.find_live)(stored_license.id, now + timedelta(hours=2)) is None

        assert async_to_sync(repo.clear_for_license)(stored_license.id) == 1
        assert async_to_sync(repo.find_live)(stored_license.id, now) is None

    def test_delete_expired(self, django_cooldown_repository, stored_license):
        repo = django_cooldown_repository
        now = timezone.now()
        window = timedelta(hours=2)
        async_to_sync(repo.save)(CooldownPeriod.start(stored_license.id, now=now - timedelta(hours=5), window=window))
        async_to_sync(repo.save)(CooldownPeriod.start(stored_license.id, now=now, window=window).clear())
        live = CooldownPeriod.start(stored_license.id, now=now, window=window)
        async_to_sync(repo.save)(live)

        assert async_to_sync(repo.count_expired)(now) == 2
        assert async_to_sync(repo.delete_expired)(now) == 2
        assert async_to_sync(repo.find_live)(stored_license.id, now).id == live.id


class StaleReadActivationRepository(DjangoActivationRepository):
    """Answers the first lookups like a request that read before a concurrent commit."""

    def __init__(self, stale_reads=2):
        self.stale_reads = stale_reads

    def _read_is_stale(self):
        if self.stale_reads:
            self.stale_reads -= 1
            return True
        return False

    async def find_by_fingerprint(self, license_id, fingerprint):
        if self._read_is_stale():
            return None
        return await super().find_by_fingerprint(license_id, fingerprint)

    async def find_active_by_license(self, license_id):
        if self._read_is_stale():
            return None
        return await super().find_active_by_license(license_id)


def build_state_machine(activation_repository):
    policy = ActivationPolicy()
    return ActivationStateMachine(
        activation_repository,
        CooldownTracker(DjangoCooldownRepository(), policy.cooldown_window),
        policy=policy,
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestConcurrentActivation:
    """Activations racing past the state machine's reads are settled by the database."""

    def test_other_device_loses_the_race(self, stored_license):
        async_to_sync(build_state_machine(DjangoActivationRepository()).activate)(
            stored_license, DeviceFingerprint("device-a", "machine-a")
        )
        late = build_state_machine(StaleReadActivationRepository())

        with pytest.raises(AlreadyActivatedElsewhereError):
            async_to_sync(late.activate)(stored_license, DeviceFingerprint("device-b", "machine-b"))

        active = ActivationModel.objects.filter(license_id=stored_license.id, is_active=True)
        assert list(active.values_list("device_id", flat=True)) == ["device-a"]

    def test_same_device_retry_is_idempotent(self, stored_license):
        device = DeviceFingerprint("device-a", "machine-a")
        first = async_to_sync(build_state_machine(DjangoActivationRepository()).activate)(
            stored_license, device
        )
        late = build_state_machine(StaleReadActivationRepository())

        result = async_to_sync(late.activate)(stored_license, device)

        assert result.outcome == OUTCOME_ALREADY_ACTIVATED
        assert result.activation.id == first.activation.id
        assert ActivationModel.objects.filter(license_id=stored_license.id).count() == 1
