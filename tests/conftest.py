"""
Pytest configuration and shared fixtures.
"""

import contextlib
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from activations.domain.activation import Activation
from activations.domain.cooldown import CooldownPeriod
from activations.domain.policy import ActivationPolicy
from activations.domain.services import ActivationStateMachine, CooldownTracker
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.repositories.django_cooldown_repository import (
    DjangoCooldownRepository,
)
from activations.ports.activation_repository import ActivationRepository
from activations.ports.cooldown_repository import CooldownRepository
from core.domain.events import EventHandler
from core.domain.exceptions import AlreadyActivatedElsewhereError, LicenseConflictError
from core.domain.value_objects import DeviceFingerprint
from core.infrastructure.event_handlers import AUDITED_EVENTS
from core.infrastructure.events import event_bus
from licenses.domain.license import License, normalize_license_key
from licenses.domain.services import LicenseResolver
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.ports.license_repository import LicenseRepository

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@contextlib.asynccontextmanager
async def fake_transaction():
    yield


class InMemoryLicenseRepository(LicenseRepository):
    """License repository backed by a dict."""

    def __init__(self):
        self.licenses: Dict[uuid.UUID, License] = {}

    def add(self, license: License) -> License:
        self.licenses[license.id] = license
        return license

    async def save(self, license: License) -> License:
        for other in self.licenses.values():
            if other.id == license.id:
                continue
            taken = (
                (license.external_key and other.external_key == license.external_key)
                or (license.key and other.key == license.key)
                or (license.purchase_id and other.purchase_id == license.purchase_id)
            )
            if taken:
                raise LicenseConflictError()
        return self.add(license)

    async def find_by_id(self, license_id):
        return self.licenses.get(license_id)

    def _first(self, predicate) -> Optional[License]:
        return next((lic for lic in self.licenses.values() if predicate(lic)), None)

    async def find_by_external_key(self, external_key):
        return self._first(lambda lic: lic.external_key == external_key)

    async def find_by_key(self, key):
        return self._first(lambda lic: lic.key == key)

    async def find_active_by_normalized_key(self, normalized_key):
        return self._first(
            lambda lic: lic.is_active and normalize_license_key(lic.external_key) == normalized_key
        ) or self._first(
            lambda lic: lic.is_active and normalize_license_key(lic.key) == normalized_key
        )

    async def find_by_purchase_id(self, purchase_id):
        return self._first(lambda lic: lic.purchase_id == purchase_id)


class InMemoryActivationRepository(ActivationRepository):
    """Activation repository enforcing the same uniqueness rules as the database."""

    def __init__(self):
        self.activations: Dict[uuid.UUID, Activation] = {}

    async def save(self, activation: Activation) -> Activation:
        for other in self.activations.values():
            if other.id == activation.id or other.license_id != activation.license_id:
                continue
            if other.fingerprint == activation.fingerprint:
                raise AlreadyActivatedElsewhereError()
            if other.is_active and activation.is_active:
                raise AlreadyActivatedElsewhereError()
        self.activations[activation.id] = activation
        return activation

    async def find_by_id(self, activation_id):
        return self.activations.get(activation_id)

    async def find_by_fingerprint(self, license_id, fingerprint):
        return next(
            (
                a
                for a in self.activations.values()
                if a.license_id == license_id and a.fingerprint == fingerprint
            ),
            None,
        )

    async def find_active_by_license(self, license_id):
        return next(
            (a for a in self.activations.values() if a.license_id == license_id and a.is_active),
            None,
        )

    async def find_all_by_license(self, license_id) -> List[Activation]:
        return [a for a in self.activations.values() if a.license_id == license_id]

    def _inactive_before(self, cutoff):
        return [
            a
            for a in self.activations.values()
            if not a.is_active and a.deactivated_at and a.deactivated_at < cutoff
        ]

    async def count_inactive_before(self, cutoff):
        return len(self._inactive_before(cutoff))

    async def delete_inactive_before(self, cutoff):
        stale = self._inactive_before(cutoff)
        for activation in stale:
            del self.activations[activation.id]
        return len(stale)


class InMemoryCooldownRepository(CooldownRepository):
    """Cooldown repository backed by a dict."""

    def __init__(self):
        self.cooldowns: Dict[uuid.UUID, CooldownPeriod] = {}

    async def save(self, cooldown: CooldownPeriod) -> CooldownPeriod:
        self.cooldowns[cooldown.id] = cooldown
        return cooldown

    async def find_live(self, license_id, now):
        live = [
            c for c in self.cooldowns.values() if c.license_id == license_id and c.is_live(now)
        ]
        return max(live, key=lambda c: c.ends_at) if live else None

    async def clear_for_license(self, license_id):
        cleared = 0
        for cooldown in list(self.cooldowns.values()):
            if cooldown.license_id == license_id and cooldown.is_active:
                self.cooldowns[cooldown.id] = replace(cooldown, is_active=False)
                cleared += 1
        return cleared

    async def count_expired(self, now):
        return sum(1 for c in self.cooldowns.values() if c.is_garbage(now))

    async def delete_expired(self, now):
        garbage = [c for c in self.cooldowns.values() if c.is_garbage(now)]
        for cooldown in garbage:
            del self.cooldowns[cooldown.id]
        return len(garbage)


class RecordingHandler(EventHandler):
    """Collects every event it is given."""

    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def transaction():
    """Fixture for a transaction factory that does nothing."""
    return fake_transaction


@pytest.fixture
def clock():
    """Fixture for a controllable clock."""
    return FakeClock()


@pytest.fixture
def policy():
    """Fixture for the default activation policy."""
    return ActivationPolicy()


@pytest.fixture
def license_repository():
    """Fixture for an in-memory LicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def activation_repository():
    """Fixture for an in-memory ActivationRepository."""
    return InMemoryActivationRepository()


@pytest.fixture
def cooldown_repository():
    """Fixture for an in-memory CooldownRepository."""
    return InMemoryCooldownRepository()


@pytest.fixture
def cooldown_tracker(cooldown_repository, policy):
    """Fixture for CooldownTracker."""
    return CooldownTracker(cooldown_repository, policy.cooldown_window)


@pytest.fixture
def state_machine(activation_repository, cooldown_tracker, policy, clock):
    """Fixture for ActivationStateMachine on in-memory repositories."""
    return ActivationStateMachine(activation_repository, cooldown_tracker, policy=policy, clock=clock)


@pytest.fixture
def license_resolver(license_repository):
    """Fixture for LicenseResolver without an upstream verifier."""
    return LicenseResolver(license_repository)


@pytest.fixture
def sample_license(license_repository):
    """Fixture for a stored license with the key ABCDE-12345."""
    return license_repository.add(
        License.create(
            email="buyer@example.com",
            external_key="ABCDE-12345",
            purchase_id="sale-1",
        )
    )


@pytest.fixture
def device_a():
    return DeviceFingerprint("device-a", "machine-a")


@pytest.fixture
def device_b():
    return DeviceFingerprint("device-b", "machine-b")


@pytest.fixture
def published_events():
    """Record every domain event published during a test."""
    recorder = RecordingHandler()
    event_bus.clear()
    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, recorder)
    yield recorder
    event_bus.clear()


@pytest.fixture
def django_license_repository():
    """Fixture for the Django LicenseRepository."""
    return DjangoLicenseRepository()


@pytest.fixture
def django_activation_repository():
    """Fixture for the Django ActivationRepository."""
    return DjangoActivationRepository()


@pytest.fixture
def django_cooldown_repository():
    """Fixture for the Django CooldownRepository."""
    return DjangoCooldownRepository()


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
