"""
Django implementation of ActivationRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from activations.domain.activation import Activation
from activations.infrastructure.models import Activation as ActivationModel
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import AlreadyActivatedElsewhereError
from core.domain.value_objects import DeviceFingerprint
from core.infrastructure.database import store_operation

logger = logging.getLogger(__name__)


class DjangoActivationRepository(ActivationRepository):
    """
    Django ORM implementation of ActivationRepository.

    Unique-constraint violations on save mean a concurrent request bound
    the license first; they surface as AlreadyActivatedElsewhereError.
    """

    def _to_domain(self, model: ActivationModel) -> Activation:
        """
        Convert Django model to domain entity.

        Args:
            model: Django Activation model

        Returns:
            Activation domain entity
        """
        return Activation(
            id=model.id,
            license_id=model.license_id,
            fingerprint=DeviceFingerprint(model.device_id, model.machine_id),
            activated_at=model.activated_at,
            deactivated_at=model.deactivated_at,
            is_active=model.is_active,
        )

    def _save_model(self, activation: Activation) -> ActivationModel:
        """Insert or update the row for a domain entity inside a savepoint."""
        fields = {
            "license_id": activation.license_id,
            "device_id": activation.device_id,
            "machine_id": activation.machine_id,
            "activated_at": activation.activated_at,
            "deactivated_at": activation.deactivated_at,
            "is_active": activation.is_active,
        }
        # pylint: disable=no-member
        try:
            with transaction.atomic():
                model = ActivationModel.objects.filter(id=activation.id).first()
                if model is None:
                    model = ActivationModel(id=activation.id, **fields)
                else:
                    for name, value in fields.items():
                        setattr(model, name, value)
                model.save()
        except IntegrityError as exc:
            logger.warning(
                "Activation write for license %s lost a race: %s",
                activation.license_id,
                exc,
            )
            raise AlreadyActivatedElsewhereError() from exc
        return model

    @store_operation
    async def save(self, activation: Activation) -> Activation:
        """
        Save an activation entity.

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity
        """
        model = await sync_to_async(self._save_model)(activation)
        return self._to_domain(model)

    async def _first(self, **kwargs) -> Optional[Activation]:
        model = await sync_to_async(
            lambda: ActivationModel.objects.filter(**kwargs).first()  # pylint: disable=no-member
        )()
        return self._to_domain(model) if model else None

    @store_operation
    async def find_by_id(self, activation_id: uuid.UUID) -> Optional[Activation]:
        """Find an activation by ID."""
        return await self._first(id=activation_id)

    @store_operation
    async def find_by_fingerprint(
        self, license_id: uuid.UUID, fingerprint: DeviceFingerprint
    ) -> Optional[Activation]:
        """Find the activation of a license on an exact device/machine pair."""
        return await self._first(
            license_id=license_id,
            device_id=fingerprint.device_id,
            machine_id=fingerprint.machine_id,
        )

    @store_operation
    async def find_active_by_license(self, license_id: uuid.UUID) -> Optional[Activation]:
        """Find the active activation for a license."""
        return await self._first(license_id=license_id, is_active=True)

    @store_operation
    async def find_all_by_license(self, license_id: uuid.UUID) -> List[Activation]:
        """
        Find all activations for a license (active and inactive).

        Args:
            license_id: License UUID

        Returns:
            List of Activation entities
        """
        models = await sync_to_async(
            lambda: list(
                ActivationModel.objects.filter(license_id=license_id)  # pylint: disable=no-member
            )
        )()
        return [self._to_domain(model) for model in models]

    @staticmethod
    def _inactive_before(cutoff: datetime):
        return ActivationModel.objects.filter(  # pylint: disable=no-member
            is_active=False,
            deactivated_at__lt=cutoff,
        )

    @store_operation
    async def count_inactive_before(self, cutoff: datetime) -> int:
        """Count inactive activations deactivated before ``cutoff``."""
        return await sync_to_async(lambda: self._inactive_before(cutoff).count())()

    @store_operation
    async def delete_inactive_before(self, cutoff: datetime) -> int:
        """Delete inactive activations deactivated before ``cutoff``."""
        deleted, _ = await sync_to_async(lambda: self._inactive_before(cutoff).delete())()
        return deleted
