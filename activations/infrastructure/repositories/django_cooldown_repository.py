"""
Django implementation of CooldownRepository port.
"""

import uuid
from datetime import datetime
from typing import Optional

from asgiref.sync import sync_to_async
from django.db.models import Q

from activations.domain.cooldown import CooldownPeriod
from activations.infrastructure.models import CooldownPeriod as CooldownPeriodModel
from activations.ports.cooldown_repository import CooldownRepository
from core.infrastructure.database import store_operation


class DjangoCooldownRepository(CooldownRepository):
    """Django ORM implementation of CooldownRepository."""

    def _to_domain(self, model: CooldownPeriodModel) -> CooldownPeriod:
        """Convert Django model to domain entity."""
        return CooldownPeriod(
            id=model.id,
            license_id=model.license_id,
            started_at=model.started_at,
            ends_at=model.ends_at,
            is_active=model.is_active,
        )

    def _save_model(self, cooldown: CooldownPeriod) -> CooldownPeriodModel:
        # pylint: disable=no-member
        model, _ = CooldownPeriodModel.objects.update_or_create(
            id=cooldown.id,
            defaults={
                "license_id": cooldown.license_id,
                "started_at": cooldown.started_at,
                "ends_at": cooldown.ends_at,
                "is_active": cooldown.is_active,
            },
        )
        return model

    @store_operation
    async def save(self, cooldown: CooldownPeriod) -> CooldownPeriod:
        """
        Save a cooldown period.

        Args:
            cooldown: CooldownPeriod entity to save

        Returns:
            Saved cooldown entity
        """
        model = await sync_to_async(self._save_model)(cooldown)
        return self._to_domain(model)

    @store_operation
    async def find_live(self, license_id: uuid.UUID, now: datetime) -> Optional[CooldownPeriod]:
        """Find the live cooldown ending last for a license."""
        model = await sync_to_async(
            lambda: CooldownPeriodModel.objects.filter(  # pylint: disable=no-member
                license_id=license_id,
                is_active=True,
                ends_at__gt=now,
            )
            .order_by("-ends_at")
            .first()
        )()
        return self._to_domain(model) if model else None

    @store_operation
    async def clear_for_license(self, license_id: uuid.UUID) -> int:
        """Mark every active cooldown of a license inactive."""
        return await sync_to_async(
            lambda: CooldownPeriodModel.objects.filter(  # pylint: disable=no-member
                license_id=license_id, is_active=True
            ).update(is_active=False)
        )()

    @staticmethod
    def _expired(now: datetime):
        return CooldownPeriodModel.objects.filter(  # pylint: disable=no-member
            Q(ends_at__lt=now) | Q(is_active=False)
        )

    @store_operation
    async def count_expired(self, now: datetime) -> int:
        """Count cooldowns that ended before ``now`` or are inactive."""
        return await sync_to_async(lambda: self._expired(now).count())()

    @store_operation
    async def delete_expired(self, now: datetime) -> int:
        """Delete cooldowns that ended before ``now`` or are inactive."""
        deleted, _ = await sync_to_async(lambda: self._expired(now).delete())()
        return deleted
