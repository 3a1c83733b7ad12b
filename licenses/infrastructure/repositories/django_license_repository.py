"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from typing import Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction

from core.domain.exceptions import LicenseConflictError
from core.domain.value_objects import Email
from core.infrastructure.database import store_operation
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository


class DjangoLicenseRepository(LicenseRepository):
    """Django ORM implementation of LicenseRepository."""

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            external_key=model.external_key,
            key=model.key,
            email=Email(model.email),
            purchased_at=model.purchased_at,
            is_active=model.is_active,
            purchase_id=model.purchase_id,
            created_at=model.created_at,
        )

    def _save_model(self, license: License) -> LicenseModel:
        """Insert or update the row for a domain entity inside a savepoint."""
        fields = {
            "external_key": license.external_key,
            "key": license.key,
            "email": str(license.email),
            "purchase_id": license.purchase_id,
            "purchased_at": license.purchased_at,
            "is_active": license.is_active,
        }
        # pylint: disable=no-member
        try:
            with transaction.atomic():
                model = LicenseModel.objects.filter(id=license.id).first()
                if model is None:
                    model = LicenseModel(id=license.id, **fields)
                else:
                    for name, value in fields.items():
                        setattr(model, name, value)
                model.save()
        except IntegrityError as exc:
            raise LicenseConflictError() from exc
        return model

    @store_operation
    async def save(self, license: License) -> License:
        """
        Save a license entity.

        Args:
            license: License entity to save

        Returns:
            Saved license entity
        """
        model = await sync_to_async(self._save_model)(license)
        return self._to_domain(model)

    async def _first(self, **kwargs) -> Optional[License]:
        """Return the first license matching the filter, as an entity."""
        model = await sync_to_async(
            lambda: LicenseModel.objects.filter(**kwargs).first()  # pylint: disable=no-member
        )()
        return self._to_domain(model) if model else None

    @store_operation
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """Find a license by ID."""
        return await self._first(id=license_id)

    @store_operation
    async def find_by_external_key(self, external_key: str) -> Optional[License]:
        """Find a license by exact external key."""
        return await self._first(external_key=external_key)

    @store_operation
    async def find_by_key(self, key: str) -> Optional[License]:
        """Find a license by exact local key."""
        return await self._first(key=key)

    @store_operation
    async def find_active_by_normalized_key(self, normalized_key: str) -> Optional[License]:
        """
        Find an active license by normalized key.

        External keys win over local keys when both could match.
        """
        license = await self._first(external_key_normalized=normalized_key, is_active=True)
        if license:
            return license
        return await self._first(key_normalized=normalized_key, is_active=True)

    @store_operation
    async def find_by_purchase_id(self, purchase_id: str) -> Optional[License]:
        """Find a license by external purchase id."""
        return await self._first(purchase_id=purchase_id)
