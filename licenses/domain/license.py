"""
License domain entity.

This is the core domain entity representing a purchased license.
It contains business logic and is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from core.domain.value_objects import Email


def normalize_license_key(raw_key: Optional[str]) -> str:
    """
    Reduce a license key to its comparison form.

    Whitespace and hyphens are removed and letters uppercased, so
    ``abcde-12345`` and ``ABCDE12345`` compare equal.
    """
    if not raw_key:
        return ""
    return "".join(ch for ch in raw_key if not ch.isspace() and ch != "-").upper()


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    A license carries an externally issued key (from the payment provider),
    a locally issued key, or both. Either one resolves to the same record.
    """

    id: uuid.UUID
    external_key: Optional[str]
    key: Optional[str]
    email: Email
    purchased_at: datetime
    is_active: bool
    purchase_id: Optional[str]
    created_at: datetime

    def __post_init__(self):
        """Validate license entity."""
        if not self.external_key and not self.key:
            raise ValueError("A license needs an external key or a local key")
        for value in (self.external_key, self.key):
            if value and len(value) > 255:
                raise ValueError("License key too long")

    @classmethod
    def create(
        cls,
        email: str,
        external_key: Optional[str] = None,
        key: Optional[str] = None,
        purchase_id: Optional[str] = None,
        purchased_at: Optional[datetime] = None,
        license_id: Optional[uuid.UUID] = None,
    ) -> "License":
        """
        Create a new, active License entity.

        Args:
            email: Owner email address
            external_key: License key issued by the payment provider
            key: Locally generated license key
            purchase_id: Payment provider purchase (sale) id
            purchased_at: Purchase time (defaults to now)
            license_id: Optional UUID (generated if not provided)

        Returns:
            License entity instance
        """
        now = datetime.now(timezone.utc)
        return cls(
            id=license_id or uuid.uuid4(),
            external_key=external_key.strip() if external_key else None,
            key=key.strip() if key else None,
            email=Email(email),
            purchased_at=purchased_at or now,
            is_active=True,
            purchase_id=purchase_id,
            created_at=now,
        )

    @property
    def display_key(self) -> str:
        """Key shown to people: the external key when present."""
        return self.external_key or self.key

    def with_external_key(self, external_key: str) -> "License":
        """Return a copy carrying a new external key."""
        return replace(self, external_key=external_key.strip())

    def with_local_key(self, key: str) -> "License":
        """Return a copy carrying a locally generated key."""
        return replace(self, key=key)

    def deactivate(self) -> "License":
        """Administrative deactivation."""
        if not self.is_active:
            return self
        return replace(self, is_active=False)

    def reactivate(self) -> "License":
        """Undo an administrative deactivation."""
        if self.is_active:
            return self
        return replace(self, is_active=True)
