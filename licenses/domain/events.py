"""
License domain events.

Domain events represent something that happened in the license domain.
"""
import uuid
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


class PurchaseRecorded(DomainEvent):
    """Event raised when a purchase notification creates or updates a license."""

    payload_fields = ("license_id", "purchase_id", "created", "key_changed")

    def __init__(
        self,
        license_id: uuid.UUID,
        purchase_id: str,
        created: bool,
        key_changed: bool,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize PurchaseRecorded event.

        Args:
            license_id: License UUID
            purchase_id: External purchase id
            created: True when a new license row was inserted
            key_changed: True when an existing license got a new external key
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(license_id), occurred_at=occurred_at)
        self.license_id = license_id
        self.purchase_id = purchase_id
        self.created = created
        self.key_changed = key_changed


class LicenseSynthesized(DomainEvent):
    """Event raised when a license is created on first sight of a verified key."""

    payload_fields = ("license_id", "source")

    def __init__(
        self,
        license_id: uuid.UUID,
        source: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseSynthesized event.

        Args:
            license_id: License UUID
            source: "caller" when the client vouched for the key,
                "upstream" when the provider verified it
            occurred_at: When the event occurred
        """
        super().__init__(aggregate_id=str(license_id), occurred_at=occurred_at)
        self.license_id = license_id
        self.source = source


class LicenseKeyIssued(DomainEvent):
    """Event raised when a local key is generated for a purchase."""

    payload_fields = ("license_id", "purchase_id")

    def __init__(
        self,
        license_id: uuid.UUID,
        purchase_id: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(aggregate_id=str(license_id), occurred_at=occurred_at)
        self.license_id = license_id
        self.purchase_id = purchase_id
