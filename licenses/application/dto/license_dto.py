"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PurchaseRecordedDTO:
    """DTO for webhook intake response."""

    success: bool
    message: str
    license_id: uuid.UUID
    license_key: str
    created: bool
    key_changed: bool


@dataclass
class GeneratedKeyDTO:
    """DTO for local key generation response."""

    key: str
    license_id: uuid.UUID
    created: bool


@dataclass
class PurchaseDTO:
    """DTO for purchase details returned by the provider."""

    email: str
    purchase_id: Optional[str]
    full_name: Optional[str]
    created_at: Optional[datetime]
    refunded: bool
    chargebacked: bool


@dataclass
class VerificationDTO:
    """DTO for upstream verification response."""

    success: bool
    valid: bool
    message: str
    purchase: Optional[PurchaseDTO] = None
