"""
Activation DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ActivationResponseDTO:
    """DTO for activate license response."""

    success: bool
    message: str
    outcome: str
    license_id: uuid.UUID
    activation_id: uuid.UUID


@dataclass
class DeactivationResponseDTO:
    """DTO for deactivate license response."""

    success: bool
    message: str
    license_id: uuid.UUID
    cooldown_ends_at: datetime


@dataclass
class ValidationResponseDTO:
    """DTO for validate license response."""

    valid: bool
    activated: bool
    verdict: str
    message: Optional[str] = None
    cooldown: bool = False
    cooldown_ends_at: Optional[datetime] = None
    hours_remaining: Optional[int] = None
    reconciled: bool = False


@dataclass
class CleanupResultDTO:
    """DTO for cleanup result."""

    cooldown_periods_removed: int
    activations_removed: int
    dry_run: bool
    timestamp: datetime
