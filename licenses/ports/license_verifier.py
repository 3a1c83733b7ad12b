"""
License verifier port (interface).

Verification asks the external payment provider whether a license key
belongs to a real, non-chargebacked purchase.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class VerifiedPurchase:
    """Purchase details returned by the provider."""

    email: str
    purchase_id: Optional[str] = None
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    refunded: bool = False
    chargebacked: bool = False


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of an upstream verification call."""

    success: bool
    valid: bool
    message: str
    purchase: Optional[VerifiedPurchase] = field(default=None)


class LicenseVerifier(ABC):
    """Abstract external license verifier."""

    @abstractmethod
    async def verify(self, license_key: str, product_permalink: Optional[str] = None) -> VerificationResult:
        """
        Verify a license key with the provider.

        Args:
            license_key: Key to verify
            product_permalink: Product the key should belong to
                (defaults to the configured product)

        Returns:
            VerificationResult

        Raises:
            UpstreamVerificationFailedError: If the provider errors or times out
        """
        pass
