"""
VerifyLicenseQuery.

Query to check a license key with the payment provider.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class VerifyLicenseQuery:
    """Query to verify a license key upstream."""

    license_key: str
    product_permalink: Optional[str] = None
