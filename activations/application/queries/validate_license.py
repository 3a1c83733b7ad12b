"""
ValidateLicenseQuery.

Query to classify a license for a device/machine pair.
"""
from dataclasses import dataclass


@dataclass
class ValidateLicenseQuery:
    """Query to validate a license for a device."""

    license_key: str
    device_id: str
    machine_id: str
    caller_verified: bool = False
