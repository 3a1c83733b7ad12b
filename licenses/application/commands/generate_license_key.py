"""
GenerateLicenseKeyCommand.

Command to issue a local license key for a purchase.
"""

from dataclasses import dataclass


@dataclass
class GenerateLicenseKeyCommand:
    """Command to generate a local license key."""

    email: str
    external_key: str
    purchase_id: str
