"""
RecordPurchaseCommand.

Command to store a purchase reported by the payment provider.
"""

from dataclasses import dataclass


@dataclass
class RecordPurchaseCommand:
    """Command to record a purchase and its external license key."""

    purchase_id: str
    email: str
    license_key: str
