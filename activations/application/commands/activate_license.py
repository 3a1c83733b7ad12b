"""
ActivateLicenseCommand.

Command to bind a license to a device/machine pair.
"""

from dataclasses import dataclass


@dataclass
class ActivateLicenseCommand:
    """Command to activate a license on a device."""

    license_key: str
    device_id: str
    machine_id: str
    caller_verified: bool = False
