"""
DeactivateLicenseCommand.

Command to release a device binding.
"""

from dataclasses import dataclass


@dataclass
class DeactivateLicenseCommand:
    """Command to deactivate a license on a device."""

    license_key: str
    device_id: str
    machine_id: str
