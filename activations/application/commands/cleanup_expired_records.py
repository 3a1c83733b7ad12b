"""
CleanupExpiredRecordsCommand.

Command to purge expired cooldowns and stale activations.
"""

from dataclasses import dataclass


@dataclass
class CleanupExpiredRecordsCommand:
    """Command to remove garbage rows."""

    dry_run: bool = False
