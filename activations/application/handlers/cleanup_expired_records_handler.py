"""
CleanupExpiredRecordsHandler.

Handler for purging expired cooldowns and stale inactive activations.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from activations.application.commands.cleanup_expired_records import (
    CleanupExpiredRecordsCommand,
)
from activations.application.dto.activation_dto import CleanupResultDTO
from activations.domain.events import StaleRecordsPurged
from activations.domain.policy import ActivationPolicy
from activations.domain.services import CooldownTracker
from activations.ports.activation_repository import ActivationRepository
from core.infrastructure.events import event_bus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CleanupExpiredRecordsHandler:
    """Handler for CleanupExpiredRecordsCommand."""

    def __init__(
        self,
        cooldown_tracker: CooldownTracker,
        activation_repository: ActivationRepository,
        policy: ActivationPolicy,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize handler with collaborators."""
        self.cooldown_tracker = cooldown_tracker
        self.activation_repository = activation_repository
        self.policy = policy
        self.clock = clock

    async def handle(self, command: CleanupExpiredRecordsCommand) -> CleanupResultDTO:
        """
        Handle cleanup command.

        Removes cooldowns that ended or were cleared, and inactive
        activations deactivated longer ago than the retention period.
        Live cooldowns and active activations are never touched.

        Args:
            command: CleanupExpiredRecordsCommand

        Returns:
            CleanupResultDTO with the number of rows removed
        """
        now = self.clock()
        cutoff = now - self.policy.activation_retention

        cooldowns_removed = await self.cooldown_tracker.purge_expired(now, dry_run=command.dry_run)
        if command.dry_run:
            activations_removed = await self.activation_repository.count_inactive_before(cutoff)
        else:
            activations_removed = await self.activation_repository.delete_inactive_before(cutoff)

        logger.info(
            "Cleanup %s: %d cooldown periods, %d activations",
            "dry run" if command.dry_run else "completed",
            cooldowns_removed,
            activations_removed,
            extra={"dry_run": command.dry_run},
        )

        if not command.dry_run:
            await event_bus.publish(
                StaleRecordsPurged(
                    cooldowns_removed=cooldowns_removed,
                    activations_removed=activations_removed,
                )
            )

        return CleanupResultDTO(
            cooldown_periods_removed=cooldowns_removed,
            activations_removed=activations_removed,
            dry_run=command.dry_run,
            timestamp=now,
        )
