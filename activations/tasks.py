"""
Celery tasks for activation housekeeping.
"""
import logging

from asgiref.sync import async_to_sync
from celery import shared_task

from activations.application.commands.cleanup_expired_records import (
    CleanupExpiredRecordsCommand,
)
from core.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def cleanup_expired_records_task(self, dry_run: bool = False) -> dict:
    """
    Purge expired cooldowns and stale inactive activations.

    Scheduled hourly by celery beat.

    Args:
        dry_run: Only count what would be removed

    Returns:
        Number of rows removed per table
    """
    from api.v1.dependencies import build_cleanup_handler

    try:
        result = async_to_sync(build_cleanup_handler().handle)(
            CleanupExpiredRecordsCommand(dry_run=dry_run)
        )
    except StoreUnavailableError as exc:
        logger.error("Cleanup failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries * 60)

    return {
        "cooldown_periods_removed": result.cooldown_periods_removed,
        "activations_removed": result.activations_removed,
        "dry_run": result.dry_run,
    }
