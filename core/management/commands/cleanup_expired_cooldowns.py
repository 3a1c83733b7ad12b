"""
Django management command to purge expired cooldowns and stale activations.

This command should be run periodically (e.g., via cron) when celery beat
is not deployed.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from activations.application.commands.cleanup_expired_records import (
    CleanupExpiredRecordsCommand,
)
from api.v1.dependencies import build_cleanup_handler


class Command(BaseCommand):
    """Command to purge expired cooldowns and stale activations."""

    help = "Delete ended cooldown periods and long-inactive activations"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - only count what would be removed",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        result = async_to_sync(build_cleanup_handler().handle)(
            CleanupExpiredRecordsCommand(dry_run=dry_run)
        )

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
        verb = "Would remove" if dry_run else "Removed"
        # pylint: disable=no-member
        self.stdout.write(
            self.style.SUCCESS(
                f"{verb} {result.cooldown_periods_removed} cooldown period(s) "
                f"and {result.activations_removed} activation(s)"
            )
        )
