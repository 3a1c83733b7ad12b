"""
App configuration for Device License Service.
"""

import logging
import os
import sys

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)

# Commands that never serve requests and need no observability
SKIPPED_COMMANDS = ("migrate", "makemigrations", "collectstatic", "shell", "check", "createsuperuser")


class DeviceLicenseServiceConfig(AppConfig):
    """App configuration for DeviceLicenseService."""

    name = "DeviceLicenseService"
    verbose_name = "Device License Service"

    def ready(self):
        """Called when Django starts."""
        if len(sys.argv) > 1 and sys.argv[1] in SKIPPED_COMMANDS:
            return

        # The autoreloader's watcher process does not serve requests
        if os.environ.get("RUN_MAIN") == "false":
            return

        if getattr(self, "_initialized", False):
            return

        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()

        if settings.OTEL_ENABLED:
            from core.instrumentation import setup_opentelemetry

            logger.info("Setting up observability...")
            setup_opentelemetry()
            logger.info("Observability setup complete")

        self._initialized = True
