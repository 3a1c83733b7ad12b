"""
Event handlers for domain events.

These handlers process domain events asynchronously for side effects
like audit logging and metrics.
"""

import logging

from activations.domain.events import (
    ActivationDenied,
    DeviceReconciled,
    LicenseActivated,
    LicenseDeactivatedOnDevice,
    StaleRecordsPurged,
)
from core import metrics
from core.domain.events import DomainEvent, EventHandler
from licenses.domain.events import LicenseKeyIssued, LicenseSynthesized, PurchaseRecorded

logger = logging.getLogger(__name__)

AUDITED_EVENTS = (
    LicenseActivated,
    LicenseDeactivatedOnDevice,
    ActivationDenied,
    DeviceReconciled,
    StaleRecordsPurged,
    PurchaseRecorded,
    LicenseSynthesized,
    LicenseKeyIssued,
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes every domain event as one structured log record.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={"audit": event.to_dict()},
        )


class MetricsEventHandler(EventHandler):
    """Event handler translating domain events into Prometheus counters."""

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for metrics.

        Args:
            event: Domain event
        """
        if isinstance(event, LicenseActivated):
            kind = "reactivated" if event.reactivated else "activated"
            metrics.licenses_activated_total.labels(kind=kind).inc()
        elif isinstance(event, LicenseDeactivatedOnDevice):
            metrics.licenses_deactivated_total.inc()
        elif isinstance(event, ActivationDenied):
            metrics.activation_denials_total.labels(reason=event.reason).inc()
        elif isinstance(event, DeviceReconciled):
            metrics.devices_reconciled_total.inc()
        elif isinstance(event, StaleRecordsPurged):
            metrics.records_purged_total.labels(table="cooldown_periods").inc(event.cooldowns_removed)
            metrics.records_purged_total.labels(table="activations").inc(event.activations_removed)
        elif isinstance(event, PurchaseRecorded):
            if event.created:
                result = "created"
            elif event.key_changed:
                result = "key_changed"
            else:
                result = "unchanged"
            metrics.purchases_recorded_total.labels(result=result).inc()
        elif isinstance(event, LicenseSynthesized):
            metrics.licenses_synthesized_total.labels(source=event.source).inc()
        elif isinstance(event, LicenseKeyIssued):
            metrics.license_keys_issued_total.inc()


def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    metrics_handler = MetricsEventHandler()

    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, audit_handler)
        event_bus.subscribe(event_type, metrics_handler)

    logger.info("Event handlers registered")
