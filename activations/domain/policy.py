"""
Activation policy.

Tunable rules of the activation state machine, read once from settings.
"""
from dataclasses import dataclass
from datetime import timedelta

DEFAULT_COOLDOWN_WINDOW = timedelta(hours=2)
DEFAULT_ACTIVATION_RETENTION = timedelta(days=90)


@dataclass(frozen=True)
class ActivationPolicy:
    """
    Activation policy.

    Attributes:
        cooldown_window: How long a deactivated license refuses new devices
        reconcile_machine_id: During validation, treat a matching machine id
            as authoritative and adopt the caller's new device id
        activation_retention: How long inactive activations are kept before cleanup
    """

    cooldown_window: timedelta = DEFAULT_COOLDOWN_WINDOW
    reconcile_machine_id: bool = True
    activation_retention: timedelta = DEFAULT_ACTIVATION_RETENTION

    def __post_init__(self):
        if self.cooldown_window <= timedelta(0):
            raise ValueError("Cooldown window must be positive")

    @classmethod
    def from_settings(cls) -> "ActivationPolicy":
        """Build the policy from Django settings."""
        from django.conf import settings

        hours = getattr(settings, "LICENSE_COOLDOWN_HOURS", None)
        retention_days = getattr(settings, "LICENSE_ACTIVATION_RETENTION_DAYS", None)
        return cls(
            cooldown_window=timedelta(hours=hours) if hours else DEFAULT_COOLDOWN_WINDOW,
            reconcile_machine_id=getattr(settings, "LICENSE_RECONCILE_MACHINE_ID", True),
            activation_retention=(
                timedelta(days=retention_days) if retention_days else DEFAULT_ACTIVATION_RETENTION
            ),
        )
