"""
Activation Django ORM models.

This is the infrastructure layer model for activations and cooldowns.
Domain entities are in activations.domain.
"""
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Activation(models.Model):
    """
    Binding of a license to one device/machine pair.

    A license has at most one active row.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.License",
        on_delete=models.CASCADE,
        related_name="activations",
    )
    device_id = models.CharField(max_length=255)
    machine_id = models.CharField(max_length=255, help_text="Hardware identifier")
    activated_at = models.DateTimeField(default=timezone.now)
    deactivated_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "activations"
        ordering = ["-activated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["license"],
                condition=Q(is_active=True),
                name="one_active_activation_per_license",
            ),
            models.UniqueConstraint(
                fields=["license", "device_id", "machine_id"],
                name="unique_activation_per_device",
            ),
        ]
        indexes = [
            models.Index(fields=["license", "is_active"]),
            models.Index(fields=["is_active", "deactivated_at"]),
        ]

    def clean(self):
        """Validate activation fields."""
        for name in ("device_id", "machine_id"):
            value = getattr(self, name)
            if not value or len(value.strip()) == 0:
                raise ValidationError(f"{name} cannot be empty")

    def __str__(self):
        return f"{self.license} @ {self.device_id}/{self.machine_id}"


class CooldownPeriod(models.Model):
    """Lockout window opened when a device is deactivated."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.License",
        on_delete=models.CASCADE,
        related_name="cooldown_periods",
    )
    started_at = models.DateTimeField(default=timezone.now)
    ends_at = models.DateTimeField(db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "cooldown_periods"
        ordering = ["-ends_at"]
        indexes = [
            models.Index(fields=["license", "is_active", "ends_at"]),
        ]

    @property
    def is_live(self) -> bool:
        return self.is_active and self.ends_at > timezone.now()

    def __str__(self):
        return f"{self.license} until {self.ends_at.isoformat()}"
