"""
License Django ORM model.

This is the infrastructure layer model for licenses.
Domain entities are in licenses.domain.license.
"""
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from licenses.domain.license import normalize_license_key


class License(models.Model):
    """
    A purchased license, bound to at most one device at a time.

    Holds the provider-issued key, the locally issued key, or both.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="License key issued by the payment provider",
    )
    key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Locally generated license key",
    )
    external_key_normalized = models.CharField(max_length=255, blank=True, db_index=True, editable=False)
    key_normalized = models.CharField(max_length=255, blank=True, db_index=True, editable=False)
    email = models.EmailField(db_index=True)
    purchase_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    purchased_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(external_key__isnull=False) | Q(key__isnull=False),
                name="license_has_a_key",
            ),
        ]
        indexes = [
            models.Index(fields=["external_key_normalized", "is_active"]),
            models.Index(fields=["key_normalized", "is_active"]),
        ]

    def clean(self):
        """Validate license fields."""
        if not self.external_key and not self.key:
            raise ValidationError("A license needs an external key or a local key")

    def save(self, *args, **kwargs):
        """Keep normalized key columns in sync and store NULL for empty keys."""
        self.external_key = self.external_key or None
        self.key = self.key or None
        self.purchase_id = self.purchase_id or None
        self.external_key_normalized = normalize_license_key(self.external_key)
        self.key_normalized = normalize_license_key(self.key)
        super().save(*args, **kwargs)

    def deactivate(self):
        """Administrative deactivation; blocks every activation request."""
        if not self.is_active:
            return
        self.is_active = False
        self.save(update_fields=["is_active", "updated_at"])

    def reactivate(self):
        """Undo an administrative deactivation."""
        if self.is_active:
            return
        self.is_active = True
        self.save(update_fields=["is_active", "updated_at"])

    def __str__(self):
        return self.external_key or self.key or str(self.id)
