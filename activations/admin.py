"""
Django admin configuration for activations app.
"""

from django.contrib import admin
from django.utils.html import format_html

from activations.infrastructure.models import Activation, CooldownPeriod


@admin.register(Activation)
class ActivationAdmin(admin.ModelAdmin):
    """Admin interface for Activation model."""

    list_display = [
        "license",
        "device_id",
        "machine_id",
        "is_active_display",
        "activated_at",
        "deactivated_at",
    ]
    list_filter = ["is_active", "activated_at", "deactivated_at"]
    search_fields = [
        "device_id",
        "machine_id",
        "license__external_key",
        "license__key",
        "license__email",
    ]
    readonly_fields = ["id", "activated_at", "deactivated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license", "is_active"),
            },
        ),
        (
            "Device",
            {
                "fields": ("device_id", "machine_id"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("activated_at", "deactivated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def is_active_display(self, obj):
        """Display active status with color."""
        if obj.is_active:
            return format_html('<span style="color: green; font-weight: bold;">✓ Active</span>')
        return format_html('<span style="color: red; font-weight: bold;">✗ Inactive</span>')

    is_active_display.short_description = "Status"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license")


@admin.register(CooldownPeriod)
class CooldownPeriodAdmin(admin.ModelAdmin):
    """Admin interface for CooldownPeriod model."""

    list_display = ["license", "started_at", "ends_at", "is_live_display"]
    list_filter = ["is_active", "ends_at"]
    search_fields = ["license__external_key", "license__key", "license__email"]
    readonly_fields = ["id", "started_at"]

    def is_live_display(self, obj):
        if obj.is_live:
            return format_html('<span style="color: orange; font-weight: bold;">Cooling down</span>')
        return "Ended"

    is_live_display.short_description = "State"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license")
