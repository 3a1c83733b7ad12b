"""
Django admin configuration for licenses app.
"""
from django.contrib import admin, messages
from django.utils.html import format_html

from licenses.infrastructure.models import License


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "display_key",
        "email",
        "purchase_id",
        "status_display",
        "active_device",
        "purchased_at",
    ]
    list_filter = ["is_active", "purchased_at", "created_at"]
    search_fields = ["external_key", "key", "email", "purchase_id"]
    readonly_fields = [
        "id",
        "external_key_normalized",
        "key_normalized",
        "created_at",
        "updated_at",
    ]
    actions = ["deactivate_licenses", "reactivate_licenses"]
    fieldsets = (
        (
            "Keys",
            {
                "fields": ("id", "external_key", "key", "external_key_normalized", "key_normalized"),
            },
        ),
        (
            "Purchase",
            {
                "fields": ("email", "purchase_id", "purchased_at", "is_active"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def display_key(self, obj):
        return obj.external_key or obj.key

    display_key.short_description = "License Key"

    def status_display(self, obj):
        """Display status with color coding."""
        if obj.is_active:
            return format_html('<span style="color: green; font-weight: bold;">ACTIVE</span>')
        return format_html('<span style="color: red; font-weight: bold;">DEACTIVATED</span>')

    status_display.short_description = "Status"

    def active_device(self, obj):
        """Device currently holding the license, if any."""
        activation = obj.activations.filter(is_active=True).first()
        if activation is None:
            return "-"
        return f"{activation.device_id} / {activation.machine_id}"

    active_device.short_description = "Active Device"

    @admin.action(description="Deactivate selected licenses")
    def deactivate_licenses(self, request, queryset):
        count = 0
        for license_model in queryset.filter(is_active=True):
            license_model.deactivate()
            count += 1
        self.message_user(request, f"Deactivated {count} license(s)", messages.SUCCESS)

    @admin.action(description="Reactivate selected licenses")
    def reactivate_licenses(self, request, queryset):
        count = 0
        for license_model in queryset.filter(is_active=False):
            license_model.reactivate()
            count += 1
        self.message_user(request, f"Reactivated {count} license(s)", messages.SUCCESS)

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).prefetch_related("activations")
