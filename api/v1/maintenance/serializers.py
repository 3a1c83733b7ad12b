"""
Serializers for maintenance endpoints.
"""

from rest_framework import serializers


class CleanupResponseSerializer(serializers.Serializer):
    """Serializer for cleanup response."""

    success = serializers.SerializerMethodField()
    message = serializers.SerializerMethodField()
    cooldownPeriodsRemoved = serializers.IntegerField(source="cooldown_periods_removed")
    activationsRemoved = serializers.IntegerField(source="activations_removed")
    dryRun = serializers.BooleanField(source="dry_run")
    timestamp = serializers.DateTimeField()

    def get_success(self, obj) -> bool:
        return True

    def get_message(self, obj) -> str:
        if obj.dry_run:
            return "Database cleanup dry run completed"
        return "Database cleanup completed successfully"
