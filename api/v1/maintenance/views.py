"""
Maintenance API views.

Guarded by MaintenanceTokenMiddleware when MAINTENANCE_TOKEN is set.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.cleanup_expired_records import (
    CleanupExpiredRecordsCommand,
)
from api.v1 import dependencies
from api.v1.maintenance.serializers import CleanupResponseSerializer
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)

TRUE_VALUES = ("1", "true", "yes")


class CleanupView(APIView):
    """View for purging expired cooldowns and stale activations."""

    @extend_schema(
        operation_id="cleanup_expired_records",
        summary="Clean Up Expired Records",
        description=(
            "Delete cooldown periods that ended or were cleared, and inactive "
            "activations deactivated longer ago than the retention period."
        ),
        tags=["Maintenance"],
        parameters=[
            OpenApiParameter(
                name="X-Maintenance-Token",
                type=str,
                location=OpenApiParameter.HEADER,
                required=False,
                description="Required when the service has a maintenance token configured",
            ),
            OpenApiParameter(
                name="dry_run",
                type=bool,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only count what would be removed",
            ),
        ],
        request=None,
        responses={200: CleanupResponseSerializer, 401: {"description": "Invalid maintenance token"}},
    )
    def post(self, request: Request) -> Response:
        """Run a cleanup."""
        return async_to_sync(self._handle_cleanup)(request)

    @extend_schema(exclude=True)
    def get(self, request: Request) -> Response:
        """Run a cleanup (scheduler-friendly alias)."""
        return async_to_sync(self._handle_cleanup)(request)

    async def _handle_cleanup(self, request: Request) -> Response:
        """Async handler for cleanup."""
        with tracer.start_as_current_span("cleanup_expired_records") as span:
            dry_run = request.query_params.get("dry_run", "").lower() in TRUE_VALUES
            span.set_attribute("operation", "cleanup_expired_records")
            span.set_attribute("dry_run", dry_run)

            handler = dependencies.build_cleanup_handler()
            result = await handler.handle(CleanupExpiredRecordsCommand(dry_run=dry_run))

            span.set_attribute("cooldown_periods.removed", result.cooldown_periods_removed)
            span.set_attribute("activations.removed", result.activations_removed)
            span.set_status(Status(StatusCode.OK))
            return Response(CleanupResponseSerializer(result).data, status=status.HTTP_200_OK)
