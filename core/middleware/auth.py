"""
Maintenance token authentication middleware.

This middleware guards the maintenance API with a shared secret.
"""

import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

MAINTENANCE_PATH_PREFIX = "/api/v1/maintenance/"
MAINTENANCE_TOKEN_HEADER = "X-Maintenance-Token"


class MaintenanceTokenMiddleware(MiddlewareMixin):
    """
    Middleware for maintenance API authentication.

    Requests under /api/v1/maintenance/ must carry the configured
    MAINTENANCE_TOKEN in the X-Maintenance-Token header (or as a Bearer
    token). When no token is configured the endpoints are open.
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate the maintenance token.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not request.path.startswith(MAINTENANCE_PATH_PREFIX):
            return None

        expected = getattr(settings, "MAINTENANCE_TOKEN", None)
        if not expected:
            return None

        token = request.headers.get(MAINTENANCE_TOKEN_HEADER) or request.headers.get(
            "Authorization", ""
        ).replace("Bearer ", "")

        if not token:
            return JsonResponse(
                {
                    "success": False,
                    "code": "UNAUTHORIZED",
                    "message": f"Missing maintenance token. Provide {MAINTENANCE_TOKEN_HEADER} header.",
                },
                status=401,
            )

        if not hmac.compare_digest(token.encode(), expected.encode()):
            logger.warning(
                "Invalid maintenance token attempted",
                extra={"path": request.path, "remote_addr": request.META.get("REMOTE_ADDR")},
            )
            return JsonResponse(
                {"success": False, "code": "UNAUTHORIZED", "message": "Invalid maintenance token"},
                status=401,
            )

        return None
