"""
API exception handlers.

This module provides custom exception handling for REST API responses.

Denials (unknown or deactivated license, device conflicts, cooldowns) are
ordinary answers for the client and render as HTTP 200 with
``success: false``. Malformed input is 400, infrastructure failures are
502/503.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ParseError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    ActivationException,
    DomainException,
    InfrastructureException,
    LicenseConflictError,
    LicenseException,
    RequestValidationError,
    StoreUnavailableError,
    UpstreamVerificationFailedError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)


def domain_error_body(exc: DomainException) -> Dict[str, Any]:
    """Response body for a domain exception."""
    return {"success": False, "code": exc.code, "message": exc.message, **exc.details()}


def status_for(exc: DomainException) -> int:
    """HTTP status for a domain exception."""
    if isinstance(exc, RequestValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, LicenseConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, (LicenseException, ActivationException)):
        return status.HTTP_200_OK
    if isinstance(exc, UpstreamVerificationFailedError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, StoreUnavailableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, context, trace_id)
    elif isinstance(exc, ParseError):
        response = Response(
            {"success": False, "code": "VALIDATION_ERROR", "message": "Invalid request body"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_") if hasattr(exc, "default_code") else "API_ERROR"
        detail = response.data.get("detail", exc.default_detail) if isinstance(response.data, dict) else exc.default_detail
        response.data = {"success": False, "code": code, "message": str(detail)}
    elif isinstance(exc, Http404):
        response = Response(
            {"success": False, "code": "NOT_FOUND", "message": "Resource not found"},
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        response = _handle_unexpected_exception(exc, context, trace_id)

    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _endpoint(context: Dict[str, Any]) -> str:
    view = context.get("view")
    return view.__class__.__name__ if view else "unknown"


def _handle_domain_exception(
    exc: DomainException, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_for(exc)
    extra = {"trace_id": trace_id, "code": exc.code}
    if isinstance(exc, InfrastructureException):
        errors_total.labels(error_type=exc.code, endpoint=_endpoint(context)).inc()
        logger.error("Infrastructure failure: %s - %s", exc.code, exc.message, extra=extra, exc_info=exc)
    elif status_code >= 400:
        logger.warning("Rejected request: %s - %s", exc.code, exc.message, extra=extra)
    else:
        logger.info("Denied: %s - %s", exc.code, exc.message, extra=extra)
    return Response(domain_error_body(exc), status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    errors_total.labels(error_type=type(exc).__name__, endpoint=_endpoint(context)).inc()
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return Response(
        {"success": False, "code": "INTERNAL_ERROR", "message": "An internal error occurred"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
