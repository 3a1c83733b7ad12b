"""
Gumroad API views.

These endpoints are called by Gumroad (purchase webhook) and by clients
that want a key checked with Gumroad directly.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1 import dependencies
from api.v1.gumroad.payload import extract_purchase
from api.v1.gumroad.serializers import (
    VerifyLicenseRequestSerializer,
    VerifyLicenseResponseSerializer,
    WebhookResponseSerializer,
)
from api.v1.keys.serializers import DenialResponseSerializer
from api.v1.serializers import validated_data
from core.domain.exceptions import DomainException, MissingFieldError
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.record_purchase import RecordPurchaseCommand
from licenses.application.queries.verify_license import VerifyLicenseQuery

tracer = get_tracer(__name__)


class GumroadWebhookView(APIView):
    """View receiving Gumroad purchase notifications."""

    @extend_schema(
        operation_id="gumroad_webhook",
        summary="Gumroad Purchase Webhook",
        description=(
            "Record a purchase and its license key. The body may be form-encoded, "
            "JSON or URL-encoded text. Repeated notifications for the same "
            "purchase update the stored key instead of creating a new license."
        ),
        tags=["Gumroad"],
        request=OpenApiTypes.OBJECT,
        responses={
            200: WebhookResponseSerializer,
            400: DenialResponseSerializer,
            409: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Record a purchase."""
        return async_to_sync(self._handle_webhook)(request)

    async def _handle_webhook(self, request: Request) -> Response:
        """Async handler for the purchase webhook."""
        with tracer.start_as_current_span("gumroad_webhook") as span:
            span.set_attribute("operation", "gumroad_webhook")
            try:
                # Decoded from the raw Django request; DRF parsers accept JSON only
                payload = extract_purchase(request._request)  # pylint: disable=protected-access
                span.set_attribute("purchase.id", payload.purchase_id)

                handler = dependencies.build_record_purchase_handler()
                result = await handler.handle(
                    RecordPurchaseCommand(
                        purchase_id=payload.purchase_id,
                        email=payload.email,
                        license_key=payload.license_key,
                    )
                )
            except DomainException as e:
                span.set_attribute("error.code", e.code)
                span.set_status(Status(StatusCode.ERROR, e.message))
                raise

            span.set_attribute("license.id", str(result.license_id))
            span.set_attribute("license.created", result.created)
            span.set_attribute("license.key_changed", result.key_changed)
            span.set_status(Status(StatusCode.OK))
            return Response(WebhookResponseSerializer(result).data, status=status.HTTP_200_OK)


class VerifyLicenseView(APIView):
    """View checking a license key with Gumroad."""

    @extend_schema(
        operation_id="gumroad_verify",
        summary="Verify License With Gumroad",
        description=(
            "Ask Gumroad whether a license key belongs to a real purchase. "
            "A key is valid when Gumroad knows it and it was not charged back."
        ),
        tags=["Gumroad"],
        request=VerifyLicenseRequestSerializer,
        responses={
            200: VerifyLicenseResponseSerializer,
            400: DenialResponseSerializer,
            502: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Verify a license key upstream."""
        return async_to_sync(self._handle_verify)(request)

    async def _handle_verify(self, request: Request) -> Response:
        """Async handler for upstream verification."""
        with tracer.start_as_current_span("gumroad_verify") as span:
            span.set_attribute("operation", "gumroad_verify")
            try:
                data = validated_data(VerifyLicenseRequestSerializer(data=request.data))
                permalink = data.get("productPermalink") or settings.GUMROAD_PRODUCT_PERMALINK
                if not permalink:
                    raise MissingFieldError(
                        "productPermalink", "License key and product permalink are required"
                    )
                span.set_attribute("product.permalink", permalink)

                handler = dependencies.build_verify_handler()
                result = await handler.handle(
                    VerifyLicenseQuery(license_key=data["licenseKey"], product_permalink=permalink)
                )
            except DomainException as e:
                span.set_attribute("error.code", e.code)
                span.set_status(Status(StatusCode.ERROR, e.message))
                raise

            span.set_attribute("verification.valid", result.valid)
            span.set_status(Status(StatusCode.OK))
            return Response(VerifyLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)
