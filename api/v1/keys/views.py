"""
License key API views.

These endpoints are used by the desktop client to:
- Activate a license on a device
- Deactivate it again
- Validate a license for a device
- Obtain a local license key for a purchase
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.activate_license import ActivateLicenseCommand
from activations.application.commands.deactivate_license import DeactivateLicenseCommand
from activations.application.queries.validate_license import ValidateLicenseQuery
from api.v1 import dependencies
from api.v1.keys.serializers import (
    ActivateLicenseRequestSerializer,
    ActivateLicenseResponseSerializer,
    DeactivateLicenseRequestSerializer,
    DeactivateLicenseResponseSerializer,
    DenialResponseSerializer,
    GenerateLicenseKeyRequestSerializer,
    GenerateLicenseKeyResponseSerializer,
    ValidateLicenseRequestSerializer,
    ValidateLicenseResponseSerializer,
)
from api.v1.serializers import validated_data
from core.domain.exceptions import DomainException, LicenseException
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.generate_license_key import GenerateLicenseKeyCommand

tracer = get_tracer(__name__)


def _record_failure(span, exc: DomainException) -> None:
    span.set_attribute("error.code", exc.code)
    span.set_status(Status(StatusCode.ERROR, exc.message))


def _set_device_attributes(span, data) -> None:
    span.set_attribute("device.id", data["deviceId"])
    span.set_attribute("machine.id", data["machineId"])


class ActivateLicenseView(APIView):
    """View for activating a license on a device."""

    @extend_schema(
        operation_id="activate_license",
        summary="Activate License",
        description=(
            "Bind a license key to a device/machine pair. A license is active on "
            "at most one device; after deactivation other devices wait out a cooldown."
        ),
        tags=["Keys"],
        request=ActivateLicenseRequestSerializer,
        responses={
            200: ActivateLicenseResponseSerializer,
            400: DenialResponseSerializer,
            503: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Activate a license for a device."""
        return async_to_sync(self._handle_activate_license)(request)

    async def _handle_activate_license(self, request: Request) -> Response:
        """Async handler for activate license."""
        with tracer.start_as_current_span("activate_license") as span:
            span.set_attribute("operation", "activate_license")
            try:
                data = validated_data(ActivateLicenseRequestSerializer(data=request.data))
                _set_device_attributes(span, data)

                handler = dependencies.build_activate_handler()
                result = await handler.handle(
                    ActivateLicenseCommand(
                        license_key=data["license_key"],
                        device_id=data["deviceId"],
                        machine_id=data["machineId"],
                        caller_verified=data["caller_verified"],
                    )
                )
            except DomainException as e:
                _record_failure(span, e)
                raise

            span.set_attribute("license.id", str(result.license_id))
            span.set_attribute("activation.id", str(result.activation_id))
            span.set_attribute("activation.outcome", result.outcome)
            span.set_status(Status(StatusCode.OK))
            return Response(ActivateLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class DeactivateLicenseView(APIView):
    """View for deactivating a license on a device."""

    @extend_schema(
        operation_id="deactivate_license",
        summary="Deactivate License",
        description=(
            "Release the device binding of a license. A cooldown starts; until it "
            "ends only the same device can activate the license again."
        ),
        tags=["Keys"],
        request=DeactivateLicenseRequestSerializer,
        responses={
            200: DeactivateLicenseResponseSerializer,
            400: DenialResponseSerializer,
            503: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Deactivate a license on a device."""
        return async_to_sync(self._handle_deactivate_license)(request)

    async def _handle_deactivate_license(self, request: Request) -> Response:
        """Async handler for deactivate license."""
        with tracer.start_as_current_span("deactivate_license") as span:
            span.set_attribute("operation", "deactivate_license")
            try:
                data = validated_data(DeactivateLicenseRequestSerializer(data=request.data))
                _set_device_attributes(span, data)

                handler = dependencies.build_deactivate_handler()
                result = await handler.handle(
                    DeactivateLicenseCommand(
                        license_key=data["license_key"],
                        device_id=data["deviceId"],
                        machine_id=data["machineId"],
                    )
                )
            except DomainException as e:
                _record_failure(span, e)
                raise

            span.set_attribute("license.id", str(result.license_id))
            span.set_status(Status(StatusCode.OK))
            return Response(DeactivateLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class ValidateLicenseView(APIView):
    """View for validating a license for a device."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Report whether a license key is valid and whether it is activated on "
            "this device, on another device, or cooling down."
        ),
        tags=["Keys"],
        request=ValidateLicenseRequestSerializer,
        responses={
            200: ValidateLicenseResponseSerializer,
            400: DenialResponseSerializer,
            503: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Validate a license for a device."""
        return async_to_sync(self._handle_validate_license)(request)

    async def _handle_validate_license(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")
            try:
                data = validated_data(ValidateLicenseRequestSerializer(data=request.data))
                _set_device_attributes(span, data)

                handler = dependencies.build_validate_handler()
                result = await handler.handle(
                    ValidateLicenseQuery(
                        license_key=data["license_key"],
                        device_id=data["deviceId"],
                        machine_id=data["machineId"],
                        caller_verified=data["caller_verified"],
                    )
                )
            except LicenseException as e:
                # Unknown or deactivated keys are a verdict, not an error
                _record_failure(span, e)
                return Response(
                    {"valid": False, "activated": False, "code": e.code, "message": e.message},
                    status=status.HTTP_200_OK,
                )
            except DomainException as e:
                _record_failure(span, e)
                raise

            span.set_attribute("validation.verdict", result.verdict)
            span.set_status(Status(StatusCode.OK))
            return Response(ValidateLicenseResponseSerializer(result).data, status=status.HTTP_200_OK)


class GenerateLicenseKeyView(APIView):
    """View for issuing a local license key for a purchase."""

    @extend_schema(
        operation_id="generate_license_key",
        summary="Generate License Key",
        description=(
            "Issue a local license key for a purchase. Calling it again for the "
            "same purchase returns the same key."
        ),
        tags=["Keys"],
        request=GenerateLicenseKeyRequestSerializer,
        responses={
            200: GenerateLicenseKeyResponseSerializer,
            400: DenialResponseSerializer,
        },
    )
    def post(self, request: Request) -> Response:
        """Generate a local license key."""
        return async_to_sync(self._handle_generate_license_key)(request)

    async def _handle_generate_license_key(self, request: Request) -> Response:
        """Async handler for generate license key."""
        with tracer.start_as_current_span("generate_license_key") as span:
            span.set_attribute("operation", "generate_license_key")
            try:
                data = validated_data(GenerateLicenseKeyRequestSerializer(data=request.data))
                span.set_attribute("purchase.id", data["gumroadPurchaseId"])

                handler = dependencies.build_generate_key_handler()
                result = await handler.handle(
                    GenerateLicenseKeyCommand(
                        email=data["email"],
                        external_key=data["gumroadLicenseKey"],
                        purchase_id=data["gumroadPurchaseId"],
                    )
                )
            except DomainException as e:
                _record_failure(span, e)
                raise

            span.set_attribute("license.id", str(result.license_id))
            span.set_attribute("license.key_created", result.created)
            span.set_status(Status(StatusCode.OK))
            return Response(GenerateLicenseKeyResponseSerializer(result).data, status=status.HTTP_200_OK)
