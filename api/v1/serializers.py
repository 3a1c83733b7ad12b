"""
Shared serializer helpers for the v1 API.
"""

from typing import Any, Dict

from rest_framework import serializers
from rest_framework.settings import api_settings

from core.domain.exceptions import MissingFieldError, RequestValidationError

MISSING_CODES = ("required", "blank", "null")


def validated_data(serializer: serializers.Serializer) -> Dict[str, Any]:
    """
    Validate a request serializer, raising domain validation errors.

    The first field error is reported. Absent or empty fields raise
    MissingFieldError, anything else RequestValidationError.
    """
    if serializer.is_valid():
        return serializer.validated_data

    field, errors = next(iter(serializer.errors.items()))
    error = errors[0] if isinstance(errors, list) else errors
    if getattr(error, "code", None) in MISSING_CODES:
        raise MissingFieldError(field, message=str(error))
    if field == api_settings.NON_FIELD_ERRORS_KEY:
        raise RequestValidationError(str(error))
    raise RequestValidationError(f"{field}: {error}")


class CompactSerializer(serializers.Serializer):
    """Output serializer that leaves out fields whose value is None."""

    def to_representation(self, instance):
        data = super().to_representation(instance)
        return {key: value for key, value in data.items() if value is not None}
