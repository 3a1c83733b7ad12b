"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""
from datetime import datetime
from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def details(self) -> Dict[str, Any]:
        """Extra fields rendered next to code and message."""
        return {}


class RequestValidationError(DomainException):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str = "Invalid request", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class MissingFieldError(RequestValidationError):
    """Raised when a required field is absent from a request payload."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Missing {field}", code="MISSING_FIELD")
        self.field = field

    def details(self) -> Dict[str, Any]:
        return {"field": self.field}


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when no license matches the supplied key."""

    def __init__(self, message: str = "Invalid or unknown license key"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class LicenseDeactivatedError(LicenseException):
    """Raised when a license was deactivated by an administrator."""

    def __init__(self, message: str = "This license key has been deactivated"):
        super().__init__(message, code="LICENSE_DEACTIVATED")


class LicenseConflictError(LicenseException):
    """Raised when a license write collides with an existing record."""

    def __init__(self, message: str = "A license with the same identifiers already exists"):
        super().__init__(message, code="LICENSE_CONFLICT")


class ActivationException(DomainException):
    """Base exception for activation-related errors."""

    pass


class AlreadyActivatedElsewhereError(ActivationException):
    """Raised when the license is bound to another device."""

    def __init__(
        self,
        message: str = "This license key is already activated on another device",
    ):
        super().__init__(message, code="ALREADY_ACTIVATED_ELSEWHERE")


class InCooldownError(ActivationException):
    """Raised when a live cooldown blocks binding a new device."""

    def __init__(self, hours_remaining: int, ends_at: datetime, message: Optional[str] = None):
        super().__init__(
            message
            or (
                "This license key is in a cooldown period. "
                f"Please try again in {hours_remaining} hours."
            ),
            code="IN_COOLDOWN",
        )
        self.hours_remaining = hours_remaining
        self.ends_at = ends_at

    def details(self) -> Dict[str, Any]:
        return {
            "cooldown": True,
            "cooldownEnds": self.ends_at.isoformat(),
            "hoursRemaining": self.hours_remaining,
        }


class NotActivatedOnDeviceError(ActivationException):
    """Raised when deactivating a device that holds no active binding."""

    def __init__(
        self,
        message: str = "This device is not activated with this license key",
    ):
        super().__init__(message, code="NOT_ACTIVATED_ON_DEVICE")


class InfrastructureException(DomainException):
    """Base exception for transient infrastructure failures."""

    pass


class StoreUnavailableError(InfrastructureException):
    """Raised when the database cannot serve a request."""

    def __init__(self, message: str = "License store is unavailable"):
        super().__init__(message, code="STORE_UNAVAILABLE")


class UpstreamVerificationFailedError(InfrastructureException):
    """Raised when the external license provider errors or times out."""

    def __init__(self, message: str = "License verification provider is unavailable"):
        super().__init__(message, code="UPSTREAM_VERIFICATION_FAILED")
