"""
Handler factories for the v1 API.

Views build their application handlers here, wired to the Django
repositories and to settings read at call time.
"""

from django.conf import settings

from activations.application.handlers.activate_license_handler import ActivateLicenseHandler
from activations.application.handlers.cleanup_expired_records_handler import (
    CleanupExpiredRecordsHandler,
)
from activations.application.handlers.deactivate_license_handler import DeactivateLicenseHandler
from activations.application.handlers.validate_license_handler import ValidateLicenseHandler
from activations.domain.policy import ActivationPolicy
from activations.domain.services import ActivationStateMachine, CooldownTracker
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.repositories.django_cooldown_repository import (
    DjangoCooldownRepository,
)
from licenses.application.handlers.generate_license_key_handler import GenerateLicenseKeyHandler
from licenses.application.handlers.record_purchase_handler import RecordPurchaseHandler
from licenses.application.handlers.verify_license_handler import VerifyLicenseHandler
from licenses.domain.services import LicenseResolver
from licenses.infrastructure.gumroad_verifier import GumroadLicenseVerifier
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Repositories are stateless and shared
_license_repo = DjangoLicenseRepository()
_activation_repo = DjangoActivationRepository()
_cooldown_repo = DjangoCooldownRepository()


def build_license_resolver() -> LicenseResolver:
    """Resolver consulting Gumroad only when a product permalink is configured."""
    verifier = None
    if getattr(settings, "GUMROAD_PRODUCT_PERMALINK", None):
        verifier = GumroadLicenseVerifier.from_settings()
    return LicenseResolver(
        _license_repo,
        verifier=verifier,
        synthesize_verified=getattr(settings, "LICENSE_SYNTHESIZE_VERIFIED_KEYS", True),
    )


def build_state_machine() -> ActivationStateMachine:
    policy = ActivationPolicy.from_settings()
    return ActivationStateMachine(
        _activation_repo,
        CooldownTracker(_cooldown_repo, policy.cooldown_window),
        policy=policy,
    )


def build_activate_handler() -> ActivateLicenseHandler:
    return ActivateLicenseHandler(build_license_resolver(), build_state_machine())


def build_deactivate_handler() -> DeactivateLicenseHandler:
    return DeactivateLicenseHandler(build_license_resolver(), build_state_machine())


def build_validate_handler() -> ValidateLicenseHandler:
    return ValidateLicenseHandler(build_license_resolver(), build_state_machine())


def build_cleanup_handler() -> CleanupExpiredRecordsHandler:
    policy = ActivationPolicy.from_settings()
    return CleanupExpiredRecordsHandler(
        CooldownTracker(_cooldown_repo, policy.cooldown_window),
        _activation_repo,
        policy,
    )


def build_record_purchase_handler() -> RecordPurchaseHandler:
    return RecordPurchaseHandler(_license_repo)


def build_generate_key_handler() -> GenerateLicenseKeyHandler:
    return GenerateLicenseKeyHandler(_license_repo)


def build_verify_handler() -> VerifyLicenseHandler:
    return VerifyLicenseHandler(GumroadLicenseVerifier.from_settings())
