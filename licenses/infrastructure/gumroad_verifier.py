"""
Gumroad implementation of the LicenseVerifier port.

Calls the Gumroad license verification API and caches successful answers.
"""
import hashlib
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import requests
from asgiref.sync import sync_to_async
from django.conf import settings

from core.domain.exceptions import UpstreamVerificationFailedError
from core.metrics import upstream_verifications_total
from core.infrastructure.cache import CachePort
from core.infrastructure.cache_adapters import cache_adapter
from licenses.ports.license_verifier import LicenseVerifier, VerificationResult, VerifiedPurchase

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://api.gumroad.com/v2/licenses/verify"
DEFAULT_TIMEOUT_SECONDS = 10
CACHE_TTL_VERIFICATION = 300  # 5 minutes


class GumroadLicenseVerifier(LicenseVerifier):
    """Verify license keys against Gumroad."""

    def __init__(
        self,
        product_permalink: Optional[str] = None,
        verify_url: str = DEFAULT_VERIFY_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        cache: Optional[CachePort] = None,
        cache_ttl: int = CACHE_TTL_VERIFICATION,
    ):
        self.product_permalink = product_permalink
        self.verify_url = verify_url
        self.timeout = timeout
        self.cache = cache or cache_adapter
        self.cache_ttl = cache_ttl

    @classmethod
    def from_settings(cls) -> "GumroadLicenseVerifier":
        """Build a verifier from Django settings."""
        return cls(
            product_permalink=getattr(settings, "GUMROAD_PRODUCT_PERMALINK", None) or None,
            verify_url=getattr(settings, "GUMROAD_VERIFY_URL", DEFAULT_VERIFY_URL),
            timeout=getattr(settings, "GUMROAD_VERIFY_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            cache_ttl=getattr(settings, "VERIFICATION_CACHE_TTL", CACHE_TTL_VERIFICATION),
        )

    @staticmethod
    def _cache_key(license_key: str, product_permalink: str) -> str:
        """Generate cache key for a verification result."""
        combined = f"{product_permalink}:{license_key}"
        return f"license:verification:{hashlib.sha256(combined.encode()).hexdigest()[:16]}"

    async def verify(self, license_key: str, product_permalink: Optional[str] = None) -> VerificationResult:
        """
        Verify a license key with Gumroad.

        Args:
            license_key: Key to verify
            product_permalink: Product permalink (defaults to the configured one)

        Returns:
            VerificationResult
        """
        permalink = product_permalink or self.product_permalink
        if not permalink:
            raise UpstreamVerificationFailedError("No product configured for license verification")

        cache_key = self._cache_key(license_key, permalink)
        cached = await self.cache.get(cache_key)
        if cached:
            upstream_verifications_total.labels(result="cached").inc()
            return self._to_result(cached)

        try:
            payload = await sync_to_async(self._post, thread_sensitive=False)(license_key, permalink)
        except UpstreamVerificationFailedError:
            upstream_verifications_total.labels(result="error").inc()
            raise
        result = self._to_result(payload)
        upstream_verifications_total.labels(result="valid" if result.valid else "invalid").inc()
        if result.success:
            await self.cache.set(cache_key, payload, timeout=self.cache_ttl)
        return result

    def _post(self, license_key: str, product_permalink: str) -> Dict[str, Any]:
        """Blocking HTTP call to the verification endpoint."""
        try:
            response = requests.post(
                self.verify_url,
                json={"product_permalink": product_permalink, "license_key": license_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Gumroad verification request failed: %s", e)
            raise UpstreamVerificationFailedError() from e

        # Gumroad answers unknown keys with 404 and a JSON body
        if response.status_code >= 500:
            logger.warning("Gumroad verification returned %s", response.status_code)
            raise UpstreamVerificationFailedError()
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Gumroad verification returned non-JSON body")
            raise UpstreamVerificationFailedError() from e
        if not isinstance(data, dict):
            raise UpstreamVerificationFailedError()
        return data

    @staticmethod
    def _to_result(data: Dict[str, Any]) -> VerificationResult:
        """Map a Gumroad response body to a VerificationResult."""
        success = bool(data.get("success"))
        purchase_data = data.get("purchase") or {}
        purchase = None
        if success and purchase_data:
            purchase = VerifiedPurchase(
                email=purchase_data.get("email") or "",
                purchase_id=purchase_data.get("sale_id") or purchase_data.get("id"),
                full_name=purchase_data.get("full_name"),
                created_at=_parse_timestamp(purchase_data.get("created_at")),
                refunded=bool(purchase_data.get("refunded")),
                chargebacked=bool(purchase_data.get("chargebacked")),
            )
        valid = success and purchase is not None and not purchase.chargebacked
        message = data.get("message") or ("License key is valid" if success else "Invalid license key")
        return VerificationResult(success=success, valid=valid, message=message, purchase=purchase)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the provider, if present."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
