"""
License domain services.

License resolution turns whatever key a client sends into exactly one
License record, whichever naming convention the key follows.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from core.domain.exceptions import LicenseConflictError, LicenseNotFoundError
from licenses.domain.license import License, normalize_license_key
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.license_verifier import LicenseVerifier

logger = logging.getLogger(__name__)

SYNTHESIZED_OWNER_EMAIL = "gumroad-user@example.com"

SOURCE_CALLER = "caller"
SOURCE_UPSTREAM = "upstream"


@dataclass(frozen=True)
class LookupStep:
    """One strategy in the resolution chain."""

    name: str
    find: Callable[[str], Awaitable[Optional[License]]]
    prepare: Callable[[str], str]


@dataclass(frozen=True)
class Resolution:
    """Resolved license and how it was found."""

    license: License
    matched_by: str
    synthesized_from: Optional[str] = None


class LicenseResolver:
    """
    Resolve caller-supplied keys to License records.

    Lookup order: exact external key, exact local key, then normalized
    form among active licenses. First match wins.
    """

    def __init__(
        self,
        repository: LicenseRepository,
        verifier: Optional[LicenseVerifier] = None,
        synthesize_verified: bool = True,
    ):
        """
        Initialize resolver.

        Args:
            repository: License repository
            verifier: Optional upstream verifier consulted for unknown keys
            synthesize_verified: Create a license for unknown keys the
                caller says were already verified upstream
        """
        self.repository = repository
        self.verifier = verifier
        self.synthesize_verified = synthesize_verified
        self.steps: List[LookupStep] = [
            LookupStep("external_key", repository.find_by_external_key, str.strip),
            LookupStep("key", repository.find_by_key, str.strip),
            LookupStep(
                "normalized_key",
                repository.find_active_by_normalized_key,
                normalize_license_key,
            ),
        ]

    async def lookup(self, raw_key: str) -> Optional[Resolution]:
        """Run the lookup chain without any synthesis."""
        for step in self.steps:
            candidate = step.prepare(raw_key)
            if not candidate:
                continue
            license = await step.find(candidate)
            if license:
                logger.debug("Resolved license %s by %s", license.id, step.name)
                return Resolution(license=license, matched_by=step.name)
        return None

    async def resolve(self, raw_key: str, caller_verified: bool = False) -> Resolution:
        """
        Resolve a key, synthesizing a license when policy allows.

        Args:
            raw_key: Key as sent by the caller
            caller_verified: Caller asserts the provider already verified the key

        Returns:
            Resolution

        Raises:
            LicenseNotFoundError: If no license matches and none may be created
            UpstreamVerificationFailedError: If the upstream verifier fails
        """
        if not normalize_license_key(raw_key):
            raise LicenseNotFoundError()

        resolution = await self.lookup(raw_key)
        if resolution:
            return resolution

        if caller_verified and self.synthesize_verified:
            license = License.create(
                email=SYNTHESIZED_OWNER_EMAIL,
                external_key=raw_key,
            )
            return await self._store_synthesized(raw_key, license, SOURCE_CALLER)

        if self.verifier is not None:
            result = await self.verifier.verify(raw_key.strip())
            if result.valid and result.purchase:
                license = await self._license_for_purchase(raw_key, result.purchase)
                return await self._store_synthesized(raw_key, license, SOURCE_UPSTREAM)
            logger.info("Upstream rejected unknown key: %s", result.message)

        raise LicenseNotFoundError()

    async def _license_for_purchase(self, raw_key: str, purchase) -> License:
        """Reuse the license of a known purchase, or build a new one."""
        if purchase.purchase_id:
            existing = await self.repository.find_by_purchase_id(purchase.purchase_id)
            if existing:
                return existing.with_external_key(raw_key)
        return License.create(
            email=purchase.email or SYNTHESIZED_OWNER_EMAIL,
            external_key=raw_key,
            purchase_id=purchase.purchase_id,
            purchased_at=purchase.created_at,
        )

    async def _store_synthesized(self, raw_key: str, license: License, source: str) -> Resolution:
        """Persist a synthesized license, tolerating a concurrent insert of the same key."""
        try:
            saved = await self.repository.save(license)
        except LicenseConflictError:
            resolution = await self.lookup(raw_key)
            if resolution is None:
                raise
            return resolution
        logger.info("Synthesized license %s from %s verification", saved.id, source)
        return Resolution(license=saved, matched_by="synthesized", synthesized_from=source)
