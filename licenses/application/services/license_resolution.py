"""
License resolution service.

Application-level wrapper around LicenseResolver that publishes
LicenseSynthesized when resolution had to create a record.
"""

import logging

from core.domain.exceptions import LicenseNotFoundError
from core.infrastructure.events import event_bus
from licenses.domain.events import LicenseSynthesized
from licenses.domain.license import License
from licenses.domain.services import LicenseResolver

logger = logging.getLogger(__name__)


async def resolve_license(
    resolver: LicenseResolver,
    raw_key: str,
    caller_verified: bool = False,
) -> License:
    """
    Resolve a caller-supplied key to a License, creating one when allowed.

    Args:
        resolver: License resolver
        raw_key: Key as sent by the caller
        caller_verified: Caller asserts the provider already verified the key

    Returns:
        License entity

    Raises:
        LicenseNotFoundError: If the key resolves to nothing
    """
    resolution = await resolver.resolve(raw_key, caller_verified=caller_verified)
    if resolution.synthesized_from:
        await event_bus.publish(
            LicenseSynthesized(
                license_id=resolution.license.id,
                source=resolution.synthesized_from,
            )
        )
    return resolution.license


async def find_license(resolver: LicenseResolver, raw_key: str) -> License:
    """
    Resolve a key to an existing License without creating anything.

    Raises:
        LicenseNotFoundError: If the key resolves to nothing
    """
    resolution = await resolver.lookup(raw_key)
    if resolution is None:
        raise LicenseNotFoundError()
    return resolution.license
