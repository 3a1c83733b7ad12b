"""
VerifyLicenseHandler.

Checks a license key with the payment provider.
"""

from licenses.application.dto.license_dto import PurchaseDTO, VerificationDTO
from licenses.application.queries.verify_license import VerifyLicenseQuery
from licenses.ports.license_verifier import LicenseVerifier


class VerifyLicenseHandler:
    """Handler for VerifyLicenseQuery."""

    def __init__(self, verifier: LicenseVerifier):
        """Initialize handler with the upstream verifier."""
        self.verifier = verifier

    async def handle(self, query: VerifyLicenseQuery) -> VerificationDTO:
        """
        Handle verify license query.

        Args:
            query: VerifyLicenseQuery

        Returns:
            VerificationDTO

        Raises:
            UpstreamVerificationFailedError: If the provider errors or times out
        """
        result = await self.verifier.verify(query.license_key.strip(), query.product_permalink)
        purchase = None
        if result.purchase:
            purchase = PurchaseDTO(
                email=result.purchase.email,
                purchase_id=result.purchase.purchase_id,
                full_name=result.purchase.full_name,
                created_at=result.purchase.created_at,
                refunded=result.purchase.refunded,
                chargebacked=result.purchase.chargebacked,
            )
        return VerificationDTO(
            success=result.success,
            valid=result.valid,
            message=result.message,
            purchase=purchase,
        )
