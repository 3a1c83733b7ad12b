"""
Unit tests for License domain entity.
"""

import re
import uuid

import pytest

from licenses.domain.license import License, normalize_license_key
from licenses.domain.license_key import generate_license_key


class TestNormalizeLicenseKey:
    """Tests for key normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("abcde-12345", "ABCDE12345"),
            ("ABCDE12345", "ABCDE12345"),
            (" ab cd-e1 2345 ", "ABCDE12345"),
            ("a-b-c", "ABC"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_license_key(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "  ", "---"])
    def test_empty_forms(self, raw):
        assert normalize_license_key(raw) == ""


class TestLicenseEntity:
    """Tests for License domain entity."""

    def test_create_license(self):
        """Test creating a license entity."""
        license = License.create(
            email="buyer@example.com",
            external_key="  ABCDE-12345 ",
            purchase_id="sale-1",
        )

        assert isinstance(license.id, uuid.UUID)
        assert license.external_key == "ABCDE-12345"
        assert license.key is None
        assert license.is_active is True
        assert str(license.email) == "buyer@example.com"
        assert license.display_key == "ABCDE-12345"

    def test_create_license_with_explicit_id(self):
        license_id = uuid.uuid4()
        license = License.create(email="buyer@example.com", key="LOCAL", license_id=license_id)
        assert license.id == license_id
        assert license.display_key == "LOCAL"

    def test_license_needs_a_key(self):
        """Test that a license without any key is rejected."""
        with pytest.raises(ValueError, match="needs an external key or a local key"):
            License.create(email="buyer@example.com")

    def test_license_key_too_long(self):
        with pytest.raises(ValueError, match="too long"):
            License.create(email="buyer@example.com", external_key="K" * 256)

    def test_invalid_email(self):
        with pytest.raises(ValueError, match="Invalid email"):
            License.create(email="nobody", external_key="KEY")

    def test_deactivate_and_reactivate(self):
        """Test administrative deactivation round trip."""
        license = License.create(email="buyer@example.com", external_key="KEY")
        deactivated = license.deactivate()

        assert deactivated.is_active is False
        assert license.is_active is True
        assert deactivated.deactivate() is deactivated
        assert deactivated.reactivate().is_active is True

    def test_with_keys_return_copies(self):
        license = License.create(email="buyer@example.com", external_key="OLD")
        updated = license.with_external_key(" NEW ").with_local_key("LOCAL")

        assert updated.id == license.id
        assert updated.external_key == "NEW"
        assert updated.key == "LOCAL"
        assert license.external_key == "OLD"


class TestGenerateLicenseKey:
    """Tests for local key generation."""

    def test_format(self):
        key = generate_license_key()
        assert re.fullmatch(r"[0-9A-F]{5}(-[0-9A-F]{5}){4}", key)

    def test_keys_differ(self):
        assert generate_license_key() != generate_license_key()
