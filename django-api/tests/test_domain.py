"""Unit tests for domain primitives.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from fakes import NOW, make_coupon, make_token
from shop.domain import (
    CouponCode,
    DownloadTokenValue,
    EmailAddress,
    Money,
    SiteSettings,
    TemplateId,
)
from shop.domain.errors import (
    CouponExpiredError,
    DomainError,
    ErrorCode,
    ForbiddenError,
    TokenNotFoundError,
)


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        """Money can be created with positive amount."""
        assert Money(Decimal("49.99")).amount == Decimal("49.99")

    def test_money_accepts_zero(self):
        """Money can be created with zero."""
        assert Money(Decimal("0")).amount == 0

    def test_money_rejects_negative_amount(self):
        """Money raises ValueError for negative amount."""
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"))

    def test_money_str_format(self):
        """Money string representation is formatted to 2 decimal places."""
        assert str(Money(Decimal("5"))) == "5.00"

    def test_money_minor_units(self):
        """Amounts convert to paise with half-up rounding."""
        assert Money(Decimal("499.50")).minor_units() == 49950
        assert Money(Decimal("0.005")).minor_units() == 1


class TestDownloadTokenValue:
    """Tests for the download token format."""

    def test_accepts_64_characters(self):
        token = DownloadTokenValue("a" * 64)
        assert token.prefix == "aaaaaaaa"

    @pytest.mark.parametrize("value", ["", "a" * 63, "a" * 65])
    def test_rejects_other_lengths(self, value):
        with pytest.raises(ValueError):
            DownloadTokenValue(value)


class TestCouponCode:
    def test_normalises_to_upper_case(self):
        assert CouponCode("  save20 ").value == "SAVE20"

    def test_rejects_blank(self):
        with pytest.raises(ValueError):
            CouponCode("   ")


class TestEmailAddress:
    def test_normalises_to_lower_case(self):
        assert EmailAddress(" A@X.com ").value == "a@x.com"

    def test_matches_ignores_case(self):
        assert EmailAddress("a@x.com").matches("A@X.COM")
        assert not EmailAddress("a@x.com").matches("b@x.com")

    def test_rejects_malformed(self):
        with pytest.raises(ValueError):
            EmailAddress("not-an-email")


class TestIdentifiers:
    def test_template_id_from_string(self):
        raw = uuid.uuid4()
        assert TemplateId.from_string(str(raw)).value == raw

    def test_template_id_rejects_malformed(self):
        with pytest.raises(ValueError):
            TemplateId.from_string("not-a-uuid")


class TestDomainModels:
    def test_token_expires_strictly_after_expiry(self):
        """A token is still valid at its exact expiry instant."""
        token = make_token(expires_at=NOW)
        assert not token.is_expired(NOW)
        assert token.is_expired(NOW + timedelta(microseconds=1))

    def test_coupon_limit_reached(self):
        assert make_coupon(usage_limit=3, usage_count=3).limit_reached
        assert not make_coupon(usage_limit=3, usage_count=2).limit_reached
        assert not make_coupon(usage_limit=None, usage_count=1000).limit_reached


class TestSiteSettings:
    def test_public_view_hides_whitelist(self):
        site = SiteSettings({"siteName": "Store", "adminWhitelistEmails": ["a@x.com"]})
        assert site.public() == {"siteName": "Store"}

    def test_flags_default_to_enabled(self):
        site = SiteSettings({})
        assert site.enable_payments
        assert site.enable_audit_log
        assert site.enable_email_notifications
        assert site.default_currency == "INR"

    def test_flags_switch_off_only_when_false(self):
        site = SiteSettings({"enablePayments": False, "enableAuditLog": False})
        assert not site.enable_payments
        assert not site.enable_audit_log

    def test_whitelist_is_normalised(self):
        site = SiteSettings({"adminWhitelistEmails": [" Admin@X.com ", ""]})
        assert site.admin_whitelist_emails == ("admin@x.com",)


class TestDomainErrors:
    def test_error_carries_code_and_message(self):
        err = TokenNotFoundError()
        assert err.code is ErrorCode.TOKEN_NOT_FOUND
        assert str(err) == "TOKEN_NOT_FOUND: Invalid or expired download token"

    def test_errors_share_base(self):
        assert isinstance(CouponExpiredError(), DomainError)
        assert ForbiddenError().code is ErrorCode.FORBIDDEN
