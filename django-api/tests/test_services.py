"""Unit tests for services.

These test business rules and domain error mapping against in-memory stores.
Run with: pytest tests/test_services.py -v
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache.backends.locmem import LocMemCache

from fakes import (
    ADMIN,
    NOW,
    SHOPPER,
    FakeFileFetcher,
    FakeGateway,
    FakeMailer,
    InMemoryAuditStore,
    InMemoryCatalogStore,
    InMemoryCouponStore,
    InMemoryMessageStore,
    InMemoryOrderStore,
    InMemorySettingsStore,
    InMemoryTokenStore,
    make_coupon,
    make_order,
    make_template,
    make_token,
)
from shop.clients.interfaces import FetchedFile
from shop.domain import (
    AuditCategory,
    Customer,
    DiscountType,
    Identity,
    MessageStatus,
    Money,
    NewContactMessage,
    NewCoupon,
    OrderStatus,
    SecurityEventType,
    UserRole,
)
from shop.domain.errors import (
    CannotRemoveSelfError,
    CouponExistsError,
    CouponExpiredError,
    CouponInactiveError,
    CouponNotFoundByIdError,
    CouponNotFoundError,
    CouponNotYetActiveError,
    EmailRestrictedError,
    FileFetchFailedError,
    FileNetworkError,
    FileNotAvailableError,
    ForbiddenError,
    GatewayError,
    InvalidCouponError,
    InvalidFileFormatError,
    InvalidFileUrlError,
    InvalidOrderIdError,
    InvalidSignatureError,
    InvalidTokenError,
    MessageNotFoundError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    OrderNotPaidError,
    OutOfStockError,
    PaymentFailedError,
    PaymentNotConfiguredError,
    PaymentsDisabledError,
    TemplateNotFoundError,
    TemplateUnavailableError,
    TokenExpiredError,
    TokenNotFoundError,
    UsageLimitReachedError,
    VelocityLimitExceededError,
)
from shop.services import (
    AccessService,
    AuditService,
    ContactService,
    CouponService,
    DownloadService,
    OrderService,
    PurchaseEmailService,
    SettingsProvider,
    TokenIssuer,
    compute_discount,
)
from shop.services.settings_service import SITE_SETTINGS_KEY


def build_settings(documents=None, seed=None) -> SettingsProvider:
    return SettingsProvider(
        InMemorySettingsStore(documents),
        LocMemCache(uuid.uuid4().hex, {}),
        seed_whitelist=seed if seed is not None else [ADMIN.email],
    )


class TestDownloadService:
    """Tests for DownloadService.redeem."""

    def setup_method(self):
        self.template = make_template()
        self.order = make_order(self.template)
        self.token = make_token(self.order)
        self.tokens = InMemoryTokenStore([self.token])
        self.catalog = InMemoryCatalogStore([self.template])
        self.fetcher = FakeFileFetcher()
        self.service = DownloadService(self.tokens, self.catalog, self.fetcher)

    def test_redeem_returns_file(self):
        """A valid token yields the file named after the template slug."""
        downloaded = self.service.redeem(self.token.token, now=NOW)

        assert downloaded.content == b'{"nodes": []}'
        assert downloaded.filename == "lead-router.json"
        assert downloaded.content_type == "application/json"
        assert self.fetcher.calls == [self.template.download_file_url]

    def test_redeem_is_repeatable(self):
        """Tokens are not consumed by a download."""
        self.service.redeem(self.token.token, now=NOW)
        self.service.redeem(self.token.token, now=NOW)
        assert len(self.fetcher.calls) == 2

    @pytest.mark.parametrize("token", ["", "short", "a" * 63, "a" * 65])
    def test_wrong_length_rejected_without_lookup(self, token):
        """Tokens of length other than 64 never reach the store."""
        with pytest.raises(InvalidTokenError):
            self.service.redeem(token, now=NOW)
        assert self.tokens.lookups == []

    def test_unknown_token_not_found(self):
        with pytest.raises(TokenNotFoundError):
            self.service.redeem("f" * 64, now=NOW)

    def test_expired_token_reports_expired(self):
        """Expiry wins over a missing template."""
        expired = make_token(self.order, expires_at=NOW - timedelta(seconds=1))
        self.tokens.create_tokens([expired])
        self.catalog.templates.clear()

        with pytest.raises(TokenExpiredError):
            self.service.redeem(expired.token, now=NOW)

    def test_token_valid_at_expiry_instant(self):
        at_expiry = make_token(self.order, expires_at=NOW)
        self.tokens.create_tokens([at_expiry])
        assert self.service.redeem(at_expiry.token, now=NOW).filename == "lead-router.json"

    def test_missing_template(self):
        self.catalog.templates.clear()
        with pytest.raises(TemplateNotFoundError):
            self.service.redeem(self.token.token, now=NOW)

    def test_template_without_file(self):
        self.catalog.templates[self.template.id] = make_template(
            id=self.template.id, download_file_url=""
        )
        with pytest.raises(FileNotAvailableError):
            self.service.redeem(self.token.token, now=NOW)

    def test_network_failure(self):
        self.fetcher.error = FileNetworkError()
        with pytest.raises(FileNetworkError):
            self.service.redeem(self.token.token, now=NOW)

    def test_non_success_status(self):
        self.fetcher.response = FetchedFile(403, "application/json", b"{}")
        with pytest.raises(FileFetchFailedError):
            self.service.redeem(self.token.token, now=NOW)

    def test_html_response_means_bad_url(self):
        self.fetcher.response = FetchedFile(200, "text/html; charset=utf-8", b"<html></html>")
        with pytest.raises(InvalidFileUrlError):
            self.service.redeem(self.token.token, now=NOW)

    def test_non_json_body(self):
        self.fetcher.response = FetchedFile(200, "application/octet-stream", b"not json")
        with pytest.raises(InvalidFileFormatError):
            self.service.redeem(self.token.token, now=NOW)

    def test_blank_slug_falls_back_to_template(self):
        self.catalog.templates[self.template.id] = make_template(id=self.template.id, slug="")
        assert self.service.redeem(self.token.token, now=NOW).filename == "template.json"


class TestTokenIssuer:
    def test_issues_one_token_per_item(self):
        store = InMemoryTokenStore()
        order = make_order()

        issued = TokenIssuer(store, ttl_days=7).issue(order, now=NOW)

        assert len(issued) == 1
        assert len(issued[0].token) == 64
        assert issued[0].expires_at == NOW + timedelta(days=7)
        assert issued[0].order_id == order.id
        assert store.tokens[issued[0].token] == issued[0]

    def test_active_tokens_skip_expired(self):
        order = make_order()
        fresh = make_token(order)
        stale = make_token(order, expires_at=NOW - timedelta(days=1))
        issuer = TokenIssuer(InMemoryTokenStore([fresh, stale]))

        assert issuer.active_tokens(order, now=NOW) == [fresh]


class TestComputeDiscount:
    """Tests for the pure discount computation."""

    def test_percentage(self):
        discount = compute_discount(make_coupon(discount_value=Decimal("20")), Decimal("1000"))
        assert discount.discount_amount == Decimal("200.00")
        assert discount.final_price == Decimal("800.00")
        assert discount.discount_type is DiscountType.PERCENTAGE

    def test_fixed_capped_at_price(self):
        coupon = make_coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("200"))
        discount = compute_discount(coupon, Decimal("150"))
        assert discount.discount_amount == Decimal("150.00")
        assert discount.final_price == Decimal("0.00")

    def test_percentage_over_100_is_clamped(self):
        coupon = make_coupon(discount_value=Decimal("150"))
        discount = compute_discount(coupon, Decimal("80"))
        assert discount.discount_amount == Decimal("80.00")
        assert discount.final_price == Decimal("0.00")

    def test_is_idempotent(self):
        coupon = make_coupon(discount_value=Decimal("33"))
        assert compute_discount(coupon, Decimal("99.99")) == compute_discount(coupon, Decimal("99.99"))

    @pytest.mark.parametrize("price", ["0", "0.01", "1", "99.99", "1000", "123456.78"])
    @pytest.mark.parametrize(
        "discount_type,value",
        [
            (DiscountType.PERCENTAGE, "0"),
            (DiscountType.PERCENTAGE, "12.5"),
            (DiscountType.PERCENTAGE, "100"),
            (DiscountType.FIXED, "0"),
            (DiscountType.FIXED, "50"),
            (DiscountType.FIXED, "999999"),
        ],
    )
    def test_final_price_within_bounds(self, price, discount_type, value):
        """0 <= finalPrice <= price for every valid coupon."""
        coupon = make_coupon(discount_type=discount_type, discount_value=Decimal(value))
        discount = compute_discount(coupon, Decimal(price))
        assert Decimal("0") <= discount.final_price <= Decimal(price)
        assert discount.discount_amount + discount.final_price == Decimal(price)


class TestCouponService:
    """Tests for CouponService validation order and usage accounting."""

    def service(self, *coupons) -> CouponService:
        self.store = InMemoryCouponStore(list(coupons))
        return CouponService(self.store)

    def test_validate_normalises_code(self):
        coupon = make_coupon()
        assert self.service(coupon).validate(" save20 ", "x@example.com", now=NOW) == coupon

    def test_unknown_code(self):
        with pytest.raises(CouponNotFoundError):
            self.service().validate("NOPE", "x@example.com", now=NOW)

    def test_blank_code(self):
        with pytest.raises(CouponNotFoundError):
            self.service().validate("  ", "x@example.com", now=NOW)

    def test_inactive(self):
        with pytest.raises(CouponInactiveError):
            self.service(make_coupon(is_active=False)).validate("SAVE20", None, now=NOW)

    def test_inactive_checked_before_window(self):
        coupon = make_coupon(is_active=False, valid_until=NOW - timedelta(days=1))
        with pytest.raises(CouponInactiveError):
            self.service(coupon).validate("SAVE20", None, now=NOW)

    def test_expired(self):
        coupon = make_coupon(valid_until=NOW - timedelta(seconds=1))
        with pytest.raises(CouponExpiredError):
            self.service(coupon).validate("SAVE20", None, now=NOW)

    def test_not_yet_active(self):
        coupon = make_coupon(valid_from=NOW + timedelta(seconds=1))
        with pytest.raises(CouponNotYetActiveError):
            self.service(coupon).validate("SAVE20", None, now=NOW)

    def test_window_is_inclusive(self):
        coupon = make_coupon(valid_from=NOW, valid_until=NOW)
        assert self.service(coupon).validate("SAVE20", None, now=NOW) == coupon

    def test_usage_limit_reached_inside_window(self):
        coupon = make_coupon(usage_limit=5, usage_count=5)
        with pytest.raises(UsageLimitReachedError):
            self.service(coupon).validate("SAVE20", None, now=NOW)

    def test_email_restriction(self):
        service = self.service(make_coupon(specific_email="a@x.com"))
        with pytest.raises(EmailRestrictedError):
            service.validate("SAVE20", "b@x.com", now=NOW)
        assert service.validate("SAVE20", "A@X.com", now=NOW).code == "SAVE20"

    def test_email_restriction_without_email(self):
        with pytest.raises(EmailRestrictedError):
            self.service(make_coupon(specific_email="a@x.com")).validate("SAVE20", None, now=NOW)

    def test_quote(self):
        quote = self.service(make_coupon()).quote("SAVE20", None, Decimal("1000"), now=NOW)
        assert quote.discount.final_price == Decimal("800.00")

    def test_redeem_increments_usage(self):
        coupon = make_coupon(usage_limit=2)
        service = self.service(coupon)

        service.redeem("SAVE20", None, now=NOW)

        assert self.store.coupons[coupon.id].usage_count == 1

    def test_second_redeem_of_single_use_coupon_fails(self):
        """Of two redemptions of a single-use coupon exactly one succeeds."""
        coupon = make_coupon(usage_limit=1)
        service = self.service(coupon)

        service.redeem("SAVE20", None, now=NOW)
        with pytest.raises(UsageLimitReachedError):
            service.redeem("SAVE20", None, now=NOW)
        assert self.store.coupons[coupon.id].usage_count == 1

    def test_redeem_fails_when_slot_taken_after_validation(self):
        """A stale read that passes validation still loses the conditional increment."""
        coupon = make_coupon(usage_limit=1)
        service = self.service(coupon)
        self.store.try_increment_usage = lambda coupon_id: False

        with pytest.raises(UsageLimitReachedError):
            service.redeem("SAVE20", None, now=NOW)

    def test_create_coupon_upper_cases_code(self):
        created = self.service().create_coupon(
            NewCoupon(
                code="launch",
                discount_type=DiscountType.FIXED,
                discount_value=Decimal("50"),
                valid_from=NOW,
                valid_until=NOW + timedelta(days=1),
                specific_email=" VIP@Example.com ",
            )
        )
        assert created.code == "LAUNCH"
        assert created.specific_email == "vip@example.com"

    def test_create_rejects_percentage_over_100(self):
        with pytest.raises(InvalidCouponError):
            self.service().create_coupon(
                NewCoupon(
                    code="TOO-MUCH",
                    discount_type=DiscountType.PERCENTAGE,
                    discount_value=Decimal("101"),
                    valid_from=NOW,
                    valid_until=NOW + timedelta(days=1),
                )
            )

    def test_create_rejects_inverted_window(self):
        with pytest.raises(InvalidCouponError):
            self.service().create_coupon(
                NewCoupon(
                    code="BACKWARDS",
                    discount_type=DiscountType.FIXED,
                    discount_value=Decimal("1"),
                    valid_from=NOW,
                    valid_until=NOW - timedelta(days=1),
                )
            )

    def test_create_rejects_duplicate(self):
        with pytest.raises(CouponExistsError):
            self.service(make_coupon()).create_coupon(
                NewCoupon(
                    code="save20",
                    discount_type=DiscountType.FIXED,
                    discount_value=Decimal("1"),
                    valid_from=NOW,
                    valid_until=NOW + timedelta(days=1),
                )
            )

    def test_set_active_unknown(self):
        with pytest.raises(CouponNotFoundByIdError):
            self.service().set_active("not-a-uuid", False)

    def test_delete(self):
        coupon = make_coupon()
        service = self.service(coupon)
        service.delete_coupon(str(coupon.id))
        with pytest.raises(CouponNotFoundByIdError):
            service.delete_coupon(str(coupon.id))


class TestSettingsProvider:
    def test_initialises_document_with_seeded_whitelist(self):
        provider = build_settings(seed=["Admin@Example.com"])

        site = provider.get()

        assert site.admin_whitelist_emails == ("admin@example.com",)
        assert site.document["updatedBy"] == "system-init"
        assert provider._store.documents[SITE_SETTINGS_KEY]["enablePayments"] is True

    def test_seed_ignored_once_document_exists(self):
        provider = build_settings(
            documents={SITE_SETTINGS_KEY: {"adminWhitelistEmails": ["owner@example.com"]}},
            seed=["admin@example.com"],
        )
        assert not provider.is_whitelisted("admin@example.com")
        assert provider.is_whitelisted("OWNER@example.com")

    def test_reads_are_cached(self):
        provider = build_settings()
        provider.get()
        provider.get()
        assert provider._store.reads == 1

    def test_update_merges_and_protects_whitelist(self):
        provider = build_settings()

        site = provider.update(
            {"siteName": "New name", "adminWhitelistEmails": ["intruder@example.com"]},
            actor=ADMIN.email,
        )

        assert site.document["siteName"] == "New name"
        assert site.document["updatedBy"] == ADMIN.email
        assert site.admin_whitelist_emails == (ADMIN.email,)
        assert provider.get().document["siteName"] == "New name"

    def test_whitelist_add_and_remove(self):
        provider = build_settings()

        assert provider.add_to_whitelist("New@Example.com", ADMIN) == (ADMIN.email, "new@example.com")
        assert provider.remove_from_whitelist("new@example.com", ADMIN) == (ADMIN.email,)

    def test_cannot_remove_self(self):
        with pytest.raises(CannotRemoveSelfError):
            build_settings().remove_from_whitelist("ADMIN@example.com", ADMIN)


class TestAuditService:
    def test_record_appends_entry(self):
        store = InMemoryAuditStore()
        AuditService(store, build_settings()).record(ADMIN, "Did a thing", category=AuditCategory.SETTINGS)
        assert store.entries[0].admin_email == ADMIN.email

    def test_record_skipped_when_disabled(self):
        store = InMemoryAuditStore()
        settings = build_settings(documents={SITE_SETTINGS_KEY: {"enableAuditLog": False}})
        AuditService(store, settings).record(ADMIN, "Did a thing", category=AuditCategory.SETTINGS)
        assert store.entries == []

    def test_storage_failure_does_not_propagate(self):
        service = AuditService(InMemoryAuditStore(broken=True), build_settings())
        service.record(ADMIN, "Did a thing", category=AuditCategory.SETTINGS)
        service.record_security_event(SecurityEventType.ADMIN_LOGIN, email=ADMIN.email)

    def test_recent_logs_clamps_limit(self):
        store = InMemoryAuditStore()
        service = AuditService(store, build_settings())
        for i in range(3):
            service.record(ADMIN, f"action {i}", category=AuditCategory.ORDER)

        assert [e.action for e in service.recent_logs(0)] == ["action 2"]
        assert len(service.recent_logs(10_000)) == 3
        assert len(service.recent_logs(None)) == 3

    def test_failed_login_attempts(self):
        store = InMemoryAuditStore()
        service = AuditService(store, build_settings())
        service.record_security_event(SecurityEventType.FAILED_LOGIN, ip_address="10.0.0.1")
        service.record_security_event(SecurityEventType.FAILED_LOGIN, ip_address="10.0.0.2")
        service.record_security_event(SecurityEventType.ADMIN_LOGIN, email=ADMIN.email, ip_address="10.0.0.1")

        assert service.failed_login_attempts(now=NOW) == 2
        assert service.failed_login_attempts(ip_address="10.0.0.1", now=NOW) == 1

    def test_failed_login_attempts_outside_window(self):
        store = InMemoryAuditStore()
        service = AuditService(store, build_settings())
        service.record_security_event(SecurityEventType.FAILED_LOGIN, ip_address="10.0.0.1")

        assert service.failed_login_attempts(hours=24, now=NOW + timedelta(days=2)) == 0


class TestAccessService:
    def build(self, roles, seed=None):
        self.audit_store = InMemoryAuditStore()
        settings = build_settings(seed=seed)
        return AccessService(
            InMemoryCatalogStore(roles=roles),
            settings,
            AuditService(self.audit_store, settings),
        )

    def test_whitelisted_admin_allowed(self):
        self.build({ADMIN.uid: UserRole.ADMIN}).authorize(ADMIN, "view_audit_logs")
        assert self.audit_store.events == []

    def test_non_admin_refused_and_recorded(self):
        service = self.build({SHOPPER.uid: UserRole.USER})

        with pytest.raises(ForbiddenError):
            service.authorize(SHOPPER, "view_audit_logs", ip_address="203.0.113.9")

        event = self.audit_store.events[0]
        assert event.type is SecurityEventType.UNAUTHORIZED_ACCESS
        assert event.details == {"attempted": "view_audit_logs", "reason": "not_admin"}
        assert event.email == SHOPPER.email
        assert event.ip_address == "203.0.113.9"

    def test_admin_role_without_whitelist_refused(self):
        service = self.build({ADMIN.uid: UserRole.ADMIN}, seed=[])

        with pytest.raises(ForbiddenError):
            service.authorize(ADMIN, "update_settings")

        assert self.audit_store.events[0].details["reason"] == "not_whitelisted"

    def test_missing_profile_refused(self):
        with pytest.raises(ForbiddenError):
            self.build({}).authorize(ADMIN, "update_settings")


class TestPurchaseEmailService:
    def build(self, mailer, documents=None):
        return PurchaseEmailService(
            mailer,
            build_settings(documents=documents),
            site_url="https://store.example.com/",
            from_address="orders@example.com",
        )

    def test_deliver_renders_links_and_subject(self):
        mailer = FakeMailer()
        order = make_order()
        token = make_token(order)

        self.build(mailer).deliver(order, [token])

        sent = mailer.sent[0]
        assert sent["to"] == order.user_email
        assert sent["subject"] == "Your Purchase: Lead Router"
        assert sent["sender"] == "Template Store <orders@example.com>"
        assert f"https://store.example.com/api/downloads/{token.token}" in sent["html"]
        assert "expire 7 days" in sent["html"]

    def test_custom_body_substitutes_name(self):
        mailer = FakeMailer()
        service = self.build(
            mailer,
            documents={SITE_SETTINGS_KEY: {"emailBodyTemplate": "Welcome aboard, {{userName}}!"}},
        )
        service.deliver(make_order(), [make_token()])
        assert "Welcome aboard, Sam Shopper!" in mailer.sent[0]["html"]

    def test_send_swallows_delivery_failure(self):
        assert self.build(FakeMailer(fail=True)).send(make_order(), [make_token()]) is False

    def test_send_skipped_when_notifications_off(self):
        mailer = FakeMailer()
        service = self.build(mailer, documents={SITE_SETTINGS_KEY: {"enableEmailNotifications": False}})
        assert service.send(make_order(), [make_token()]) is False
        assert mailer.sent == []

    def test_send_skipped_without_api_key(self):
        assert self.build(FakeMailer(configured=False)).send(make_order(), [make_token()]) is False


class TestOrderService:
    """Tests for checkout and payment verification."""

    def setup_method(self):
        self.template = make_template()
        self.catalog = InMemoryCatalogStore([self.template])
        self.orders = InMemoryOrderStore()
        self.coupons = InMemoryCouponStore()
        self.tokens = InMemoryTokenStore()
        self.mailer = FakeMailer()
        self.gateways = {"razorpay": FakeGateway("razorpay"), "cashfree": FakeGateway("cashfree")}
        self.documents = {}
        self.rebuild()

    def rebuild(self):
        settings = build_settings(documents=self.documents)
        self.service = OrderService(
            orders=self.orders,
            catalog=self.catalog,
            coupons=CouponService(self.coupons),
            issuer=TokenIssuer(self.tokens),
            settings=settings,
            emails=PurchaseEmailService(self.mailer, settings, "https://store.example.com", "o@example.com"),
            gateways=self.gateways,
            velocity_limit=2,
            velocity_window_minutes=60,
        )

    def create(self, gateway="razorpay", template_id=None, coupon_code=None, identity=SHOPPER, email=None, now=NOW):
        return self.service.create_order(
            identity,
            gateway,
            template_id or str(self.template.id),
            Customer(id=identity.uid, name="Sam", email=email or identity.email),
            coupon_code=coupon_code,
            now=now,
        )

    def add_coupon(self, **overrides):
        coupon = make_coupon(**overrides)
        self.coupons.coupons[coupon.id] = coupon
        return coupon

    def test_create_order_at_full_price(self):
        session = self.create()

        assert session.order.total_amount == Money(Decimal("1000.00"))
        assert session.order.status is OrderStatus.CREATED
        assert session.gateway_order.amount == 100000
        assert self.gateways["razorpay"].created[0]["reference"].startswith("order_")

    def test_create_order_applies_coupon_and_claims_slot(self):
        coupon = make_coupon(usage_limit=1)
        self.coupons.coupons[coupon.id] = coupon

        session = self.create(coupon_code="save20")

        assert session.order.total_amount.amount == Decimal("800.00")
        assert session.order.discount_amount.amount == Decimal("200.00")
        assert session.order.coupon_code == "SAVE20"
        assert self.coupons.coupons[coupon.id].usage_count == 1

    def test_payments_disabled(self):
        self.documents[SITE_SETTINGS_KEY] = {"enablePayments": False}
        self.rebuild()
        with pytest.raises(PaymentsDisabledError):
            self.create()

    def test_gateway_not_configured(self):
        self.gateways["cashfree"].configured = False
        with pytest.raises(PaymentNotConfiguredError):
            self.create(gateway="cashfree")

    def test_velocity_limit(self):
        self.create()
        self.create()
        with pytest.raises(VelocityLimitExceededError):
            self.create()

    def test_unknown_template(self):
        with pytest.raises(TemplateNotFoundError):
            self.create(template_id="not-a-uuid")

    def test_unavailable_template(self):
        self.catalog.templates[self.template.id] = make_template(id=self.template.id, is_available=False)
        with pytest.raises(TemplateUnavailableError):
            self.create()

    def test_out_of_stock(self):
        self.catalog.templates[self.template.id] = make_template(id=self.template.id, stock_count=0)
        with pytest.raises(OutOfStockError):
            self.create()

    def test_gateway_failure(self):
        self.gateways["razorpay"].fail = True
        with pytest.raises(GatewayError):
            self.create()
        assert self.orders.orders == {}

    def test_gateway_failure_releases_coupon_slot(self):
        coupon = self.add_coupon(usage_limit=1)
        self.gateways["razorpay"].fail = True

        with pytest.raises(GatewayError):
            self.create(coupon_code="SAVE20")

        assert self.coupons.coupons[coupon.id].usage_count == 0

    def test_order_write_failure_releases_coupon_slot(self, monkeypatch):
        coupon = self.add_coupon(usage_limit=1)

        def broken(order):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(self.orders, "create_order", broken)
        with pytest.raises(RuntimeError):
            self.create(coupon_code="SAVE20")

        assert self.coupons.coupons[coupon.id].usage_count == 0

    def test_restricted_coupon_uses_verified_email(self):
        self.add_coupon(specific_email="vip@example.com")

        with pytest.raises(EmailRestrictedError):
            self.create(coupon_code="SAVE20", email="vip@example.com")

    def test_restricted_coupon_accepts_verified_email_with_other_receipt(self):
        self.add_coupon(specific_email=SHOPPER.email)

        session = self.create(coupon_code="SAVE20", email="receipts@example.com")

        assert session.order.coupon_code == "SAVE20"
        assert session.order.user_email == "receipts@example.com"

    def test_retry_supersedes_own_unpaid_coupon_order(self):
        coupon = self.add_coupon(usage_limit=1)
        first = self.create(coupon_code="SAVE20").order

        second = self.create(coupon_code="SAVE20").order

        assert self.orders.orders[first.id].status is OrderStatus.EXPIRED
        assert second.status is OrderStatus.CREATED
        assert self.coupons.coupons[coupon.id].usage_count == 1

    def test_fresh_reservation_blocks_other_buyer(self):
        self.add_coupon(usage_limit=1)
        held = self.create(coupon_code="SAVE20").order
        other = Identity(uid="uid-other", email="other@example.com")

        with pytest.raises(UsageLimitReachedError):
            self.create(coupon_code="SAVE20", identity=other, now=NOW + timedelta(minutes=5))

        assert self.orders.orders[held.id].status is OrderStatus.CREATED

    def test_stale_reservation_is_released(self):
        coupon = self.add_coupon(usage_limit=1)
        held = self.create(coupon_code="SAVE20").order
        other = Identity(uid="uid-other", email="other@example.com")

        session = self.create(coupon_code="SAVE20", identity=other, now=NOW + timedelta(minutes=31))

        assert self.orders.orders[held.id].status is OrderStatus.EXPIRED
        assert session.order.user_id == other.uid
        assert self.coupons.coupons[coupon.id].usage_count == 1

    def test_expired_order_can_still_be_paid(self):
        coupon = self.add_coupon(usage_limit=1)
        first = self.create(coupon_code="SAVE20").order
        self.create(coupon_code="SAVE20")

        paid = self.service.verify_razorpay(str(first.id), first.gateway_order_id, "pay_1", "sig", now=NOW)

        assert paid.status is OrderStatus.PAID
        assert paid.total_amount.amount == Decimal("800.00")
        assert self.coupons.coupons[coupon.id].usage_count == 1

    def test_late_payment_reclaims_released_slot(self):
        coupon = self.add_coupon(usage_limit=1)
        order = make_order(coupon_code="SAVE20", status=OrderStatus.EXPIRED)
        self.orders.orders[order.id] = order

        self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)

        assert self.coupons.coupons[coupon.id].usage_count == 1
        assert self.coupons.redemptions == [(coupon.id, order.id)]

    def test_verify_razorpay_fulfils_order(self):
        session = self.create()
        order = session.order

        paid = self.service.verify_razorpay(
            str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW
        )

        assert paid.status is OrderStatus.PAID
        assert paid.payment_id == "pay_1"
        assert len(self.tokens.tokens) == 1
        assert self.catalog.sales[self.template.id] == 1
        assert len(self.mailer.sent) == 1

    def test_verify_razorpay_is_idempotent(self):
        order = self.create().order
        self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)

        again = self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)

        assert again.status is OrderStatus.PAID
        assert len(self.tokens.tokens) == 1
        assert len(self.mailer.sent) == 1

    def test_verify_razorpay_bad_signature(self):
        order = self.create().order
        self.gateways["razorpay"].confirm_error = InvalidSignatureError()
        with pytest.raises(InvalidSignatureError):
            self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "bad")
        assert self.tokens.tokens == {}

    def test_verify_razorpay_unknown_order(self):
        with pytest.raises(OrderNotFoundError):
            self.service.verify_razorpay("not-a-uuid", "order_x", "pay_1", "sig")

    def test_verify_razorpay_mismatched_gateway_order(self):
        order = self.create().order
        with pytest.raises(InvalidOrderIdError):
            self.service.verify_razorpay(str(order.id), "order_other", "pay_1", "sig")

    def test_verify_failed_order(self):
        order = make_order(status=OrderStatus.FAILED)
        self.orders.orders[order.id] = order
        with pytest.raises(OrderAlreadyProcessedError):
            self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig")

    def test_verify_records_coupon_redemption(self):
        coupon = make_coupon()
        self.coupons.coupons[coupon.id] = coupon
        order = self.create(coupon_code="SAVE20").order

        self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)

        assert self.coupons.redemptions == [(coupon.id, order.id)]

    def test_email_failure_does_not_fail_payment(self):
        self.mailer.fail = True
        order = self.create().order
        paid = self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)
        assert paid.status is OrderStatus.PAID

    def test_verify_cashfree(self):
        order = self.create(gateway="cashfree").order

        paid = self.service.verify_cashfree(order.gateway_order_id, now=NOW)

        assert paid.status is OrderStatus.PAID
        assert paid.payment_id == "cf_payment_1"

    def test_verify_cashfree_without_successful_payment(self):
        order = self.create(gateway="cashfree").order
        self.gateways["cashfree"].confirm_error = PaymentFailedError()
        with pytest.raises(PaymentFailedError):
            self.service.verify_cashfree(order.gateway_order_id, now=NOW)
        assert self.orders.orders[order.id].status is OrderStatus.CREATED

    def test_verify_cashfree_unknown_order(self):
        with pytest.raises(OrderNotFoundError):
            self.service.verify_cashfree("cf_missing")

    def test_resend_reuses_active_tokens(self):
        order = self.create().order
        self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)
        issued = next(iter(self.tokens.tokens))

        self.service.resend_purchase_email(str(order.id), now=NOW + timedelta(days=1))

        assert len(self.tokens.tokens) == 1
        assert self.mailer.sent[-1]["subject"].startswith("[Resent]")
        assert issued in self.mailer.sent[-1]["html"]

    def test_resend_issues_fresh_tokens_after_expiry(self):
        order = self.create().order
        self.service.verify_razorpay(str(order.id), order.gateway_order_id, "pay_1", "sig", now=NOW)

        self.service.resend_purchase_email(str(order.id), now=NOW + timedelta(days=8))

        assert len(self.tokens.tokens) == 2

    def test_resend_requires_paid_order(self):
        order = self.create().order
        with pytest.raises(OrderNotPaidError):
            self.service.resend_purchase_email(str(order.id))


class TestContactService:
    def setup_method(self):
        self.store = InMemoryMessageStore()
        self.service = ContactService(self.store)

    def submit(self, subject="Question"):
        return self.service.submit(
            NewContactMessage(name="Sam", email="sam@example.com", subject=subject, message="Hello")
        )

    def test_submit_stores_unread_message(self):
        saved = self.submit()

        assert saved.status is MessageStatus.UNREAD
        assert self.store.messages[saved.id].subject == "Question"

    def test_list_is_newest_first(self):
        self.submit("first")
        self.submit("second")

        assert [m.subject for m in self.service.list_messages()] == ["second", "first"]

    def test_set_status(self):
        saved = self.submit()

        updated = self.service.set_status(str(saved.id), MessageStatus.REPLIED)

        assert updated.status is MessageStatus.REPLIED

    @pytest.mark.parametrize("message_id", ["not-a-uuid", str(uuid.uuid4())])
    def test_set_status_unknown_message(self, message_id):
        with pytest.raises(MessageNotFoundError):
            self.service.set_status(message_id, MessageStatus.READ)
