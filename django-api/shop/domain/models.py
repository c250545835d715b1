"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in shop/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from shop.domain.value_objects import (
    AuditCategory,
    CouponId,
    DiscountType,
    MessageId,
    MessageStatus,
    Money,
    OrderId,
    OrderStatus,
    SecurityEventType,
    TemplateId,
)


@dataclass(frozen=True)
class Template:
    """Domain representation of a purchasable automation template."""

    id: TemplateId
    title: str
    slug: str
    price: Money
    currency: str
    download_file_url: str
    is_available: bool
    stock_count: int | None
    created_at: datetime

    @property
    def in_stock(self) -> bool:
        return self.stock_count is None or self.stock_count > 0


@dataclass(frozen=True)
class DownloadToken:
    """Issued once at purchase completion, never mutated."""

    token: str
    template_id: TemplateId
    order_id: OrderId
    user_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class DownloadedFile:
    content: bytes
    filename: str
    content_type: str = "application/json"


@dataclass(frozen=True)
class Coupon:
    """Domain representation of a discount coupon."""

    id: CouponId
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    usage_limit: int | None
    usage_count: int
    specific_email: str | None
    is_active: bool
    created_at: datetime

    @property
    def limit_reached(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit


@dataclass(frozen=True)
class NewCoupon:
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    valid_from: datetime
    valid_until: datetime
    usage_limit: int | None = None
    specific_email: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Discount:
    discount_type: DiscountType
    discount_amount: Decimal
    final_price: Decimal


@dataclass(frozen=True)
class CouponQuote:
    coupon: Coupon
    discount: Discount


@dataclass(frozen=True)
class Identity:
    """A caller verified by the identity provider."""

    uid: str
    email: str

    @property
    def is_authenticated(self) -> bool:
        return True


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class OrderItem:
    template_id: TemplateId
    template_title: str
    price_at_purchase: Money


@dataclass(frozen=True)
class NewOrder:
    user_id: str
    user_email: str
    user_name: str
    items: tuple[OrderItem, ...]
    total_amount: Money
    discount_amount: Money
    coupon_code: str | None
    currency: str
    gateway: str
    gateway_order_id: str


@dataclass(frozen=True)
class Order:
    """Domain representation of a checkout."""

    id: OrderId
    user_id: str
    user_email: str
    user_name: str
    items: tuple[OrderItem, ...]
    total_amount: Money
    discount_amount: Money
    coupon_code: str | None
    currency: str
    status: OrderStatus
    gateway: str
    gateway_order_id: str
    payment_id: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class GatewayOrder:
    """Order as acknowledged by a payment gateway.

    ``amount`` is in the unit the gateway reports: minor units for
    Razorpay, major units for Cashfree.
    """

    gateway_order_id: str
    amount: int | Decimal
    currency: str
    payment_session_id: str | None = None


@dataclass(frozen=True)
class CheckoutSession:
    order: Order
    gateway_order: GatewayOrder


@dataclass(frozen=True)
class AuditLogEntry:
    admin_id: str
    admin_email: str
    action: str
    category: AuditCategory
    details: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    timestamp: datetime | None = None
    id: int | None = None


@dataclass(frozen=True)
class SecurityEvent:
    type: SecurityEventType
    details: dict[str, Any] = field(default_factory=dict)
    email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    timestamp: datetime | None = None
    id: int | None = None


@dataclass(frozen=True)
class SiteSettings:
    """Typed view over the flat site-settings document."""

    document: dict[str, Any]

    @property
    def admin_whitelist_emails(self) -> tuple[str, ...]:
        emails = self.document.get("adminWhitelistEmails") or []
        return tuple(e.strip().lower() for e in emails if e and e.strip())

    @property
    def maintenance_mode(self) -> bool:
        return bool(self.document.get("maintenanceMode", False))

    @property
    def enable_payments(self) -> bool:
        return self.document.get("enablePayments", True) is not False

    @property
    def enable_email_notifications(self) -> bool:
        return self.document.get("enableEmailNotifications", True) is not False

    @property
    def enable_audit_log(self) -> bool:
        return self.document.get("enableAuditLog", True) is not False

    @property
    def default_currency(self) -> str:
        return self.document.get("defaultCurrency") or "INR"

    @property
    def email_subject_template(self) -> str:
        return self.document.get("emailSubjectTemplate") or "Your Purchase: {{templateName}}"

    @property
    def email_body_template(self) -> str:
        return self.document.get("emailBodyTemplate") or ""

    @property
    def email_from_name(self) -> str:
        return self.document.get("emailFromName") or "Template Store"

    def public(self) -> dict[str, Any]:
        """Document without fields that must not leave the admin API."""
        return {k: v for k, v in self.document.items() if k != "adminWhitelistEmails"}


@dataclass(frozen=True)
class NewContactMessage:
    name: str
    email: str
    subject: str
    message: str
    user_id: str | None = None


@dataclass(frozen=True)
class ContactMessage:
    """Message left through the public contact form."""

    id: MessageId
    name: str
    email: str
    subject: str
    message: str
    user_id: str | None
    status: MessageStatus
    created_at: datetime
