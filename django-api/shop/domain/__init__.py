from shop.domain.models import (
    AuditLogEntry,
    CheckoutSession,
    ContactMessage,
    Coupon,
    CouponQuote,
    Customer,
    Discount,
    DownloadedFile,
    DownloadToken,
    GatewayOrder,
    Identity,
    NewContactMessage,
    NewCoupon,
    NewOrder,
    Order,
    OrderItem,
    SecurityEvent,
    SiteSettings,
    Template,
)
from shop.domain.value_objects import (
    AuditCategory,
    CouponCode,
    CouponId,
    DiscountType,
    DownloadTokenValue,
    EmailAddress,
    MessageId,
    MessageStatus,
    Money,
    OrderId,
    OrderStatus,
    SecurityEventType,
    TemplateId,
    UserRole,
)

__all__ = [
    "AuditLogEntry",
    "CheckoutSession",
    "ContactMessage",
    "Coupon",
    "CouponQuote",
    "Customer",
    "Discount",
    "DownloadedFile",
    "DownloadToken",
    "GatewayOrder",
    "Identity",
    "NewContactMessage",
    "NewCoupon",
    "NewOrder",
    "Order",
    "OrderItem",
    "SecurityEvent",
    "SiteSettings",
    "Template",
    "AuditCategory",
    "CouponCode",
    "CouponId",
    "DiscountType",
    "DownloadTokenValue",
    "EmailAddress",
    "MessageId",
    "MessageStatus",
    "Money",
    "OrderId",
    "OrderStatus",
    "SecurityEventType",
    "TemplateId",
    "UserRole",
]
