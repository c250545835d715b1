"""Serializers for request validation and for rendering domain models.

Input serializers check request shape only; business rules live in the
services. Output serializers read frozen domain dataclasses.
"""

from rest_framework import serializers

from shop.clients import GATEWAYS
from shop.domain import DiscountType, MessageStatus

# ── Requests ───────────────────────────────────────────────────────────────────


class CouponVerifySerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64, trim_whitespace=True)
    userEmail = serializers.EmailField()
    templatePrice = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )


class CouponCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64, trim_whitespace=True)
    discountType = serializers.ChoiceField(choices=[t.value for t in DiscountType])
    discountValue = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    validFrom = serializers.DateTimeField()
    validUntil = serializers.DateTimeField()
    usageLimit = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)
    specificEmail = serializers.EmailField(required=False, allow_blank=True, allow_null=True, default=None)
    isActive = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        if attrs["discountType"] == DiscountType.PERCENTAGE.value and attrs["discountValue"] > 100:
            raise serializers.ValidationError({"discountValue": "Percentage discount cannot exceed 100"})
        if attrs["validUntil"] < attrs["validFrom"]:
            raise serializers.ValidationError({"validUntil": "Must not be earlier than validFrom"})
        return attrs


class CouponToggleSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()


class WhitelistChangeSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["add", "remove"])
    email = serializers.EmailField()


class AuditLogQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["audit", "security"], required=False, default="audit")
    limit = serializers.IntegerField(required=False, default=None, allow_null=True)


class CreateOrderSerializer(serializers.Serializer):
    templateId = serializers.CharField(max_length=64)
    userEmail = serializers.EmailField()
    userName = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    couponCode = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True, default=None)
    returnUrl = serializers.URLField(required=False, allow_blank=True, default="")


class RazorpayVerifySerializer(serializers.Serializer):
    orderId = serializers.CharField(max_length=64)
    razorpay_order_id = serializers.CharField(max_length=128)
    razorpay_payment_id = serializers.CharField(max_length=128)
    razorpay_signature = serializers.CharField(max_length=256)


class CashfreeVerifySerializer(serializers.Serializer):
    orderId = serializers.CharField(max_length=128)


class ResendEmailSerializer(serializers.Serializer):
    orderId = serializers.CharField(max_length=64)


class ContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField(max_length=5000)
    userId = serializers.CharField(max_length=128, required=False, allow_blank=True, allow_null=True, default=None)


class MessageStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[MessageStatus.READ.value, MessageStatus.REPLIED.value]
    )


def _text(max_length: int = 500) -> serializers.CharField:
    return serializers.CharField(max_length=max_length, required=False, allow_blank=True)


class SocialLinksSerializer(serializers.Serializer):
    twitter = _text()
    github = _text()
    linkedin = _text()
    instagram = _text()
    youtube = _text()


class AnalyticsSerializer(serializers.Serializer):
    googleAnalyticsId = _text(64)
    metaPixelId = _text(64)


class SiteSettingsUpdateSerializer(serializers.Serializer):
    """Known site-settings fields; only the keys sent are changed.

    Unknown keys are dropped. Booleans accept the usual JSON and form
    spellings, so ``"false"`` is stored as ``False``.
    """

    siteName = _text(200)
    siteDescription = _text(2000)
    logoUrl = _text()
    favicon = _text()
    heroTitle = _text(200)
    heroDescription = _text(2000)
    footerText = _text(2000)
    supportEmail = serializers.EmailField(required=False, allow_blank=True)
    socialLinks = SocialLinksSerializer(required=False)
    emailSubjectTemplate = _text(200)
    emailBodyTemplate = _text(20000)
    emailFromName = _text(200)
    emailFromAddress = serializers.EmailField(required=False, allow_blank=True)
    maintenanceMode = serializers.BooleanField(required=False)
    maintenanceMessage = _text(2000)
    enableUserRegistration = serializers.BooleanField(required=False)
    enablePayments = serializers.BooleanField(required=False)
    enableEmailNotifications = serializers.BooleanField(required=False)
    enableAuditLog = serializers.BooleanField(required=False)
    metaTitle = _text(200)
    metaDescription = _text(2000)
    metaKeywords = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    ogImage = _text()
    analytics = AnalyticsSerializer(required=False)
    defaultCurrency = serializers.RegexField(r"^[A-Z]{3}$", required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No known settings fields in request")
        return attrs


# ── Responses ──────────────────────────────────────────────────────────────────


class CouponSerializer(serializers.Serializer):
    """Serializer for Coupon domain model."""

    id = serializers.CharField(source="id.value")
    code = serializers.CharField()
    discountType = serializers.CharField(source="discount_type.value")
    discountValue = serializers.DecimalField(
        source="discount_value", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    validFrom = serializers.DateTimeField(source="valid_from")
    validUntil = serializers.DateTimeField(source="valid_until")
    usageLimit = serializers.IntegerField(source="usage_limit", allow_null=True)
    usageCount = serializers.IntegerField(source="usage_count")
    specificEmail = serializers.CharField(source="specific_email", allow_null=True)
    isActive = serializers.BooleanField(source="is_active")
    createdAt = serializers.DateTimeField(source="created_at")


class CouponSummarySerializer(serializers.Serializer):
    """What a shopper learns about a coupon they entered."""

    code = serializers.CharField()
    discountType = serializers.CharField(source="discount_type.value")
    discountValue = serializers.DecimalField(
        source="discount_value", max_digits=10, decimal_places=2, coerce_to_string=False
    )


class OrderItemSerializer(serializers.Serializer):
    templateId = serializers.CharField(source="template_id.value")
    templateTitle = serializers.CharField(source="template_title")
    priceAtPurchase = serializers.DecimalField(
        source="price_at_purchase.amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )


class OrderSerializer(serializers.Serializer):
    """Serializer for Order domain model."""

    id = serializers.CharField(source="id.value")
    userId = serializers.CharField(source="user_id")
    userEmail = serializers.CharField(source="user_email")
    userName = serializers.CharField(source="user_name")
    templates = OrderItemSerializer(source="items", many=True)
    totalAmount = serializers.DecimalField(
        source="total_amount.amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    discountAmount = serializers.DecimalField(
        source="discount_amount.amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    couponCode = serializers.CharField(source="coupon_code", allow_null=True)
    currency = serializers.CharField()
    status = serializers.CharField(source="status.value")
    gateway = serializers.ChoiceField(choices=GATEWAYS)
    gatewayOrderId = serializers.CharField(source="gateway_order_id")
    paymentId = serializers.CharField(source="payment_id", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")


class AuditLogSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    adminId = serializers.CharField(source="admin_id")
    adminEmail = serializers.CharField(source="admin_email")
    action = serializers.CharField()
    category = serializers.CharField(source="category.value")
    details = serializers.JSONField()
    ipAddress = serializers.CharField(source="ip_address", allow_null=True)
    userAgent = serializers.CharField(source="user_agent", allow_null=True)
    timestamp = serializers.DateTimeField()


class ContactMessageSerializer(serializers.Serializer):
    id = serializers.CharField(source="id.value")
    name = serializers.CharField()
    email = serializers.CharField()
    subject = serializers.CharField()
    message = serializers.CharField()
    userId = serializers.CharField(source="user_id", allow_null=True)
    status = serializers.CharField(source="status.value")
    createdAt = serializers.DateTimeField(source="created_at")


class SecurityEventSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField(source="type.value")
    email = serializers.CharField(allow_null=True)
    details = serializers.JSONField()
    ipAddress = serializers.CharField(source="ip_address", allow_null=True)
    userAgent = serializers.CharField(source="user_agent", allow_null=True)
    timestamp = serializers.DateTimeField()
