"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


class Template(models.Model):
    """Persistence model for purchasable templates."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    short_description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="INR")
    download_file_url = models.URLField(max_length=1000, blank=True, default="")
    is_available = models.BooleanField(default=True)
    stock_count = models.PositiveIntegerField(blank=True, null=True)
    sales_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "templates"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class UserProfile(models.Model):
    """Shopper or admin known to the identity provider."""

    ROLE_CHOICES = [("admin", "Admin"), ("user", "User")]

    uid = models.CharField(max_length=128, primary_key=True)
    email = models.EmailField()
    name = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="user")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "users"

    def __str__(self) -> str:
        return self.email


class Order(models.Model):
    """Persistence model for checkouts."""

    STATUS_CHOICES = [
        ("created", "Created"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("refunded", "Refunded"),
        ("expired", "Expired"),
    ]
    GATEWAY_CHOICES = [("razorpay", "Razorpay"), ("cashfree", "Cashfree")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=128)
    user_email = models.EmailField()
    user_name = models.CharField(max_length=255, blank=True, default="")
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    coupon_code = models.CharField(max_length=64, blank=True, null=True)
    currency = models.CharField(max_length=3, default="INR")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="created")
    gateway = models.CharField(max_length=10, choices=GATEWAY_CHOICES)
    gateway_order_id = models.CharField(max_length=128, unique=True)
    payment_id = models.CharField(max_length=128, blank=True, null=True)
    signature = models.CharField(max_length=256, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user_id", "status", "created_at"]),
            models.Index(fields=["coupon_code", "status", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.gateway_order_id} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    template = models.ForeignKey(Template, on_delete=models.PROTECT, related_name="+")
    template_title = models.CharField(max_length=255)
    price_at_purchase = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "orderItems"

    def __str__(self) -> str:
        return self.template_title


class DownloadToken(models.Model):
    """Bearer token granting access to one purchased file. Never mutated."""

    token = models.CharField(max_length=64, unique=True)
    template = models.ForeignKey(Template, on_delete=models.CASCADE, related_name="+")
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="download_tokens")
    user_id = models.CharField(max_length=128)
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "downloadTokens"

    def __str__(self) -> str:
        return f"{self.token[:8]}... ({self.template_id})"


class Coupon(models.Model):
    """Persistence model for discount coupons."""

    DISCOUNT_CHOICES = [("percentage", "Percentage"), ("fixed", "Fixed")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=64, unique=True)
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_CHOICES)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    usage_limit = models.PositiveIntegerField(blank=True, null=True)
    usage_count = models.PositiveIntegerField(default=0)
    specific_email = models.EmailField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "coupons"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.code


class CouponRedemption(models.Model):
    """One row per paid order that used a coupon."""

    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name="redemptions")
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name="coupon_redemption")
    user_id = models.CharField(max_length=128)
    user_email = models.EmailField()
    user_name = models.CharField(max_length=255, blank=True, default="")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    discount_applied = models.DecimalField(max_digits=10, decimal_places=2)
    purchased_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "couponPurchases"


class AuditLog(models.Model):
    """Append-only record of admin actions."""

    admin_id = models.CharField(max_length=128)
    admin_email = models.EmailField()
    action = models.CharField(max_length=500)
    category = models.CharField(max_length=20)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=500, blank=True, null=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "auditLogs"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["-timestamp"]),
        ]


class SecurityEvent(models.Model):
    """Append-only record of security-relevant events."""

    type = models.CharField(max_length=32)
    email = models.EmailField(blank=True, null=True)
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=500, blank=True, null=True)
    details = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "securityEvents"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["type", "email", "-timestamp"]),
        ]


class SettingsDocument(models.Model):
    """Flat JSON configuration document keyed by name."""

    key = models.CharField(max_length=64, primary_key=True)
    data = models.JSONField(default=dict)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "settings"

    def __str__(self) -> str:
        return self.key


class ContactMessage(models.Model):
    """Message submitted through the public contact form."""

    STATUS_CHOICES = [("unread", "Unread"), ("read", "Read"), ("replied", "Replied")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.CharField(max_length=128, blank=True, null=True)
    name = models.CharField(max_length=255)
    email = models.EmailField()
    subject = models.CharField(max_length=255)
    message = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="unread")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "messages"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.subject} ({self.email})"
