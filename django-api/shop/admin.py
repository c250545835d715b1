from django.contrib import admin

from shop.models import (
    AuditLog,
    ContactMessage,
    Coupon,
    CouponRedemption,
    DownloadToken,
    Order,
    OrderItem,
    SecurityEvent,
    SettingsDocument,
    Template,
    UserProfile,
)


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


class CouponRedemptionInline(admin.TabularInline):
    model = CouponRedemption
    extra = 0
    readonly_fields = ["order", "user_email", "amount", "discount_applied", "purchased_at"]


@admin.register(Template)
class TemplateAdmin(admin.ModelAdmin):
    list_display = ["title", "slug", "price", "is_available", "stock_count", "sales_count"]
    search_fields = ["title", "slug"]
    prepopulated_fields = {"slug": ["title"]}


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "role"]
    list_filter = ["role"]
    search_fields = ["email"]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["gateway_order_id", "user_email", "total_amount", "status", "gateway", "created_at"]
    list_filter = ["status", "gateway"]
    search_fields = ["user_email", "gateway_order_id"]
    inlines = [OrderItemInline]


@admin.register(DownloadToken)
class DownloadTokenAdmin(admin.ModelAdmin):
    list_display = ["__str__", "order", "user_id", "expires_at"]
    readonly_fields = ["token", "template", "order", "user_id", "expires_at", "created_at"]


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ["code", "discount_type", "discount_value", "usage_count", "usage_limit", "is_active"]
    list_filter = ["discount_type", "is_active"]
    search_fields = ["code"]
    inlines = [CouponRedemptionInline]


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ["created_at", "email", "subject", "status"]
    list_filter = ["status"]
    search_fields = ["email", "subject"]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["timestamp", "admin_email", "category", "action"]
    list_filter = ["category"]


@admin.register(SecurityEvent)
class SecurityEventAdmin(admin.ModelAdmin):
    list_display = ["timestamp", "type", "email", "ip_address"]
    list_filter = ["type"]


admin.site.register(SettingsDocument)
