from django.urls import path

from shop.handlers import (
    AdminAuditLogView,
    AdminCouponDetailView,
    AdminCouponListView,
    AdminMessageDetailView,
    AdminMessageListView,
    AdminSettingsView,
    AdminVerifyView,
    AdminWhitelistView,
    CashfreeConfigView,
    CashfreeCreateOrderView,
    CashfreeVerifyView,
    ContactView,
    CouponVerifyView,
    DownloadView,
    PublicSettingsView,
    RazorpayConfigView,
    RazorpayCreateOrderView,
    RazorpayVerifyView,
    ResendEmailView,
)

urlpatterns = [
    path("downloads/<str:token>", DownloadView.as_view(), name="download"),
    path("coupons/verify", CouponVerifyView.as_view(), name="coupon-verify"),
    path("settings", PublicSettingsView.as_view(), name="settings"),
    path("contact", ContactView.as_view(), name="contact"),
    path("config/razorpay", RazorpayConfigView.as_view(), name="razorpay-config"),
    path("config/cashfree", CashfreeConfigView.as_view(), name="cashfree-config"),
    path("payments/create-order", RazorpayCreateOrderView.as_view(), name="razorpay-create-order"),
    path("payments/verify", RazorpayVerifyView.as_view(), name="razorpay-verify"),
    path("cashfree/create-order", CashfreeCreateOrderView.as_view(), name="cashfree-create-order"),
    path("cashfree/verify", CashfreeVerifyView.as_view(), name="cashfree-verify"),
    path("orders/resend-email", ResendEmailView.as_view(), name="resend-email"),
    path("admin/verify", AdminVerifyView.as_view(), name="admin-verify"),
    path("admin/settings", AdminSettingsView.as_view(), name="admin-settings"),
    path("admin/whitelist", AdminWhitelistView.as_view(), name="admin-whitelist"),
    path("admin/audit-logs", AdminAuditLogView.as_view(), name="admin-audit-logs"),
    path("admin/coupons", AdminCouponListView.as_view(), name="admin-coupons"),
    path(
        "admin/coupons/<str:coupon_id>",
        AdminCouponDetailView.as_view(),
        name="admin-coupon-detail",
    ),
    path("admin/messages", AdminMessageListView.as_view(), name="admin-messages"),
    path(
        "admin/messages/<str:message_id>",
        AdminMessageDetailView.as_view(),
        name="admin-message-detail",
    ),
]
