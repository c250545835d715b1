from shop.handlers.admin_views import (
    AdminAuditLogView,
    AdminCouponDetailView,
    AdminCouponListView,
    AdminMessageDetailView,
    AdminMessageListView,
    AdminSettingsView,
    AdminVerifyView,
    AdminWhitelistView,
    ResendEmailView,
)
from shop.handlers.payment_views import (
    CashfreeCreateOrderView,
    CashfreeVerifyView,
    RazorpayCreateOrderView,
    RazorpayVerifyView,
)
from shop.handlers.views import (
    CashfreeConfigView,
    ContactView,
    CouponVerifyView,
    DownloadView,
    PublicSettingsView,
    RazorpayConfigView,
)

__all__ = [
    "AdminAuditLogView",
    "AdminCouponDetailView",
    "AdminCouponListView",
    "AdminMessageDetailView",
    "AdminMessageListView",
    "AdminSettingsView",
    "AdminVerifyView",
    "AdminWhitelistView",
    "CashfreeConfigView",
    "CashfreeCreateOrderView",
    "CashfreeVerifyView",
    "ContactView",
    "CouponVerifyView",
    "DownloadView",
    "PublicSettingsView",
    "RazorpayConfigView",
    "RazorpayCreateOrderView",
    "RazorpayVerifyView",
    "ResendEmailView",
]
