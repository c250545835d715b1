"""Service wiring for request handlers.

Builders resolve collaborators through ``shop.clients`` at call time, so
tests can swap an adapter by patching the factory.
"""

from django.conf import settings
from django.core.cache import cache

from shop import clients
from shop.services.access_service import AccessService
from shop.services.audit_service import AuditService
from shop.services.contact_service import ContactService
from shop.services.coupon_service import CouponService, compute_discount
from shop.services.download_service import DownloadService, TokenIssuer
from shop.services.email_service import PurchaseEmailService
from shop.services.order_service import OrderService
from shop.services.settings_service import SettingsProvider
from shop.stores.django_store import (
    DjangoAuditStore,
    DjangoCatalogStore,
    DjangoCouponStore,
    DjangoMessageStore,
    DjangoOrderStore,
    DjangoSettingsStore,
    DjangoTokenStore,
)


def build_settings_provider() -> SettingsProvider:
    return SettingsProvider(
        DjangoSettingsStore(),
        cache,
        seed_whitelist=settings.ADMIN_WHITELIST_EMAILS,
        cache_timeout=settings.SETTINGS_CACHE_TIMEOUT,
    )


def build_audit_service() -> AuditService:
    return AuditService(DjangoAuditStore(), build_settings_provider())


def build_access_service() -> AccessService:
    return AccessService(DjangoCatalogStore(), build_settings_provider(), build_audit_service())


def build_contact_service() -> ContactService:
    return ContactService(DjangoMessageStore())


def build_coupon_service() -> CouponService:
    return CouponService(DjangoCouponStore())


def build_download_service() -> DownloadService:
    return DownloadService(DjangoTokenStore(), DjangoCatalogStore(), clients.get_file_fetcher())


def build_email_service() -> PurchaseEmailService:
    return PurchaseEmailService(
        clients.get_mailer(),
        build_settings_provider(),
        site_url=settings.SITE_URL,
        from_address=settings.EMAIL_FROM_ADDRESS,
        ttl_days=settings.DOWNLOAD_TOKEN_TTL_DAYS,
    )


def build_order_service() -> OrderService:
    return OrderService(
        orders=DjangoOrderStore(),
        catalog=DjangoCatalogStore(),
        coupons=build_coupon_service(),
        issuer=TokenIssuer(DjangoTokenStore(), ttl_days=settings.DOWNLOAD_TOKEN_TTL_DAYS),
        settings=build_settings_provider(),
        emails=build_email_service(),
        gateways={name: clients.get_payment_gateway(name) for name in clients.GATEWAYS},
        velocity_limit=settings.ORDER_VELOCITY_LIMIT,
        velocity_window_minutes=settings.ORDER_VELOCITY_WINDOW_MINUTES,
        reservation_minutes=settings.COUPON_RESERVATION_MINUTES,
    )


__all__ = [
    "AccessService",
    "AuditService",
    "ContactService",
    "CouponService",
    "DownloadService",
    "OrderService",
    "PurchaseEmailService",
    "SettingsProvider",
    "TokenIssuer",
    "build_access_service",
    "build_audit_service",
    "build_contact_service",
    "build_coupon_service",
    "build_download_service",
    "build_email_service",
    "build_order_service",
    "build_settings_provider",
    "compute_discount",
]
