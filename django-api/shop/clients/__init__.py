"""Process-wide adapters for external collaborators, built from Django settings."""

from functools import lru_cache

from django.conf import settings

from shop.clients.cashfree import CashfreeGateway
from shop.clients.files import HttpFileFetcher
from shop.clients.firebase import FirebaseIdentityProvider
from shop.clients.interfaces import (
    FetchedFile,
    FileFetcher,
    IdentityProvider,
    Mailer,
    PaymentGateway,
)
from shop.clients.razorpay import RazorpayGateway
from shop.clients.resend import ResendMailer

GATEWAYS = ("razorpay", "cashfree")


@lru_cache
def get_identity_provider() -> IdentityProvider:
    return FirebaseIdentityProvider(settings.FIREBASE_CREDENTIALS_PATH)


@lru_cache
def get_file_fetcher() -> FileFetcher:
    return HttpFileFetcher(timeout=settings.OUTBOUND_HTTP_TIMEOUT)


@lru_cache
def get_payment_gateway(name: str) -> PaymentGateway:
    if name == "razorpay":
        return RazorpayGateway(
            settings.RZP_ID,
            settings.RZP_SECRET,
            timeout=settings.OUTBOUND_HTTP_TIMEOUT,
        )
    if name == "cashfree":
        return CashfreeGateway(
            settings.CASHFREE_APP_ID,
            settings.CASHFREE_SECRET_KEY,
            mode=settings.CASHFREE_MODE,
            timeout=settings.OUTBOUND_HTTP_TIMEOUT,
        )
    raise ValueError(f"Unknown payment gateway: {name}")


@lru_cache
def get_mailer() -> Mailer:
    return ResendMailer(settings.RESEND_API_KEY)


__all__ = [
    "GATEWAYS",
    "FetchedFile",
    "FileFetcher",
    "IdentityProvider",
    "Mailer",
    "PaymentGateway",
    "get_file_fetcher",
    "get_identity_provider",
    "get_mailer",
    "get_payment_gateway",
]
