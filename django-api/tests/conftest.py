"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from fakes import ADMIN, SHOPPER, FakeFileFetcher, FakeGateway, FakeIdentityProvider, FakeMailer
from shop import clients

ADMIN_TOKEN = "admin-id-token"
SHOPPER_TOKEN = "shopper-id-token"


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def whitelist_seed(settings):
    settings.ADMIN_WHITELIST_EMAILS = [ADMIN.email]


@pytest.fixture
def identity_provider(monkeypatch) -> FakeIdentityProvider:
    provider = FakeIdentityProvider({ADMIN_TOKEN: ADMIN, SHOPPER_TOKEN: SHOPPER})
    monkeypatch.setattr(clients, "get_identity_provider", lambda: provider)
    return provider


@pytest.fixture
def admin_profile(db):
    from shop.models import UserProfile
    return UserProfile.objects.create(uid=ADMIN.uid, email=ADMIN.email, role="admin")


@pytest.fixture
def admin_client(api_client, identity_provider, admin_profile) -> APIClient:
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {ADMIN_TOKEN}")
    return api_client


@pytest.fixture
def shopper_client(api_client, identity_provider) -> APIClient:
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {SHOPPER_TOKEN}")
    return api_client


@pytest.fixture
def file_fetcher(monkeypatch) -> FakeFileFetcher:
    fetcher = FakeFileFetcher()
    monkeypatch.setattr(clients, "get_file_fetcher", lambda: fetcher)
    return fetcher


@pytest.fixture
def gateways(monkeypatch) -> dict[str, FakeGateway]:
    fakes = {"razorpay": FakeGateway("razorpay"), "cashfree": FakeGateway("cashfree")}
    monkeypatch.setattr(clients, "get_payment_gateway", lambda name: fakes[name])
    return fakes


@pytest.fixture
def mailer(monkeypatch) -> FakeMailer:
    fake = FakeMailer()
    monkeypatch.setattr(clients, "get_mailer", lambda: fake)
    return fake


@pytest.fixture
def template_row(db):
    from shop.models import Template
    return Template.objects.create(
        title="Lead Router",
        slug="lead-router",
        price=Decimal("1000.00"),
        download_file_url="https://files.example.com/lead-router.json",
    )
