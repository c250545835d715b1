"""Interfaces for external collaborators.

Adapters translate transport failures into domain errors at this boundary,
so services never see requests or firebase exceptions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shop.domain import Customer, GatewayOrder, Identity, Money


@dataclass(frozen=True)
class FetchedFile:
    status_code: int
    content_type: str
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class IdentityProvider(ABC):
    @abstractmethod
    def verify(self, id_token: str) -> Identity:
        """Return the caller behind a bearer token.

        Raises:
            UnauthorizedError: If the token is invalid, expired or revoked.
        """
        ...


class FileFetcher(ABC):
    @abstractmethod
    def fetch(self, url: str) -> FetchedFile:
        """Download a file.

        Raises:
            FileNetworkError: If the host could not be reached.
        """
        ...


class PaymentGateway(ABC):
    """A payment provider that creates orders and confirms payments."""

    name: str

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when credentials for the gateway are present."""
        ...

    @abstractmethod
    def create_order(
        self,
        reference: str,
        amount: Money,
        currency: str,
        customer: Customer,
        return_url: str | None = None,
    ) -> GatewayOrder:
        """Register an order with the gateway.

        Raises:
            GatewayError: If the gateway rejects the order or is unreachable.
        """
        ...

    @abstractmethod
    def confirm_payment(
        self,
        gateway_order_id: str,
        payment_id: str | None = None,
        signature: str | None = None,
    ) -> str:
        """Return the confirmed payment ID for a gateway order.

        Raises:
            InvalidSignatureError: If a signed callback does not verify.
            PaymentFailedError: If the gateway reports no successful payment.
            GatewayError: If the gateway is unreachable.
        """
        ...


class Mailer(ABC):
    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when an API key is present."""
        ...

    @abstractmethod
    def send(self, to: str, sender: str, subject: str, html: str) -> str:
        """Send an HTML email and return the provider's message ID.

        Raises:
            EmailDeliveryError: If the provider rejects the message or is unreachable.
        """
        ...
