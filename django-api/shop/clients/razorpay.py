"""Razorpay gateway over its REST API.

Orders are created with HTTP basic auth (key id / key secret). Checkout
callbacks are authenticated by an HMAC-SHA256 signature over
``"<order_id>|<payment_id>"`` keyed with the key secret.
"""

import hashlib
import hmac
import logging

import requests

from shop.clients.interfaces import PaymentGateway
from shop.domain import Customer, GatewayOrder, Money
from shop.domain.errors import GatewayError, InvalidSignatureError

logger = logging.getLogger(__name__)

RAZORPAY_API_BASE = "https://api.razorpay.com/v1"


def sign(secret: str, gateway_order_id: str, payment_id: str) -> str:
    message = f"{gateway_order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


class RazorpayGateway(PaymentGateway):
    name = "razorpay"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: int = 15,
        session: requests.Session | None = None,
    ) -> None:
        self._key_id = key_id
        self._key_secret = key_secret
        self._timeout = timeout
        self._session = session or requests.Session()

    def is_configured(self) -> bool:
        return bool(self._key_id and self._key_secret)

    def create_order(
        self,
        reference: str,
        amount: Money,
        currency: str,
        customer: Customer,
        return_url: str | None = None,
    ) -> GatewayOrder:
        payload = {
            "amount": amount.minor_units(),
            "currency": currency,
            "receipt": reference,
            "notes": {"userId": customer.id, "userEmail": customer.email},
        }
        try:
            response = self._session.post(
                f"{RAZORPAY_API_BASE}/orders",
                json=payload,
                auth=(self._key_id, self._key_secret),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.error("Razorpay order creation failed", extra={"receipt": reference, "error": str(exc)})
            raise GatewayError() from exc
        return GatewayOrder(
            gateway_order_id=body["id"],
            amount=body["amount"],
            currency=body["currency"],
        )

    def confirm_payment(
        self,
        gateway_order_id: str,
        payment_id: str | None = None,
        signature: str | None = None,
    ) -> str:
        if not payment_id or not signature:
            raise InvalidSignatureError()
        expected = sign(self._key_secret, gateway_order_id, payment_id)
        if not hmac.compare_digest(expected, signature):
            logger.warning("Invalid Razorpay signature", extra={"gateway_order_id": gateway_order_id})
            raise InvalidSignatureError()
        return payment_id
