"""Cashfree Payment Gateway over its REST API."""

import logging
from decimal import Decimal

import requests

from shop.clients.interfaces import PaymentGateway
from shop.domain import Customer, GatewayOrder, Money
from shop.domain.errors import GatewayError, PaymentFailedError

logger = logging.getLogger(__name__)

CASHFREE_API_VERSION = "2022-09-01"
CASHFREE_BASE_URLS = {
    "PROD": "https://api.cashfree.com/pg",
    "SANDBOX": "https://sandbox.cashfree.com/pg",
}
# Cashfree requires a phone number on every order.
PLACEHOLDER_PHONE = "9999999999"


class CashfreeGateway(PaymentGateway):
    name = "cashfree"

    def __init__(
        self,
        app_id: str,
        secret_key: str,
        mode: str = "SANDBOX",
        timeout: int = 15,
        session: requests.Session | None = None,
    ) -> None:
        self._app_id = app_id
        self._secret_key = secret_key
        self._base_url = CASHFREE_BASE_URLS.get(mode.upper(), CASHFREE_BASE_URLS["SANDBOX"])
        self._timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-version": CASHFREE_API_VERSION,
            "x-client-id": self._app_id,
            "x-client-secret": self._secret_key,
        }

    def is_configured(self) -> bool:
        return bool(self._app_id and self._secret_key)

    def create_order(
        self,
        reference: str,
        amount: Money,
        currency: str,
        customer: Customer,
        return_url: str | None = None,
    ) -> GatewayOrder:
        payload = {
            "order_id": reference,
            "order_amount": float(amount.quantized()),
            "order_currency": currency,
            "customer_details": {
                "customer_id": customer.id,
                "customer_name": customer.name,
                "customer_email": customer.email,
                "customer_phone": PLACEHOLDER_PHONE,
            },
        }
        if return_url:
            payload["order_meta"] = {"return_url": return_url}
        try:
            response = self._session.post(
                f"{self._base_url}/orders",
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.error("Cashfree order creation failed", extra={"order_ref": reference, "error": str(exc)})
            raise GatewayError() from exc
        return GatewayOrder(
            gateway_order_id=body["order_id"],
            amount=Decimal(str(body["order_amount"])),
            currency=body["order_currency"],
            payment_session_id=body.get("payment_session_id"),
        )

    def confirm_payment(
        self,
        gateway_order_id: str,
        payment_id: str | None = None,
        signature: str | None = None,
    ) -> str:
        try:
            response = self._session.get(
                f"{self._base_url}/orders/{gateway_order_id}/payments",
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            payments = response.json() or []
        except requests.RequestException as exc:
            logger.error(
                "Cashfree payment lookup failed",
                extra={"gateway_order_id": gateway_order_id, "error": str(exc)},
            )
            raise GatewayError("Failed to verify payment with gateway") from exc

        for payment in payments:
            if payment.get("payment_status") == "SUCCESS":
                return str(payment["cf_payment_id"])
        logger.warning("No successful Cashfree payment", extra={"gateway_order_id": gateway_order_id})
        raise PaymentFailedError()
