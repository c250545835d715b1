"""Checkout and payment verification.

Order creation reserves a coupon slot in a short transaction, then
registers the gateway order and writes the order outside it; a failure in
either hands the slot back. Unpaid coupon orders release their slot when
the same buyer retries or once the reservation window has passed.
Fulfilment marks the order paid, issues download tokens and books the sale
in one transaction; the purchase email goes out afterwards and cannot fail
the payment.
"""

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from shop.clients.interfaces import PaymentGateway
from shop.domain import (
    CheckoutSession,
    CouponCode,
    Customer,
    Identity,
    Money,
    NewOrder,
    Order,
    OrderId,
    OrderItem,
    OrderStatus,
    TemplateId,
)
from shop.domain.errors import (
    InvalidOrderIdError,
    OrderAlreadyProcessedError,
    OrderNotFoundError,
    OrderNotPaidError,
    OutOfStockError,
    PaymentNotConfiguredError,
    PaymentsDisabledError,
    TemplateNotFoundError,
    TemplateUnavailableError,
    VelocityLimitExceededError,
)
from shop.services.coupon_service import CouponService, compute_discount
from shop.services.download_service import TokenIssuer
from shop.services.email_service import PurchaseEmailService
from shop.services.settings_service import SettingsProvider
from shop.stores.interfaces import CatalogStore, OrderStore

logger = logging.getLogger(__name__)

# Expired orders stay payable: a buyer may finish paying after the
# reservation lapsed.
_PAYABLE = (OrderStatus.CREATED, OrderStatus.EXPIRED)


def order_reference(uid: str, now: datetime) -> str:
    """Merchant-side order reference, e.g. ``order_1718000000000_ab12cd34``."""
    return f"order_{int(now.timestamp() * 1000)}_{uid[:8]}"


class OrderService:
    def __init__(
        self,
        orders: OrderStore,
        catalog: CatalogStore,
        coupons: CouponService,
        issuer: TokenIssuer,
        settings: SettingsProvider,
        emails: PurchaseEmailService,
        gateways: dict[str, PaymentGateway],
        velocity_limit: int = 5,
        velocity_window_minutes: int = 60,
        reservation_minutes: int = 30,
    ) -> None:
        self._orders = orders
        self._catalog = catalog
        self._coupons = coupons
        self._issuer = issuer
        self._settings = settings
        self._emails = emails
        self._gateways = gateways
        self._velocity_limit = velocity_limit
        self._velocity_window = timedelta(minutes=velocity_window_minutes)
        self._reservation_window = timedelta(minutes=reservation_minutes)

    def _gateway(self, name: str) -> PaymentGateway:
        gateway = self._gateways.get(name)
        if gateway is None or not gateway.is_configured():
            logger.error("Payment gateway not configured", extra={"gateway": name})
            raise PaymentNotConfiguredError()
        return gateway

    def create_order(
        self,
        identity: Identity,
        gateway_name: str,
        template_id: str,
        customer: Customer,
        coupon_code: str | None = None,
        return_url: str | None = None,
        now: datetime | None = None,
    ) -> CheckoutSession:
        """Open a checkout for one template.

        Raises:
            PaymentsDisabledError: If payments are switched off in site settings.
            PaymentNotConfiguredError: If the gateway has no credentials.
            VelocityLimitExceededError: If the user has too many unpaid orders.
            TemplateNotFoundError: If the template does not exist.
            TemplateUnavailableError: If the template is not for sale.
            OutOfStockError: If the template has no stock left.
            CouponError: If the coupon cannot be applied.
            GatewayError: If the gateway refuses the order.
        """
        now = now or datetime.now(UTC)
        site = self._settings.get()
        if not site.enable_payments:
            raise PaymentsDisabledError()
        gateway = self._gateway(gateway_name)

        pending = self._orders.count_recent_unpaid(identity.uid, now - self._velocity_window)
        if pending >= self._velocity_limit:
            logger.warning("Order velocity limit hit", extra={"uid": identity.uid, "pending": pending})
            raise VelocityLimitExceededError()

        try:
            parsed_id = TemplateId.from_string(template_id)
        except ValueError:
            raise TemplateNotFoundError()
        template = self._catalog.get_template(parsed_id)
        if template is None:
            raise TemplateNotFoundError()
        if not template.is_available:
            raise TemplateUnavailableError()
        if not template.in_stock:
            raise OutOfStockError()

        price = template.price.quantized()
        currency = template.currency or site.default_currency

        discount = Decimal("0.00")
        applied_code = None
        if coupon_code:
            with self._orders.atomic():
                self._release_reservations(coupon_code, identity.uid, now)
                coupon = self._coupons.redeem(coupon_code, identity.email, now)
            discount = compute_discount(coupon, price).discount_amount
            applied_code = coupon.code
        total = Money(price - discount)

        try:
            gateway_order = gateway.create_order(
                reference=order_reference(identity.uid, now),
                amount=total,
                currency=currency,
                customer=customer,
                return_url=return_url,
            )
            order = self._orders.create_order(
                NewOrder(
                    user_id=identity.uid,
                    user_email=customer.email,
                    user_name=customer.name,
                    items=(
                        OrderItem(
                            template_id=template.id,
                            template_title=template.title,
                            price_at_purchase=template.price,
                        ),
                    ),
                    total_amount=total,
                    discount_amount=Money(discount),
                    coupon_code=applied_code,
                    currency=currency,
                    gateway=gateway.name,
                    gateway_order_id=gateway_order.gateway_order_id,
                )
            )
        except Exception:
            if applied_code:
                self._coupons.release(applied_code)
                logger.info(
                    "Coupon slot released after failed checkout",
                    extra={"uid": identity.uid, "coupon": applied_code},
                )
            raise

        logger.info(
            "Order created",
            extra={"order_id": str(order.id), "gateway": gateway.name, "coupon": applied_code},
        )
        return CheckoutSession(order=order, gateway_order=gateway_order)

    def _release_reservations(self, coupon_code: str, uid: str, now: datetime) -> None:
        """Expire unpaid orders holding a slot of this coupon.

        Covers the buyer's own earlier checkouts and anyone's checkout older
        than the reservation window.
        """
        try:
            code = CouponCode(coupon_code).value
        except ValueError:
            return
        for pending in self._orders.pending_coupon_orders(code, uid, now - self._reservation_window):
            if self._orders.expire_order(pending.id):
                self._coupons.release(code)
                logger.info(
                    "Coupon reservation released",
                    extra={"order_id": str(pending.id), "coupon": code},
                )

    def verify_razorpay(
        self,
        order_id: str,
        gateway_order_id: str,
        payment_id: str,
        signature: str,
        now: datetime | None = None,
    ) -> Order:
        """Confirm a signed Razorpay checkout callback and fulfil the order.

        Raises:
            InvalidSignatureError: If the signature does not verify.
            OrderNotFoundError: If the order does not exist.
            InvalidOrderIdError: If the callback is for another order.
            OrderAlreadyProcessedError: If the order failed or was refunded.
        """
        gateway = self._gateway("razorpay")
        confirmed_payment_id = gateway.confirm_payment(gateway_order_id, payment_id, signature)

        try:
            order = self._orders.get_order(OrderId.from_string(order_id))
        except ValueError:
            order = None
        if order is None:
            raise OrderNotFoundError()
        if order.gateway_order_id != gateway_order_id:
            logger.error(
                "Gateway order mismatch",
                extra={"order_id": str(order.id), "expected": order.gateway_order_id},
            )
            raise InvalidOrderIdError()
        if order.status is OrderStatus.PAID:
            return order
        if order.status not in _PAYABLE:
            raise OrderAlreadyProcessedError()
        return self._fulfil(order, confirmed_payment_id, signature, now)

    def verify_cashfree(self, gateway_order_id: str, now: datetime | None = None) -> Order:
        """Ask Cashfree whether an order was paid and fulfil it.

        Raises:
            OrderNotFoundError: If no order has this gateway ID.
            PaymentFailedError: If Cashfree reports no successful payment.
            OrderAlreadyProcessedError: If the order failed or was refunded.
            GatewayError: If Cashfree is unreachable.
        """
        gateway = self._gateway("cashfree")
        order = self._orders.get_order_by_gateway_id(gateway_order_id)
        if order is None:
            raise OrderNotFoundError()
        if order.status is OrderStatus.PAID:
            return order
        if order.status not in _PAYABLE:
            raise OrderAlreadyProcessedError()
        payment_id = gateway.confirm_payment(gateway_order_id)
        return self._fulfil(order, payment_id, None, now)

    def _fulfil(
        self, order: Order, payment_id: str, signature: str | None, now: datetime | None
    ) -> Order:
        now = now or datetime.now(UTC)
        with self._orders.atomic():
            previous = self._orders.mark_paid(order.id, payment_id, signature)
            if previous is None:
                current = self._orders.get_order(order.id)
                if current is not None and current.status is OrderStatus.PAID:
                    return current
                raise OrderAlreadyProcessedError()
            tokens = self._issuer.issue(order, now)
            self._catalog.increment_sales([item.template_id for item in order.items])
            if previous is OrderStatus.EXPIRED:
                self._coupons.reclaim(order)
            self._coupons.record_redemption(order)

        logger.info("Order fulfilled", extra={"order_id": str(order.id), "tokens": len(tokens)})
        paid = self._orders.get_order(order.id)
        self._emails.send(paid, tokens)
        return paid

    def resend_purchase_email(self, order_id: str, now: datetime | None = None) -> str:
        """Send the download links of a paid order again.

        Unexpired tokens are reused; if all have expired, fresh ones are issued.

        Raises:
            OrderNotFoundError: If the order does not exist.
            OrderNotPaidError: If the order is not paid.
            EmailNotConfiguredError: If no email API key is configured.
            EmailDeliveryError: If the email provider rejects the message.
        """
        try:
            order = self._orders.get_order(OrderId.from_string(order_id))
        except ValueError:
            order = None
        if order is None:
            raise OrderNotFoundError()
        if order.status is not OrderStatus.PAID:
            raise OrderNotPaidError()

        tokens = self._issuer.active_tokens(order, now)
        if not tokens:
            tokens = self._issuer.issue(order, now)
        return self._emails.deliver(order, tokens, resent=True)
