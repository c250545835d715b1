"""Coupon service - validation, discount computation and usage accounting.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from shop.domain import (
    Coupon,
    CouponCode,
    CouponId,
    CouponQuote,
    Discount,
    DiscountType,
    NewCoupon,
    Order,
)
from shop.domain.errors import (
    CouponExistsError,
    CouponExpiredError,
    CouponInactiveError,
    CouponNotFoundByIdError,
    CouponNotFoundError,
    CouponNotYetActiveError,
    EmailRestrictedError,
    InvalidCouponError,
    UsageLimitReachedError,
)
from shop.domain.value_objects import TWO_PLACES
from shop.stores.interfaces import CouponStore

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def compute_discount(coupon: Coupon, price: Decimal) -> Discount:
    """Apply a coupon to a price.

    The discount never exceeds the price and the final price is never
    negative, whatever the coupon's value.
    """
    price = Decimal(price).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if coupon.discount_type is DiscountType.PERCENTAGE:
        raw = price * coupon.discount_value / HUNDRED
    else:
        raw = Decimal(coupon.discount_value)
    discount = max(Decimal("0"), min(raw, price)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    final_price = max(Decimal("0.00"), price - discount)
    return Discount(
        discount_type=coupon.discount_type,
        discount_amount=discount,
        final_price=final_price,
    )


class CouponService:
    """Service for coupon validation and administration."""

    def __init__(self, store: CouponStore) -> None:
        self._store = store

    def validate(self, code: str, email: str | None, now: datetime | None = None) -> Coupon:
        """Return the coupon if it can be applied for this email right now.

        Checks run in a fixed order and the first failure wins.

        Raises:
            CouponNotFoundError: If no coupon has this code.
            CouponInactiveError: If the coupon has been switched off.
            CouponExpiredError: If the validity window has closed.
            CouponNotYetActiveError: If the validity window has not opened.
            UsageLimitReachedError: If every usage slot is taken.
            EmailRestrictedError: If the coupon is reserved for another email.
        """
        now = now or datetime.now(UTC)
        try:
            normalised = CouponCode(code)
        except ValueError:
            raise CouponNotFoundError()

        coupon = self._store.get_coupon_by_code(normalised.value)
        if coupon is None:
            raise CouponNotFoundError()
        if not coupon.is_active:
            raise CouponInactiveError()
        if now > coupon.valid_until:
            raise CouponExpiredError()
        if now < coupon.valid_from:
            raise CouponNotYetActiveError()
        if coupon.limit_reached:
            raise UsageLimitReachedError()
        if coupon.specific_email and (
            not email or coupon.specific_email.strip().lower() != email.strip().lower()
        ):
            raise EmailRestrictedError()
        return coupon

    def quote(
        self, code: str, email: str | None, price: Decimal, now: datetime | None = None
    ) -> CouponQuote:
        coupon = self.validate(code, email, now)
        return CouponQuote(coupon=coupon, discount=compute_discount(coupon, price))

    def redeem(self, code: str, email: str | None, now: datetime | None = None) -> Coupon:
        """Validate a coupon and claim one usage slot.

        The slot is a reservation held by the order about to be created; it
        is handed back with ``release`` if that order is never written or is
        abandoned unpaid.

        Raises:
            CouponError: Any validation failure, or UsageLimitReachedError
                when another checkout claimed the last slot first.
        """
        coupon = self.validate(code, email, now)
        if not self._store.try_increment_usage(coupon.id):
            logger.info("Coupon usage slot lost to concurrent checkout", extra={"coupon": coupon.code})
            raise UsageLimitReachedError()
        return coupon

    def release(self, code: str) -> None:
        """Hand back a slot claimed by ``redeem``."""
        coupon = self._store.get_coupon_by_code(code)
        if coupon is None:
            return
        if not self._store.release_usage(coupon.id):
            logger.warning("Coupon usage already at zero on release", extra={"coupon": code})

    def reclaim(self, order: Order) -> None:
        """Claim a slot again for an order paid after its reservation lapsed.

        The buyer has paid the discounted price, so a lost slot does not
        fail the order; the usage count just stays at its limit.
        """
        if not order.coupon_code:
            return
        coupon = self._store.get_coupon_by_code(order.coupon_code)
        if coupon is None or not self._store.try_increment_usage(coupon.id):
            logger.warning(
                "Late payment kept its discount without a usage slot",
                extra={"order_id": str(order.id), "coupon": order.coupon_code},
            )

    def record_redemption(self, order: Order) -> None:
        """Link a paid order to the coupon it used."""
        if not order.coupon_code:
            return
        coupon = self._store.get_coupon_by_code(order.coupon_code)
        if coupon is None:
            logger.warning(
                "Paid order references a deleted coupon",
                extra={"order_id": str(order.id), "coupon": order.coupon_code},
            )
            return
        self._store.record_redemption(coupon.id, order)

    # ── Administration ─────────────────────────────────────────────────────────

    def list_coupons(self) -> list[Coupon]:
        return self._store.list_coupons()

    def create_coupon(self, coupon: NewCoupon) -> Coupon:
        """Create a coupon with its code stored upper-case.

        Raises:
            InvalidCouponError: If the definition breaks a creation rule.
            CouponExistsError: If the code is taken.
        """
        try:
            code = CouponCode(coupon.code).value
        except ValueError:
            raise InvalidCouponError("Coupon code is required")
        if coupon.discount_value < 0:
            raise InvalidCouponError("Discount value cannot be negative")
        if coupon.discount_type is DiscountType.PERCENTAGE and coupon.discount_value > HUNDRED:
            raise InvalidCouponError("Percentage discount cannot exceed 100")
        if coupon.valid_until < coupon.valid_from:
            raise InvalidCouponError("validUntil must not be earlier than validFrom")
        if coupon.usage_limit is not None and coupon.usage_limit < 0:
            raise InvalidCouponError("Usage limit cannot be negative")
        if self._store.code_exists(code):
            raise CouponExistsError(code)

        specific_email = (coupon.specific_email or "").strip().lower() or None
        created = self._store.create_coupon(
            NewCoupon(
                code=code,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
                valid_from=coupon.valid_from,
                valid_until=coupon.valid_until,
                usage_limit=coupon.usage_limit,
                specific_email=specific_email,
                is_active=coupon.is_active,
            )
        )
        logger.info("Coupon created", extra={"coupon": created.code})
        return created

    def set_active(self, coupon_id: str, is_active: bool) -> Coupon:
        """Switch a coupon on or off.

        Raises:
            CouponNotFoundByIdError: If the coupon does not exist.
        """
        coupon = self._store.set_active(_parse_coupon_id(coupon_id), is_active)
        if coupon is None:
            raise CouponNotFoundByIdError()
        return coupon

    def delete_coupon(self, coupon_id: str) -> None:
        """Delete a coupon.

        Raises:
            CouponNotFoundByIdError: If the coupon does not exist.
        """
        if not self._store.delete_coupon(_parse_coupon_id(coupon_id)):
            raise CouponNotFoundByIdError()


def _parse_coupon_id(coupon_id: str) -> CouponId:
    try:
        return CouponId.from_string(coupon_id)
    except ValueError:
        raise CouponNotFoundByIdError()
