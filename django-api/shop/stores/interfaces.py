"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from shop.domain import (
    AuditLogEntry,
    ContactMessage,
    Coupon,
    CouponId,
    DownloadToken,
    MessageId,
    MessageStatus,
    NewContactMessage,
    NewCoupon,
    NewOrder,
    Order,
    OrderId,
    OrderStatus,
    SecurityEvent,
    SecurityEventType,
    Template,
    TemplateId,
    UserRole,
)


class TokenStore(ABC):
    """Interface for download token persistence."""

    @abstractmethod
    def get_token(self, token: str) -> DownloadToken | None:
        """Return the token with this exact value, or None if not found."""
        ...

    @abstractmethod
    def create_tokens(self, tokens: list[DownloadToken]) -> None:
        """Persist newly issued tokens."""
        ...

    @abstractmethod
    def tokens_for_order(self, order_id: OrderId) -> list[DownloadToken]:
        """Return all tokens issued for an order, oldest first."""
        ...


class CatalogStore(ABC):
    """Interface for template catalog and user profile reads."""

    @abstractmethod
    def get_template(self, template_id: TemplateId) -> Template | None:
        """Return a template by ID, or None if not found."""
        ...

    @abstractmethod
    def increment_sales(self, template_ids: list[TemplateId]) -> None:
        """Add one sale to each listed template."""
        ...

    @abstractmethod
    def get_user_role(self, uid: str) -> UserRole | None:
        """Return the role on the user's profile, or None if there is no profile."""
        ...


class CouponStore(ABC):
    """Interface for coupon persistence."""

    @abstractmethod
    def get_coupon_by_code(self, code: str) -> Coupon | None:
        """Return the coupon with this upper-case code, or None if not found."""
        ...

    @abstractmethod
    def get_coupon(self, coupon_id: CouponId) -> Coupon | None:
        """Return a coupon by ID, or None if not found."""
        ...

    @abstractmethod
    def list_coupons(self) -> list[Coupon]:
        """Return all coupons ordered by created_at descending."""
        ...

    @abstractmethod
    def code_exists(self, code: str) -> bool:
        """Check if a coupon with this code exists."""
        ...

    @abstractmethod
    def create_coupon(self, coupon: NewCoupon) -> Coupon:
        """Persist a new coupon with a zero usage count."""
        ...

    @abstractmethod
    def set_active(self, coupon_id: CouponId, is_active: bool) -> Coupon | None:
        """Flip the kill switch; None if the coupon does not exist."""
        ...

    @abstractmethod
    def delete_coupon(self, coupon_id: CouponId) -> bool:
        """Delete a coupon; False if it did not exist."""
        ...

    @abstractmethod
    def try_increment_usage(self, coupon_id: CouponId) -> bool:
        """Claim one usage slot.

        Must be a single conditional update: the count only moves when the
        coupon is still under its limit. Returns False when no slot was left.
        """
        ...

    @abstractmethod
    def release_usage(self, coupon_id: CouponId) -> bool:
        """Hand back one usage slot; False if the count was already zero."""
        ...

    @abstractmethod
    def record_redemption(self, coupon_id: CouponId, order: Order) -> None:
        """Record that a paid order used this coupon."""
        ...


class OrderStore(ABC):
    """Interface for order persistence."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[Any]:
        """Return a context manager wrapping a database transaction."""
        ...

    @abstractmethod
    def create_order(self, order: NewOrder) -> Order:
        """Persist a new order in the created state."""
        ...

    @abstractmethod
    def get_order(self, order_id: OrderId) -> Order | None:
        """Return an order by ID, or None if not found."""
        ...

    @abstractmethod
    def get_order_by_gateway_id(self, gateway_order_id: str) -> Order | None:
        """Return the order a gateway knows by this ID, or None if not found."""
        ...

    @abstractmethod
    def count_recent_unpaid(self, user_id: str, since: datetime) -> int:
        """Count the user's orders still in the created state since a point in time."""
        ...

    @abstractmethod
    def pending_coupon_orders(self, coupon_code: str, user_id: str, stale_before: datetime) -> list[Order]:
        """Unpaid orders holding a slot of this coupon that may give it back.

        That is the user's own created orders plus anyone's created orders
        older than ``stale_before``.
        """
        ...

    @abstractmethod
    def expire_order(self, order_id: OrderId) -> bool:
        """Move an order from created to expired; False if it was not in the created state."""
        ...

    @abstractmethod
    def mark_paid(self, order_id: OrderId, payment_id: str, signature: str | None) -> OrderStatus | None:
        """Move a created or expired order to paid.

        Returns the status the order left, or None if it was in neither
        state (already paid, failed, refunded).
        """
        ...


class AuditStore(ABC):
    """Interface for the append-only audit trail."""

    @abstractmethod
    def add_audit_entry(self, entry: AuditLogEntry) -> None:
        """Append an admin action."""
        ...

    @abstractmethod
    def add_security_event(self, event: SecurityEvent) -> None:
        """Append a security event."""
        ...

    @abstractmethod
    def recent_audit_entries(self, limit: int) -> list[AuditLogEntry]:
        """Return the newest audit entries first."""
        ...

    @abstractmethod
    def recent_security_events(self, limit: int) -> list[SecurityEvent]:
        """Return the newest security events first."""
        ...

    @abstractmethod
    def count_security_events(
        self, event_type: SecurityEventType, since: datetime, ip_address: str | None = None
    ) -> int:
        """Count events of one type since a point in time, optionally from one address."""
        ...


class SettingsStore(ABC):
    """Interface for keyed configuration documents."""

    @abstractmethod
    def get_document(self, key: str) -> dict[str, Any] | None:
        """Return the document stored under key, or None if absent."""
        ...

    @abstractmethod
    def save_document(self, key: str, data: dict[str, Any]) -> None:
        """Create or replace the document stored under key."""
        ...


class MessageStore(ABC):
    """Interface for contact form messages."""

    @abstractmethod
    def add_message(self, message: NewContactMessage) -> ContactMessage:
        """Persist a new message as unread."""
        ...

    @abstractmethod
    def list_messages(self) -> list[ContactMessage]:
        """Return all messages, newest first."""
        ...

    @abstractmethod
    def set_status(self, message_id: MessageId, status: MessageStatus) -> ContactMessage | None:
        """Change a message's status; None if the message does not exist."""
        ...
