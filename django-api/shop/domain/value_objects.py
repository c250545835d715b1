"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Self
from uuid import UUID

TOKEN_LENGTH = 64
TWO_PLACES = Decimal("0.01")

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class OrderStatus(Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    EXPIRED = "expired"


class MessageStatus(Enum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"


class UserRole(Enum):
    ADMIN = "admin"
    USER = "user"


class AuditCategory(Enum):
    AUTH = "auth"
    SETTINGS = "settings"
    TEMPLATE = "template"
    ORDER = "order"
    USER = "user"
    COUPON = "coupon"
    SECURITY = "security"


class SecurityEventType(Enum):
    FAILED_LOGIN = "failed_login"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"
    ADMIN_LOGIN = "admin_login"
    ADMIN_LOGOUT = "admin_logout"


@dataclass(frozen=True)
class TemplateId:
    """Unique identifier for a Template."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderId:
    """Unique identifier for an Order."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class CouponId:
    """Unique identifier for a Coupon."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class MessageId:
    """Unique identifier for a contact message."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DownloadTokenValue:
    """Opaque bearer token granting access to one purchased file."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or len(self.value) != TOKEN_LENGTH:
            raise ValueError(f"Download token must be {TOKEN_LENGTH} characters")

    @property
    def prefix(self) -> str:
        """Short form that is safe to write to logs."""
        return self.value[:8]


@dataclass(frozen=True)
class CouponCode:
    """Coupon code, normalised to upper case."""

    value: str

    def __post_init__(self) -> None:
        normalised = (self.value or "").strip().upper()
        if not normalised:
            raise ValueError("Coupon code cannot be empty")
        object.__setattr__(self, "value", normalised)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EmailAddress:
    """Email address, normalised to lower case."""

    value: str

    def __post_init__(self) -> None:
        normalised = (self.value or "").strip().lower()
        if not _EMAIL_PATTERN.match(normalised):
            raise ValueError("Invalid email address")
        object.__setattr__(self, "value", normalised)

    def matches(self, other: str | None) -> bool:
        return bool(other) and other.strip().lower() == self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def quantized(self) -> Decimal:
        return self.amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    def minor_units(self) -> int:
        """Amount in the smallest currency unit (paise, cents)."""
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"
