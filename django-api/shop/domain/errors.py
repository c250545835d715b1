"""Domain error codes for the shop module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    FILE_NOT_AVAILABLE = "FILE_NOT_AVAILABLE"
    FILE_NETWORK_ERROR = "FILE_NETWORK_ERROR"
    FILE_FETCH_FAILED = "FILE_FETCH_FAILED"
    INVALID_FILE_URL = "INVALID_FILE_URL"
    INVALID_FILE_FORMAT = "INVALID_FILE_FORMAT"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"

    COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
    COUPON_INACTIVE = "COUPON_INACTIVE"
    COUPON_EXPIRED = "COUPON_EXPIRED"
    COUPON_NOT_YET_ACTIVE = "COUPON_NOT_YET_ACTIVE"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED"
    EMAIL_RESTRICTED = "EMAIL_RESTRICTED"
    COUPON_EXISTS = "COUPON_EXISTS"

    CANNOT_REMOVE_SELF = "CANNOT_REMOVE_SELF"

    PAYMENTS_DISABLED = "PAYMENTS_DISABLED"
    PAYMENT_NOT_CONFIGURED = "PAYMENT_NOT_CONFIGURED"
    VELOCITY_LIMIT_EXCEEDED = "VELOCITY_LIMIT_EXCEEDED"
    TEMPLATE_UNAVAILABLE = "TEMPLATE_UNAVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    INVALID_ORDER_ID = "INVALID_ORDER_ID"
    ORDER_ALREADY_PROCESSED = "ORDER_ALREADY_PROCESSED"
    ORDER_NOT_PAID = "ORDER_NOT_PAID"
    EMAIL_NOT_CONFIGURED = "EMAIL_NOT_CONFIGURED"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


# ── Taxonomy ───────────────────────────────────────────────────────────────────


class InvalidInputError(DomainError):
    """Malformed request shape."""


class NotFoundError(DomainError):
    """Token, coupon, template or order absent."""


class AccessDeniedError(DomainError):
    """Missing credential or insufficient privilege."""


class UpstreamFailureError(DomainError):
    """File host, payment gateway or email API failed."""


class CouponError(DomainError):
    """A coupon cannot be applied; reported to shoppers as a soft failure."""


# ── Access ─────────────────────────────────────────────────────────────────────


class UnauthorizedError(AccessDeniedError):
    """Raised when no valid credential accompanies the request."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(code=ErrorCode.UNAUTHORIZED, message=message)


class ForbiddenError(AccessDeniedError):
    """Raised when a verified caller lacks the required privilege."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


# ── Downloads ──────────────────────────────────────────────────────────────────


class InvalidTokenError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_TOKEN, message="Invalid download token")


class TokenNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TOKEN_NOT_FOUND,
            message="Invalid or expired download token",
        )


class TokenExpiredError(DomainError):
    """Raised when a token exists but its expiry instant has passed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TOKEN_EXPIRED,
            message="Download token has expired. Please contact support for a new link.",
        )


class TemplateNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.TEMPLATE_NOT_FOUND, message="Template not found")


class FileNotAvailableError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FILE_NOT_AVAILABLE,
            message="Download file not available",
        )


class FileNetworkError(UpstreamFailureError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.FILE_NETWORK_ERROR,
            message="Failed to reach file server",
        )


class FileFetchFailedError(UpstreamFailureError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.FILE_FETCH_FAILED, message="Failed to retrieve file")


class InvalidFileUrlError(UpstreamFailureError):
    """Raised when the file host answers with a web page instead of raw data."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FILE_URL,
            message="Invalid download URL configuration. Please contact support.",
        )


class InvalidFileFormatError(UpstreamFailureError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_FILE_FORMAT,
            message="Downloaded file is not valid JSON. Please contact support.",
        )


class DownloadFailedError(DomainError):
    """Raised for download failures that fit no other category."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DOWNLOAD_FAILED,
            message="Failed to process download. Please try again.",
        )


# ── Coupons ────────────────────────────────────────────────────────────────────


class CouponNotFoundError(CouponError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.COUPON_NOT_FOUND, message="Invalid coupon code")


class CouponInactiveError(CouponError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.COUPON_INACTIVE, message="Coupon is not active")


class CouponExpiredError(CouponError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.COUPON_EXPIRED, message="Coupon has expired")


class CouponNotYetActiveError(CouponError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.COUPON_NOT_YET_ACTIVE,
            message="Coupon is not active yet",
        )


class UsageLimitReachedError(CouponError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.USAGE_LIMIT_REACHED,
            message="Coupon usage limit reached",
        )


class EmailRestrictedError(CouponError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_RESTRICTED,
            message="This coupon is not valid for your email address",
        )


class CouponExistsError(InvalidInputError):
    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.COUPON_EXISTS,
            message=f"A coupon with code {code} already exists",
        )


class CouponNotFoundByIdError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message="Coupon not found")


class MessageNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOT_FOUND, message="Message not found")


class InvalidCouponError(InvalidInputError):
    """Raised when a coupon definition breaks a creation rule."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)


# ── Admin ──────────────────────────────────────────────────────────────────────


class CannotRemoveSelfError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CANNOT_REMOVE_SELF,
            message="Cannot remove yourself from whitelist",
        )


# ── Checkout ───────────────────────────────────────────────────────────────────


class PaymentsDisabledError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PAYMENTS_DISABLED,
            message="Payments are currently disabled by the administrator.",
        )


class PaymentNotConfiguredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PAYMENT_NOT_CONFIGURED,
            message="Payment gateway not configured. Please contact support.",
        )


class VelocityLimitExceededError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.VELOCITY_LIMIT_EXCEEDED,
            message=(
                "You have too many pending orders. Please complete or cancel "
                "existing orders before creating a new one."
            ),
        )


class TemplateUnavailableError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TEMPLATE_UNAVAILABLE,
            message="Template is currently unavailable",
        )


class OutOfStockError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.OUT_OF_STOCK, message="Template is out of stock")


class GatewayError(UpstreamFailureError):
    def __init__(self, message: str = "Payment gateway error. Please try again.") -> None:
        super().__init__(code=ErrorCode.GATEWAY_ERROR, message=message)


class InvalidSignatureError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_SIGNATURE, message="Invalid payment signature")


class PaymentFailedError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.PAYMENT_FAILED, message="Payment not successful")


class OrderNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.ORDER_NOT_FOUND, message="Order not found")


class InvalidOrderIdError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.INVALID_ORDER_ID, message="Invalid payment details")


class OrderAlreadyProcessedError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ORDER_ALREADY_PROCESSED,
            message="Order already processed",
        )


class OrderNotPaidError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_PAID,
            message="Can only resend email for paid orders",
        )


class EmailNotConfiguredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_NOT_CONFIGURED,
            message="Email delivery is not configured",
        )


class EmailDeliveryError(UpstreamFailureError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EMAIL_DELIVERY_FAILED,
            message="Failed to send email",
        )
