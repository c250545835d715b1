"""Maps exceptions to JSON error responses.

Every error body has the same shape::

    {"success": false, "error": "<user-safe message>", "code": "<ERROR_CODE>"}

Domain errors take their status from STATUS_BY_CODE. Anything not
classified is logged with its traceback and reported as a generic 500.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    PermissionDenied,
    Throttled,
    ValidationError,
)
from rest_framework.response import Response

from shop.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RATE_LIMIT_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    # Downloads
    ErrorCode.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TOKEN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TOKEN_EXPIRED: status.HTTP_410_GONE,
    ErrorCode.TEMPLATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FILE_NOT_AVAILABLE: status.HTTP_404_NOT_FOUND,
    ErrorCode.FILE_NETWORK_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.FILE_FETCH_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INVALID_FILE_URL: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INVALID_FILE_FORMAT: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DOWNLOAD_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    # Coupons
    ErrorCode.COUPON_NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorCode.COUPON_INACTIVE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.COUPON_EXPIRED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.COUPON_NOT_YET_ACTIVE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.USAGE_LIMIT_REACHED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMAIL_RESTRICTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.COUPON_EXISTS: status.HTTP_409_CONFLICT,
    # Admin
    ErrorCode.CANNOT_REMOVE_SELF: status.HTTP_400_BAD_REQUEST,
    # Checkout
    ErrorCode.PAYMENTS_DISABLED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.PAYMENT_NOT_CONFIGURED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.VELOCITY_LIMIT_EXCEEDED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.TEMPLATE_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.OUT_OF_STOCK: status.HTTP_400_BAD_REQUEST,
    ErrorCode.GATEWAY_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.INVALID_SIGNATURE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ORDER_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_ALREADY_PROCESSED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_NOT_PAID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EMAIL_NOT_CONFIGURED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EMAIL_DELIVERY_FAILED: status.HTTP_502_BAD_GATEWAY,
}

GENERIC_MESSAGE = "An unexpected error occurred. Please try again later."


def error_response(message: str, code: str, status_code: int, headers: dict | None = None) -> Response:
    return Response(
        {"success": False, "error": message, "code": code},
        status=status_code,
        headers=headers,
    )


def first_message(detail) -> str:
    """Flatten DRF validation detail to its first message."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = first_message(value)
            return message if field == "non_field_errors" else f"{field}: {message}"
    if isinstance(detail, list) and detail:
        return first_message(detail[0])
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if status_code >= 500:
            logger.error("Request failed", extra={"code": exc.code.value})
        return error_response(exc.message, exc.code.value, status_code)

    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        headers = {}
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            headers["WWW-Authenticate"] = auth_header
        return error_response(
            str(exc.detail),
            ErrorCode.UNAUTHORIZED.value,
            exc.status_code,
            headers=headers,
        )

    if isinstance(exc, PermissionDenied):
        return error_response("Forbidden", ErrorCode.FORBIDDEN.value, status.HTTP_403_FORBIDDEN)

    if isinstance(exc, Throttled):
        headers = {"Retry-After": str(int(exc.wait))} if exc.wait else {}
        return error_response(
            "Too many requests. Please try again later.",
            ErrorCode.RATE_LIMIT_EXCEEDED.value,
            status.HTTP_429_TOO_MANY_REQUESTS,
            headers=headers,
        )

    if isinstance(exc, ValidationError):
        return error_response(
            first_message(exc.detail),
            ErrorCode.VALIDATION_ERROR.value,
            status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, APIException):
        code = ErrorCode.VALIDATION_ERROR.value if exc.status_code == 400 else str(exc.default_code).upper()
        return error_response(str(exc.detail), code, exc.status_code)

    view = context.get("view")
    logger.exception(
        "Unhandled error",
        extra={"view": type(view).__name__ if view else None},
    )
    return error_response(
        GENERIC_MESSAGE,
        ErrorCode.INTERNAL_ERROR.value,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
