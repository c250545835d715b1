"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.exceptions import Throttled
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from shop import services
from shop.domain import NewContactMessage
from shop.domain.errors import CouponError, DomainError, DownloadFailedError
from shop.handlers.serializers import ContactSerializer, CouponSummarySerializer, CouponVerifySerializer
from shop.handlers.throttles import ContactThrottle, CouponVerifyThrottle

logger = logging.getLogger(__name__)


class DownloadView(APIView):
    """Handler for GET /api/downloads/{token}"""

    def get(self, request: Request, token: str) -> HttpResponse:
        try:
            downloaded = services.build_download_service().redeem(token)
        except DomainError:
            raise
        except Exception:
            logger.exception("Download failed")
            raise DownloadFailedError()

        response = HttpResponse(downloaded.content, content_type=downloaded.content_type)
        response["Content-Disposition"] = f'attachment; filename="{downloaded.filename}"'
        response["Cache-Control"] = "private, no-cache, no-store, must-revalidate"
        response["X-Content-Type-Options"] = "nosniff"
        return response


class CouponVerifyView(APIView):
    """Handler for POST /api/coupons/verify

    Invalid coupons are a normal answer here, not an error: they come back
    as 200 with ``valid: false``.
    """

    throttle_classes = [CouponVerifyThrottle]

    def post(self, request: Request) -> Response:
        serializer = CouponVerifySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"valid": False, "message": "Invalid request", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data

        try:
            quote = services.build_coupon_service().quote(
                data["code"], data["userEmail"], data["templatePrice"]
            )
        except CouponError as exc:
            return Response({"valid": False, "message": exc.message, "code": exc.code.value})

        return Response(
            {
                "valid": True,
                "discountAmount": quote.discount.discount_amount,
                "discountType": quote.discount.discount_type.value,
                "finalPrice": quote.discount.final_price,
                "coupon": CouponSummarySerializer(quote.coupon).data,
            }
        )

    def handle_exception(self, exc):
        if isinstance(exc, Throttled):
            return Response(
                {"valid": False, "message": "Too many requests. Please try again later."},
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )
        return super().handle_exception(exc)


class PublicSettingsView(APIView):
    """Handler for GET /api/settings"""

    def get(self, request: Request) -> Response:
        return Response(services.build_settings_provider().get().public())


class ContactView(APIView):
    """Handler for POST /api/contact"""

    throttle_classes = [ContactThrottle]

    def post(self, request: Request) -> Response:
        serializer = ContactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        message = services.build_contact_service().submit(
            NewContactMessage(
                name=data["name"],
                email=data["email"],
                subject=data["subject"],
                message=data["message"],
                user_id=data["userId"] or None,
            )
        )
        return Response({"success": True, "id": str(message.id)})


class RazorpayConfigView(APIView):
    """Handler for GET /api/config/razorpay

    Publishes the key ID the checkout widget needs. An unconfigured gateway
    still answers 200 so the storefront can hide the option.
    """

    def get(self, request: Request) -> Response:
        key_id = settings.RZP_ID
        if not key_id:
            return Response({"keyId": None, "mode": None, "error": "Payment gateway not configured"})
        return Response({"keyId": key_id, "mode": "test" if key_id.startswith("rzp_test") else "live"})


class CashfreeConfigView(APIView):
    """Handler for GET /api/config/cashfree"""

    def get(self, request: Request) -> Response:
        configured = bool(settings.CASHFREE_APP_ID and settings.CASHFREE_SECRET_KEY)
        return Response({"configured": configured, "env": settings.CASHFREE_MODE})
