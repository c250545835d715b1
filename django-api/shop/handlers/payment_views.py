"""Checkout handlers for the Razorpay and Cashfree flows."""

from django.conf import settings
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from shop import services
from shop.domain import CheckoutSession, Customer
from shop.handlers.authentication import FirebaseBearerAuthentication
from shop.handlers.permissions import IsVerifiedUser
from shop.handlers.serializers import (
    CashfreeVerifySerializer,
    CreateOrderSerializer,
    OrderSerializer,
    RazorpayVerifySerializer,
)
from shop.handlers.throttles import CreateOrderThrottle


class CreateOrderView(APIView):
    authentication_classes = [FirebaseBearerAuthentication]
    permission_classes = [IsVerifiedUser]
    throttle_classes = [CreateOrderThrottle]
    gateway = ""

    def start_checkout(self, request: Request) -> CheckoutSession:
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        identity = request.user

        return services.build_order_service().create_order(
            identity,
            self.gateway,
            data["templateId"],
            Customer(id=identity.uid, name=data["userName"], email=data["userEmail"].lower()),
            coupon_code=data["couponCode"] or None,
            return_url=data["returnUrl"] or None,
        )


class RazorpayCreateOrderView(CreateOrderView):
    """Handler for POST /api/payments/create-order"""

    gateway = "razorpay"

    def post(self, request: Request) -> Response:
        session = self.start_checkout(request)
        return Response(
            {
                "success": True,
                "orderId": str(session.order.id),
                "razorpayOrderId": session.gateway_order.gateway_order_id,
                "amount": session.gateway_order.amount,
                "currency": session.gateway_order.currency,
                "keyId": settings.RZP_ID,
                "order": OrderSerializer(session.order).data,
            },
            status=status.HTTP_201_CREATED,
        )


class CashfreeCreateOrderView(CreateOrderView):
    """Handler for POST /api/cashfree/create-order"""

    gateway = "cashfree"

    def post(self, request: Request) -> Response:
        session = self.start_checkout(request)
        return Response(
            {
                "success": True,
                "orderId": str(session.order.id),
                "cashfreeOrderId": session.gateway_order.gateway_order_id,
                "paymentSessionId": session.gateway_order.payment_session_id,
                "amount": session.gateway_order.amount,
                "currency": session.gateway_order.currency,
                "order": OrderSerializer(session.order).data,
            },
            status=status.HTTP_201_CREATED,
        )


class RazorpayVerifyView(APIView):
    """Handler for POST /api/payments/verify"""

    def post(self, request: Request) -> Response:
        serializer = RazorpayVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = services.build_order_service().verify_razorpay(
            order_id=data["orderId"],
            gateway_order_id=data["razorpay_order_id"],
            payment_id=data["razorpay_payment_id"],
            signature=data["razorpay_signature"],
        )
        return Response({"success": True, "message": "Payment verified", "orderId": str(order.id)})


class CashfreeVerifyView(APIView):
    """Handler for POST /api/cashfree/verify"""

    def post(self, request: Request) -> Response:
        serializer = CashfreeVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = services.build_order_service().verify_cashfree(serializer.validated_data["orderId"])
        return Response(
            {
                "success": True,
                "message": "Payment verified",
                "orderId": str(order.id),
                "orderTotal": order.total_amount.amount,
                "currency": order.currency,
            }
        )
