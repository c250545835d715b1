"""Admin console handlers.

Every view here goes through the same gate: bearer-token authentication,
which records rejected tokens as failed logins, followed by the
whitelisted-admin permission.
"""

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from shop import services
from shop.domain import AuditCategory, DiscountType, MessageStatus, NewCoupon, SecurityEventType
from shop.handlers.authentication import AdminBearerAuthentication
from shop.handlers.permissions import IsWhitelistedAdmin
from shop.handlers.serializers import (
    AuditLogQuerySerializer,
    AuditLogSerializer,
    ContactMessageSerializer,
    CouponCreateSerializer,
    CouponSerializer,
    CouponToggleSerializer,
    MessageStatusSerializer,
    ResendEmailSerializer,
    SecurityEventSerializer,
    SiteSettingsUpdateSerializer,
    WhitelistChangeSerializer,
)
from shop.handlers.utils import client_ip, user_agent


class AdminAPIView(APIView):
    authentication_classes = [AdminBearerAuthentication]
    permission_classes = [IsWhitelistedAdmin]
    admin_action = ""

    def audit(self, request: Request, action: str, category: AuditCategory, details: dict | None = None) -> None:
        services.build_audit_service().record(
            request.user,
            action,
            category,
            details=details,
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )


class AdminVerifyView(AdminAPIView):
    """Handler for POST /api/admin/verify"""

    admin_action = "admin_login"

    def post(self, request: Request) -> Response:
        identity = request.user
        audit = services.build_audit_service()
        audit.record_security_event(
            SecurityEventType.ADMIN_LOGIN,
            details={"success": True},
            email=identity.email,
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )
        return Response(
            {
                "success": True,
                "isAdmin": True,
                "isWhitelisted": True,
                "email": identity.email,
                "failedLoginAttempts": audit.failed_login_attempts(hours=24),
            }
        )


class AdminSettingsView(AdminAPIView):
    """Handler for PUT /api/admin/settings"""

    admin_action = "update_settings"

    def put(self, request: Request) -> Response:
        if not isinstance(request.data, dict) or not request.data:
            raise ValidationError("Request body must be a non-empty JSON object")
        serializer = SiteSettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = serializer.validated_data
        updated = services.build_settings_provider().update(changes, actor=request.user.email)
        self.audit(
            request,
            "Updated site settings",
            AuditCategory.SETTINGS,
            {"fields": sorted(changes.keys())},
        )
        return Response({"success": True, "settings": updated.public()})


class AdminWhitelistView(AdminAPIView):
    """Handler for POST /api/admin/whitelist"""

    admin_action = "update_whitelist"

    def post(self, request: Request) -> Response:
        serializer = WhitelistChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        action = serializer.validated_data["action"]
        email = serializer.validated_data["email"]

        provider = services.build_settings_provider()
        if action == "add":
            emails = provider.add_to_whitelist(email, actor=request.user)
        else:
            emails = provider.remove_from_whitelist(email, actor=request.user)

        verb = "Added" if action == "add" else "Removed"
        self.audit(
            request,
            f"{verb} {email.lower()} {'to' if action == 'add' else 'from'} admin whitelist",
            AuditCategory.SECURITY,
            {"action": action, "email": email.lower()},
        )
        return Response({"success": True, "emails": list(emails)})


class AdminAuditLogView(AdminAPIView):
    """Handler for GET /api/admin/audit-logs"""

    admin_action = "view_audit_logs"

    def get(self, request: Request) -> Response:
        query = AuditLogQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        audit = services.build_audit_service()
        limit = query.validated_data["limit"]

        if query.validated_data["type"] == "security":
            events = audit.recent_security_events(limit)
            return Response({"events": SecurityEventSerializer(events, many=True).data})
        logs = audit.recent_logs(limit)
        return Response({"logs": AuditLogSerializer(logs, many=True).data})


class AdminCouponListView(AdminAPIView):
    """Handler for GET/POST /api/admin/coupons"""

    admin_action = "manage_coupons"

    def get(self, request: Request) -> Response:
        coupons = services.build_coupon_service().list_coupons()
        return Response({"coupons": CouponSerializer(coupons, many=True).data})

    def post(self, request: Request) -> Response:
        serializer = CouponCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        coupon = services.build_coupon_service().create_coupon(
            NewCoupon(
                code=data["code"],
                discount_type=DiscountType(data["discountType"]),
                discount_value=data["discountValue"],
                valid_from=data["validFrom"],
                valid_until=data["validUntil"],
                usage_limit=data["usageLimit"],
                specific_email=data["specificEmail"],
                is_active=data["isActive"],
            )
        )
        self.audit(
            request,
            f"Created coupon {coupon.code}",
            AuditCategory.COUPON,
            {"couponId": str(coupon.id), "code": coupon.code},
        )
        return Response(
            {"success": True, "coupon": CouponSerializer(coupon).data},
            status=status.HTTP_201_CREATED,
        )


class AdminCouponDetailView(AdminAPIView):
    """Handler for PATCH/DELETE /api/admin/coupons/{coupon_id}"""

    admin_action = "manage_coupons"

    def patch(self, request: Request, coupon_id: str) -> Response:
        serializer = CouponToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        is_active = serializer.validated_data["isActive"]

        coupon = services.build_coupon_service().set_active(coupon_id, is_active)
        self.audit(
            request,
            f"{'Activated' if is_active else 'Deactivated'} coupon {coupon.code}",
            AuditCategory.COUPON,
            {"couponId": coupon_id, "isActive": is_active},
        )
        return Response({"success": True, "coupon": CouponSerializer(coupon).data})

    def delete(self, request: Request, coupon_id: str) -> Response:
        services.build_coupon_service().delete_coupon(coupon_id)
        self.audit(request, "Deleted coupon", AuditCategory.COUPON, {"couponId": coupon_id})
        return Response({"success": True})


class AdminMessageListView(AdminAPIView):
    """Handler for GET /api/admin/messages"""

    admin_action = "view_messages"

    def get(self, request: Request) -> Response:
        messages = services.build_contact_service().list_messages()
        unread = sum(1 for m in messages if m.status is MessageStatus.UNREAD)
        return Response(
            {"messages": ContactMessageSerializer(messages, many=True).data, "unread": unread}
        )


class AdminMessageDetailView(AdminAPIView):
    """Handler for PATCH /api/admin/messages/{message_id}"""

    admin_action = "manage_messages"

    def patch(self, request: Request, message_id: str) -> Response:
        serializer = MessageStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = MessageStatus(serializer.validated_data["status"])

        message = services.build_contact_service().set_status(message_id, new_status)
        self.audit(
            request,
            f"Marked message as {new_status.value}",
            AuditCategory.USER,
            {"messageId": message_id, "status": new_status.value},
        )
        return Response({"success": True, "message": ContactMessageSerializer(message).data})


class ResendEmailView(AdminAPIView):
    """Handler for POST /api/orders/resend-email"""

    admin_action = "resend_order_email"

    def post(self, request: Request) -> Response:
        serializer = ResendEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order_id = serializer.validated_data["orderId"]

        services.build_order_service().resend_purchase_email(order_id)
        self.audit(request, "Resent purchase email", AuditCategory.ORDER, {"orderId": order_id})
        return Response({"success": True})
