"""Django ORM implementation of the store interfaces."""

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from shop import models
from shop.domain import (
    AuditCategory,
    AuditLogEntry,
    ContactMessage,
    Coupon,
    CouponId,
    DiscountType,
    DownloadToken,
    MessageId,
    MessageStatus,
    Money,
    NewContactMessage,
    NewCoupon,
    NewOrder,
    Order,
    OrderId,
    OrderItem,
    OrderStatus,
    SecurityEvent,
    SecurityEventType,
    Template,
    TemplateId,
    UserRole,
)
from shop.domain.errors import CouponExistsError
from shop.stores.interfaces import (
    AuditStore,
    CatalogStore,
    CouponStore,
    MessageStore,
    OrderStore,
    SettingsStore,
    TokenStore,
)


def _template_to_domain(row: models.Template) -> Template:
    return Template(
        id=TemplateId(row.id),
        title=row.title,
        slug=row.slug,
        price=Money(row.price),
        currency=row.currency,
        download_file_url=row.download_file_url,
        is_available=row.is_available,
        stock_count=row.stock_count,
        created_at=row.created_at,
    )


def _token_to_domain(row: models.DownloadToken) -> DownloadToken:
    return DownloadToken(
        token=row.token,
        template_id=TemplateId(row.template_id),
        order_id=OrderId(row.order_id),
        user_id=row.user_id,
        expires_at=row.expires_at,
        created_at=row.created_at,
    )


def _coupon_to_domain(row: models.Coupon) -> Coupon:
    return Coupon(
        id=CouponId(row.id),
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=row.discount_value,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        usage_limit=row.usage_limit,
        usage_count=row.usage_count,
        specific_email=row.specific_email or None,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def _message_to_domain(row: models.ContactMessage) -> ContactMessage:
    return ContactMessage(
        id=MessageId(row.id),
        name=row.name,
        email=row.email,
        subject=row.subject,
        message=row.message,
        user_id=row.user_id or None,
        status=MessageStatus(row.status),
        created_at=row.created_at,
    )


def _order_to_domain(row: models.Order) -> Order:
    items = tuple(
        OrderItem(
            template_id=TemplateId(item.template_id),
            template_title=item.template_title,
            price_at_purchase=Money(item.price_at_purchase),
        )
        for item in row.items.all()
    )
    return Order(
        id=OrderId(row.id),
        user_id=row.user_id,
        user_email=row.user_email,
        user_name=row.user_name,
        items=items,
        total_amount=Money(row.total_amount),
        discount_amount=Money(row.discount_amount),
        coupon_code=row.coupon_code or None,
        currency=row.currency,
        status=OrderStatus(row.status),
        gateway=row.gateway,
        gateway_order_id=row.gateway_order_id,
        payment_id=row.payment_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoTokenStore(TokenStore):
    def get_token(self, token: str) -> DownloadToken | None:
        row = models.DownloadToken.objects.filter(token=token).first()
        return _token_to_domain(row) if row else None

    def create_tokens(self, tokens: list[DownloadToken]) -> None:
        models.DownloadToken.objects.bulk_create(
            [
                models.DownloadToken(
                    token=t.token,
                    template_id=t.template_id.value,
                    order_id=t.order_id.value,
                    user_id=t.user_id,
                    expires_at=t.expires_at,
                )
                for t in tokens
            ]
        )

    def tokens_for_order(self, order_id: OrderId) -> list[DownloadToken]:
        rows = models.DownloadToken.objects.filter(order_id=order_id.value).order_by("created_at", "id")
        return [_token_to_domain(row) for row in rows]


class DjangoCatalogStore(CatalogStore):
    def get_template(self, template_id: TemplateId) -> Template | None:
        row = models.Template.objects.filter(pk=template_id.value).first()
        return _template_to_domain(row) if row else None

    def increment_sales(self, template_ids: list[TemplateId]) -> None:
        for template_id in template_ids:
            models.Template.objects.filter(pk=template_id.value).update(
                sales_count=F("sales_count") + 1
            )

    def get_user_role(self, uid: str) -> UserRole | None:
        role = models.UserProfile.objects.filter(pk=uid).values_list("role", flat=True).first()
        return UserRole(role) if role else None


class DjangoCouponStore(CouponStore):
    def get_coupon_by_code(self, code: str) -> Coupon | None:
        row = models.Coupon.objects.filter(code=code).first()
        return _coupon_to_domain(row) if row else None

    def get_coupon(self, coupon_id: CouponId) -> Coupon | None:
        row = models.Coupon.objects.filter(pk=coupon_id.value).first()
        return _coupon_to_domain(row) if row else None

    def list_coupons(self) -> list[Coupon]:
        return [_coupon_to_domain(row) for row in models.Coupon.objects.order_by("-created_at")]

    def code_exists(self, code: str) -> bool:
        return models.Coupon.objects.filter(code=code).exists()

    def create_coupon(self, coupon: NewCoupon) -> Coupon:
        try:
            with transaction.atomic():
                row = models.Coupon.objects.create(
                    code=coupon.code,
                    discount_type=coupon.discount_type.value,
                    discount_value=coupon.discount_value,
                    valid_from=coupon.valid_from,
                    valid_until=coupon.valid_until,
                    usage_limit=coupon.usage_limit,
                    specific_email=coupon.specific_email,
                    is_active=coupon.is_active,
                )
        except IntegrityError as exc:
            raise CouponExistsError(coupon.code) from exc
        return _coupon_to_domain(row)

    def set_active(self, coupon_id: CouponId, is_active: bool) -> Coupon | None:
        updated = models.Coupon.objects.filter(pk=coupon_id.value).update(is_active=is_active)
        return self.get_coupon(coupon_id) if updated else None

    def delete_coupon(self, coupon_id: CouponId) -> bool:
        deleted, _ = models.Coupon.objects.filter(pk=coupon_id.value).delete()
        return deleted > 0

    def try_increment_usage(self, coupon_id: CouponId) -> bool:
        updated = (
            models.Coupon.objects.filter(pk=coupon_id.value)
            .filter(Q(usage_limit__isnull=True) | Q(usage_count__lt=F("usage_limit")))
            .update(usage_count=F("usage_count") + 1)
        )
        return updated == 1

    def release_usage(self, coupon_id: CouponId) -> bool:
        updated = (
            models.Coupon.objects.filter(pk=coupon_id.value, usage_count__gt=0)
            .update(usage_count=F("usage_count") - 1)
        )
        return updated == 1

    def record_redemption(self, coupon_id: CouponId, order: Order) -> None:
        models.CouponRedemption.objects.get_or_create(
            order_id=order.id.value,
            defaults={
                "coupon_id": coupon_id.value,
                "user_id": order.user_id,
                "user_email": order.user_email,
                "user_name": order.user_name,
                "amount": order.total_amount.amount,
                "discount_applied": order.discount_amount.amount,
            },
        )


class DjangoOrderStore(OrderStore):
    def atomic(self) -> AbstractContextManager[Any]:
        return transaction.atomic()

    def create_order(self, order: NewOrder) -> Order:
        with transaction.atomic():
            row = models.Order.objects.create(
                user_id=order.user_id,
                user_email=order.user_email,
                user_name=order.user_name,
                total_amount=order.total_amount.amount,
                discount_amount=order.discount_amount.amount,
                coupon_code=order.coupon_code,
                currency=order.currency,
                gateway=order.gateway,
                gateway_order_id=order.gateway_order_id,
            )
            models.OrderItem.objects.bulk_create(
                [
                    models.OrderItem(
                        order=row,
                        template_id=item.template_id.value,
                        template_title=item.template_title,
                        price_at_purchase=item.price_at_purchase.amount,
                    )
                    for item in order.items
                ]
            )
        return self.get_order(OrderId(row.id))

    def get_order(self, order_id: OrderId) -> Order | None:
        row = models.Order.objects.prefetch_related("items").filter(pk=order_id.value).first()
        return _order_to_domain(row) if row else None

    def get_order_by_gateway_id(self, gateway_order_id: str) -> Order | None:
        row = (
            models.Order.objects.prefetch_related("items")
            .filter(gateway_order_id=gateway_order_id)
            .first()
        )
        return _order_to_domain(row) if row else None

    def count_recent_unpaid(self, user_id: str, since: datetime) -> int:
        return models.Order.objects.filter(
            user_id=user_id,
            status=OrderStatus.CREATED.value,
            created_at__gte=since,
        ).count()

    def pending_coupon_orders(self, coupon_code: str, user_id: str, stale_before: datetime) -> list[Order]:
        rows = (
            models.Order.objects.prefetch_related("items")
            .filter(coupon_code=coupon_code, status=OrderStatus.CREATED.value)
            .filter(Q(user_id=user_id) | Q(created_at__lt=stale_before))
            .order_by("created_at")
        )
        return [_order_to_domain(row) for row in rows]

    def expire_order(self, order_id: OrderId) -> bool:
        updated = models.Order.objects.filter(
            pk=order_id.value, status=OrderStatus.CREATED.value
        ).update(status=OrderStatus.EXPIRED.value, updated_at=timezone.now())
        return updated == 1

    def mark_paid(self, order_id: OrderId, payment_id: str, signature: str | None) -> OrderStatus | None:
        for previous in (OrderStatus.CREATED, OrderStatus.EXPIRED):
            updated = models.Order.objects.filter(pk=order_id.value, status=previous.value).update(
                status=OrderStatus.PAID.value,
                payment_id=payment_id,
                signature=signature,
                updated_at=timezone.now(),
            )
            if updated:
                return previous
        return None


class DjangoAuditStore(AuditStore):
    def add_audit_entry(self, entry: AuditLogEntry) -> None:
        models.AuditLog.objects.create(
            admin_id=entry.admin_id,
            admin_email=entry.admin_email,
            action=entry.action,
            category=entry.category.value,
            details=entry.details,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )

    def add_security_event(self, event: SecurityEvent) -> None:
        models.SecurityEvent.objects.create(
            type=event.type.value,
            email=event.email,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
            details=event.details,
        )

    def recent_audit_entries(self, limit: int) -> list[AuditLogEntry]:
        rows = models.AuditLog.objects.order_by("-timestamp", "-id")[:limit]
        return [
            AuditLogEntry(
                id=row.id,
                admin_id=row.admin_id,
                admin_email=row.admin_email,
                action=row.action,
                category=AuditCategory(row.category),
                details=row.details,
                ip_address=row.ip_address,
                user_agent=row.user_agent,
                timestamp=row.timestamp,
            )
            for row in rows
        ]

    def recent_security_events(self, limit: int) -> list[SecurityEvent]:
        rows = models.SecurityEvent.objects.order_by("-timestamp", "-id")[:limit]
        return [
            SecurityEvent(
                id=row.id,
                type=SecurityEventType(row.type),
                email=row.email,
                ip_address=row.ip_address,
                user_agent=row.user_agent,
                details=row.details,
                timestamp=row.timestamp,
            )
            for row in rows
        ]

    def count_security_events(
        self, event_type: SecurityEventType, since: datetime, ip_address: str | None = None
    ) -> int:
        events = models.SecurityEvent.objects.filter(type=event_type.value, timestamp__gte=since)
        if ip_address is not None:
            events = events.filter(ip_address=ip_address)
        return events.count()


class DjangoSettingsStore(SettingsStore):
    def get_document(self, key: str) -> dict[str, Any] | None:
        row = models.SettingsDocument.objects.filter(pk=key).first()
        return dict(row.data) if row else None

    def save_document(self, key: str, data: dict[str, Any]) -> None:
        models.SettingsDocument.objects.update_or_create(key=key, defaults={"data": data})


class DjangoMessageStore(MessageStore):
    def add_message(self, message: NewContactMessage) -> ContactMessage:
        row = models.ContactMessage.objects.create(
            user_id=message.user_id,
            name=message.name,
            email=message.email,
            subject=message.subject,
            message=message.message,
        )
        return _message_to_domain(row)

    def list_messages(self) -> list[ContactMessage]:
        rows = models.ContactMessage.objects.order_by("-created_at")
        return [_message_to_domain(row) for row in rows]

    def set_status(self, message_id: MessageId, status: MessageStatus) -> ContactMessage | None:
        updated = models.ContactMessage.objects.filter(pk=message_id.value).update(status=status.value)
        if not updated:
            return None
        return _message_to_domain(models.ContactMessage.objects.get(pk=message_id.value))
