"""Per-client-IP rate limits backed by the Django cache."""

from rest_framework.throttling import SimpleRateThrottle

from shop.handlers.utils import client_ip


class ClientIpRateThrottle(SimpleRateThrottle):
    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": client_ip(request)}


class CouponVerifyThrottle(ClientIpRateThrottle):
    scope = "coupon_verify"


class CreateOrderThrottle(ClientIpRateThrottle):
    scope = "create_order"


class ContactThrottle(ClientIpRateThrottle):
    scope = "contact"
