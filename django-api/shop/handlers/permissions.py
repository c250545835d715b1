from rest_framework.permissions import BasePermission

from shop import services
from shop.domain import Identity
from shop.handlers.utils import client_ip, user_agent


class IsVerifiedUser(BasePermission):
    def has_permission(self, request, view) -> bool:
        return isinstance(request.user, Identity)


class IsWhitelistedAdmin(BasePermission):
    """Admin endpoints: verified identity, admin role and whitelisted email.

    Refusals raise ForbiddenError from the access service, which records
    the attempt before the handler maps it to 403.
    """

    def has_permission(self, request, view) -> bool:
        identity = request.user
        if not isinstance(identity, Identity):
            return False
        action = getattr(view, "admin_action", None) or f"{request.method} {request.path}"
        services.build_access_service().authorize(
            identity,
            action,
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )
        return True
