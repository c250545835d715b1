"""Bearer-token authentication against the identity provider."""

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.request import Request

from shop import clients, services
from shop.domain import Identity, SecurityEventType
from shop.domain.errors import UnauthorizedError
from shop.handlers.utils import client_ip, user_agent


class FirebaseBearerAuthentication(BaseAuthentication):
    """Authenticates ``Authorization: Bearer <id token>``.

    Views using this class always require a credential, so a missing
    header fails here instead of falling through to anonymous access.
    """

    keyword = "Bearer"

    def authenticate(self, request: Request) -> tuple[Identity, str]:
        header = request.META.get("HTTP_AUTHORIZATION", "")
        prefix = f"{self.keyword} "
        if not header.startswith(prefix):
            raise AuthenticationFailed("Unauthorized")
        token = header[len(prefix):].strip()
        if not token:
            raise AuthenticationFailed("Unauthorized")
        try:
            identity = clients.get_identity_provider().verify(token)
        except UnauthorizedError as exc:
            self.token_rejected(request)
            raise AuthenticationFailed(exc.message) from exc
        return identity, token

    def token_rejected(self, request: Request) -> None:
        """Called when a presented token fails verification."""

    def authenticate_header(self, request: Request) -> str:
        return f'{self.keyword} realm="api"'


class AdminBearerAuthentication(FirebaseBearerAuthentication):
    """Records every rejected admin credential as a failed login."""

    def token_rejected(self, request: Request) -> None:
        services.build_audit_service().record_security_event(
            SecurityEventType.FAILED_LOGIN,
            details={"attempted": request.path, "reason": "invalid_token"},
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )
