"""Admin access gate."""

import logging

from shop.domain import Identity, SecurityEventType, UserRole
from shop.domain.errors import ForbiddenError
from shop.services.audit_service import AuditService
from shop.services.settings_service import SettingsProvider
from shop.stores.interfaces import CatalogStore

logger = logging.getLogger(__name__)


class AccessService:
    """Decides whether a verified caller may use the admin API.

    An admin needs both the admin role on their profile and an email on
    the whitelist held in site settings.
    """

    def __init__(self, catalog: CatalogStore, settings: SettingsProvider, audit: AuditService) -> None:
        self._catalog = catalog
        self._settings = settings
        self._audit = audit

    def authorize(
        self,
        identity: Identity,
        action: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Allow the call or record the attempt and refuse it.

        Raises:
            ForbiddenError: If the caller is not a whitelisted admin.
        """
        if self._catalog.get_user_role(identity.uid) is not UserRole.ADMIN:
            reason = "not_admin"
        elif not self._settings.is_whitelisted(identity.email):
            reason = "not_whitelisted"
        else:
            return

        logger.warning(
            "Admin access denied",
            extra={"uid": identity.uid, "action": action, "reason": reason},
        )
        self._audit.record_security_event(
            SecurityEventType.UNAUTHORIZED_ACCESS,
            details={"attempted": action, "reason": reason},
            email=identity.email,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise ForbiddenError("Admin access required")
