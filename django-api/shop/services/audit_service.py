"""Audit trail for admin actions and security events.

Recording never breaks the caller: storage failures are logged and dropped.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from shop.domain import (
    AuditCategory,
    AuditLogEntry,
    Identity,
    SecurityEvent,
    SecurityEventType,
)
from shop.services.settings_service import SettingsProvider
from shop.stores.interfaces import AuditStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


class AuditService:
    def __init__(self, store: AuditStore, settings: SettingsProvider) -> None:
        self._store = store
        self._settings = settings

    def record(
        self,
        identity: Identity,
        action: str,
        category: AuditCategory,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Append an admin action, unless audit logging is switched off."""
        if not self._settings.get().enable_audit_log:
            return
        entry = AuditLogEntry(
            admin_id=identity.uid,
            admin_email=identity.email,
            action=action,
            category=category,
            details=details or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
        try:
            self._store.add_audit_entry(entry)
        except Exception:
            logger.exception("Failed to write audit log", extra={"action": action})

    def record_security_event(
        self,
        event_type: SecurityEventType,
        details: dict[str, Any] | None = None,
        email: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        event = SecurityEvent(
            type=event_type,
            details=details or {},
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        try:
            self._store.add_security_event(event)
        except Exception:
            logger.exception("Failed to write security event", extra={"type": event_type.value})

    def recent_logs(self, limit: int | None = None) -> list[AuditLogEntry]:
        return self._store.recent_audit_entries(clamp_limit(limit))

    def recent_security_events(self, limit: int | None = None) -> list[SecurityEvent]:
        return self._store.recent_security_events(clamp_limit(limit))

    def failed_login_attempts(
        self, hours: int = 24, ip_address: str | None = None, now: datetime | None = None
    ) -> int:
        """Count rejected admin credentials within the last ``hours``.

        Rejected tokens carry no trusted email, so attempts are counted
        site-wide or for one client IP.
        """
        now = now or datetime.now(UTC)
        return self._store.count_security_events(
            SecurityEventType.FAILED_LOGIN, now - timedelta(hours=hours), ip_address=ip_address
        )
