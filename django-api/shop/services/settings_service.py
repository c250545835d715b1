"""Site settings provider - the single source of runtime configuration.

The settings document is read through the Django cache. Writes go to the
store first, then the fresh document is written back into the cache; the
post_save signal on the document drops stale entries written elsewhere
(e.g. the Django admin).
"""

import logging
from datetime import UTC, datetime
from typing import Any

from django.core.cache.backends.base import BaseCache

from shop.domain import EmailAddress, Identity, SiteSettings
from shop.domain.errors import CannotRemoveSelfError, ErrorCode, InvalidInputError
from shop.stores.interfaces import SettingsStore

logger = logging.getLogger(__name__)

SITE_SETTINGS_KEY = "site-settings"
SETTINGS_CACHE_KEY = "settings:site"

# Fields that only the whitelist endpoints may change.
PROTECTED_FIELDS = frozenset({"adminWhitelistEmails", "updatedAt", "updatedBy"})


def default_document(seed_whitelist: list[str], now: datetime) -> dict[str, Any]:
    """Settings document written the first time the site starts."""
    return {
        "siteName": "Template Store",
        "siteDescription": "Premium automation templates",
        "heroTitle": "Automate your workflow",
        "emailSubjectTemplate": "Your Purchase: {{templateName}}",
        "emailFromName": "Template Store",
        "maintenanceMode": False,
        "maintenanceMessage": "We are performing scheduled maintenance. Please check back soon.",
        "enableUserRegistration": True,
        "enablePayments": True,
        "enableEmailNotifications": True,
        "defaultCurrency": "INR",
        "enableAuditLog": True,
        "adminWhitelistEmails": sorted({e.strip().lower() for e in seed_whitelist if e.strip()}),
        "updatedAt": now.isoformat(),
        "updatedBy": "system-init",
    }


class SettingsProvider:
    """Read-through cached access to the site settings document."""

    def __init__(
        self,
        store: SettingsStore,
        cache: BaseCache,
        seed_whitelist: list[str] | None = None,
        cache_timeout: int = 300,
    ) -> None:
        self._store = store
        self._cache = cache
        self._seed_whitelist = list(seed_whitelist or [])
        self._cache_timeout = cache_timeout

    def get(self) -> SiteSettings:
        """Return the current settings, initialising the document if absent."""
        document = self._cache.get(SETTINGS_CACHE_KEY)
        if document is None:
            document = self._store.get_document(SITE_SETTINGS_KEY)
            if document is None:
                document = default_document(self._seed_whitelist, datetime.now(UTC))
                self._store.save_document(SITE_SETTINGS_KEY, document)
                logger.info(
                    "Initialised site settings",
                    extra={"whitelist_size": len(document["adminWhitelistEmails"])},
                )
            self._cache.set(SETTINGS_CACHE_KEY, document, self._cache_timeout)
        return SiteSettings(document=document)

    def _save(self, document: dict[str, Any], actor: str) -> SiteSettings:
        document["updatedAt"] = datetime.now(UTC).isoformat()
        document["updatedBy"] = actor
        self._store.save_document(SITE_SETTINGS_KEY, document)
        self._cache.set(SETTINGS_CACHE_KEY, document, self._cache_timeout)
        return SiteSettings(document=document)

    def update(self, changes: dict[str, Any], actor: str) -> SiteSettings:
        """Shallow-merge changes into the document.

        Whitelist and bookkeeping fields in ``changes`` are ignored.
        """
        document = dict(self.get().document)
        document.update({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
        return self._save(document, actor)

    def is_whitelisted(self, email: str | None) -> bool:
        if not email:
            return False
        return email.strip().lower() in self.get().admin_whitelist_emails

    def add_to_whitelist(self, email: str, actor: Identity) -> tuple[str, ...]:
        """Add an email to the admin whitelist.

        Raises:
            InvalidInputError: If the email is malformed.
        """
        address = _parse_email(email)
        current = self.get()
        if address.value in current.admin_whitelist_emails:
            return current.admin_whitelist_emails
        document = dict(current.document)
        document["adminWhitelistEmails"] = [*current.admin_whitelist_emails, address.value]
        return self._save(document, actor.email).admin_whitelist_emails

    def remove_from_whitelist(self, email: str, actor: Identity) -> tuple[str, ...]:
        """Remove an email from the admin whitelist.

        Raises:
            InvalidInputError: If the email is malformed.
            CannotRemoveSelfError: If an admin tries to remove their own email.
        """
        address = _parse_email(email)
        if address.matches(actor.email):
            raise CannotRemoveSelfError()
        current = self.get()
        document = dict(current.document)
        document["adminWhitelistEmails"] = [
            e for e in current.admin_whitelist_emails if e != address.value
        ]
        return self._save(document, actor.email).admin_whitelist_emails


def _parse_email(email: str) -> EmailAddress:
    try:
        return EmailAddress(email)
    except ValueError as exc:
        raise InvalidInputError(code=ErrorCode.VALIDATION_ERROR, message="Invalid email address") from exc
