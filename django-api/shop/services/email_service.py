"""Purchase confirmation emails with download links."""

import logging

from django.template.loader import render_to_string

from shop.clients.interfaces import Mailer
from shop.domain import DownloadToken, Order
from shop.domain.errors import DomainError, EmailNotConfiguredError
from shop.services.settings_service import SettingsProvider

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "shop/emails/purchase.html"


class PurchaseEmailService:
    def __init__(
        self,
        mailer: Mailer,
        settings: SettingsProvider,
        site_url: str,
        from_address: str,
        ttl_days: int = 7,
    ) -> None:
        self._mailer = mailer
        self._settings = settings
        self._site_url = site_url.rstrip("/")
        self._from_address = from_address
        self._ttl_days = ttl_days

    def download_url(self, token: str) -> str:
        return f"{self._site_url}/api/downloads/{token}"

    def deliver(self, order: Order, tokens: list[DownloadToken], resent: bool = False) -> str:
        """Send the download links for an order and return the message ID.

        Raises:
            EmailNotConfiguredError: If no email API key is configured.
            EmailDeliveryError: If the email provider rejects the message.
        """
        if not self._mailer.is_configured():
            raise EmailNotConfiguredError()

        site = self._settings.get()
        titles = {item.template_id: item.template_title for item in order.items}
        joined_titles = ", ".join(item.template_title for item in order.items)

        subject = site.email_subject_template.replace("{{templateName}}", joined_titles)
        if resent:
            subject = f"[Resent] {subject}"
        intro = site.email_body_template.replace("{{userName}}", order.user_name or "")
        html = render_to_string(
            TEMPLATE_NAME,
            {
                "user_name": order.user_name,
                "intro": intro,
                "resent": resent,
                "ttl_days": self._ttl_days,
                "links": [
                    {"title": titles.get(t.template_id, "Template"), "url": self.download_url(t.token)}
                    for t in tokens
                ],
            },
        )
        sender = f"{site.email_from_name} <{self._from_address}>"
        message_id = self._mailer.send(order.user_email, sender, subject, html)
        logger.info("Purchase email sent", extra={"order_id": str(order.id), "message_id": message_id})
        return message_id

    def send(self, order: Order, tokens: list[DownloadToken]) -> bool:
        """Best-effort delivery after payment; failures are logged, never raised."""
        if not self._settings.get().enable_email_notifications:
            logger.info("Email notifications disabled", extra={"order_id": str(order.id)})
            return False
        try:
            self.deliver(order, tokens)
        except DomainError as exc:
            logger.warning(
                "Purchase email not sent",
                extra={"order_id": str(order.id), "code": exc.code.value},
            )
            return False
        return True
