"""Transactional email through the Resend SDK."""

import logging

import requests
import resend
from resend.exceptions import ResendError

from shop.clients.interfaces import Mailer
from shop.domain.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class ResendMailer(Mailer):
    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def send(self, to: str, sender: str, subject: str, html: str) -> str:
        # The SDK reads its key from module state; restore it for other callers.
        previous_key = resend.api_key
        resend.api_key = self._api_key
        try:
            response = resend.Emails.send({"from": sender, "to": [to], "subject": subject, "html": html})
        except (ResendError, requests.RequestException) as exc:
            logger.error("Resend rejected email", extra={"error": str(exc)})
            raise EmailDeliveryError() from exc
        finally:
            resend.api_key = previous_key
        return response.get("id", "")
