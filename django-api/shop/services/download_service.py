"""Download tokens - issuing them at fulfilment and redeeming them for files."""

import json
import logging
import secrets
from datetime import UTC, datetime, timedelta

from shop.clients.interfaces import FileFetcher
from shop.domain import DownloadedFile, DownloadToken, DownloadTokenValue, Order
from shop.domain.errors import (
    FileFetchFailedError,
    FileNotAvailableError,
    InvalidFileFormatError,
    InvalidFileUrlError,
    InvalidTokenError,
    TemplateNotFoundError,
    TokenExpiredError,
    TokenNotFoundError,
)
from shop.stores.interfaces import CatalogStore, TokenStore

logger = logging.getLogger(__name__)


class DownloadService:
    """Resolves a download token to the purchased file."""

    def __init__(self, tokens: TokenStore, catalog: CatalogStore, fetcher: FileFetcher) -> None:
        self._tokens = tokens
        self._catalog = catalog
        self._fetcher = fetcher

    def redeem(self, token: str, now: datetime | None = None) -> DownloadedFile:
        """Return the file a token grants access to.

        Tokens are not consumed; any number of downloads may happen before
        expiry.

        Raises:
            InvalidTokenError: If the token is not 64 characters long.
            TokenNotFoundError: If no token matches.
            TokenExpiredError: If the token's expiry has passed.
            TemplateNotFoundError: If the purchased template was removed.
            FileNotAvailableError: If the template has no file configured.
            FileNetworkError: If the file host could not be reached.
            FileFetchFailedError: If the file host answered with an error.
            InvalidFileUrlError: If the file host answered with a web page.
            InvalidFileFormatError: If the file is not JSON.
        """
        try:
            value = DownloadTokenValue(token)
        except ValueError:
            raise InvalidTokenError()

        record = self._tokens.get_token(value.value)
        if record is None:
            logger.info("Unknown download token", extra={"token_prefix": value.prefix})
            raise TokenNotFoundError()

        now = now or datetime.now(UTC)
        if record.is_expired(now):
            raise TokenExpiredError()

        template = self._catalog.get_template(record.template_id)
        if template is None:
            logger.warning("Token references missing template", extra={"template_id": str(record.template_id)})
            raise TemplateNotFoundError()
        if not template.download_file_url:
            logger.warning("Template has no download file", extra={"template_id": str(template.id)})
            raise FileNotAvailableError()

        fetched = self._fetcher.fetch(template.download_file_url)
        if not fetched.ok:
            logger.error(
                "File host returned an error",
                extra={"template_id": str(template.id), "status": fetched.status_code},
            )
            raise FileFetchFailedError()
        if "text/html" in fetched.content_type.lower():
            logger.error(
                "File host returned HTML instead of the file",
                extra={"template_id": str(template.id)},
            )
            raise InvalidFileUrlError()
        try:
            json.loads(fetched.content)
        except ValueError:
            logger.error("Downloaded file is not JSON", extra={"template_id": str(template.id)})
            raise InvalidFileFormatError()

        return DownloadedFile(
            content=fetched.content,
            filename=f"{template.slug or 'template'}.json",
        )


class TokenIssuer:
    """Creates one download token per purchased item."""

    def __init__(self, tokens: TokenStore, ttl_days: int = 7) -> None:
        self._tokens = tokens
        self._ttl = timedelta(days=ttl_days)

    def issue(self, order: Order, now: datetime | None = None) -> list[DownloadToken]:
        now = now or datetime.now(UTC)
        issued = [
            DownloadToken(
                token=secrets.token_hex(32),
                template_id=item.template_id,
                order_id=order.id,
                user_id=order.user_id,
                expires_at=now + self._ttl,
                created_at=now,
            )
            for item in order.items
        ]
        self._tokens.create_tokens(issued)
        return issued

    def active_tokens(self, order: Order, now: datetime | None = None) -> list[DownloadToken]:
        """Tokens of an order that have not expired yet."""
        now = now or datetime.now(UTC)
        return [t for t in self._tokens.tokens_for_order(order.id) if not t.is_expired(now)]
