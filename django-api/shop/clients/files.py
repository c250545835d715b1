"""HTTP file fetcher for template artifacts."""

import logging

import requests

from shop.clients.interfaces import FetchedFile, FileFetcher
from shop.domain.errors import FileNetworkError

logger = logging.getLogger(__name__)


class HttpFileFetcher(FileFetcher):
    def __init__(self, timeout: int = 15, session: requests.Session | None = None) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str) -> FetchedFile:
        try:
            response = self._session.get(url, timeout=self._timeout, allow_redirects=True)
        except requests.RequestException as exc:
            logger.error("File host unreachable", extra={"error": str(exc)})
            raise FileNetworkError() from exc
        return FetchedFile(
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            content=response.content,
        )
