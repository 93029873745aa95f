"""Remote extension feed client.

The feed is a single JSON document at ``{repository_url}/single`` mapping
each extension key to its info.xml. Failures are reported as FeedError and
never retried.
"""

from __future__ import annotations

import logging

import httpx

from cv.exceptions import FeedError, InfoParseError
from cv.extension.info import parse_info_xml
from cv.models.extension import ExtensionInfo

logger = logging.getLogger(__name__)

INDEX_PATH = "/single"


class ExtensionBrowser:
    """Sync httpx client for an extension feed.

    Usage::

        with ExtensionBrowser("https://civicrm.org/extdir/ver=5.0|cms=Standalone") as browser:
            for info in browser.get_extensions():
                print(info.key, info.version)
    """

    def __init__(
        self,
        repository_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the browser.

        Args:
            repository_url: Feed base URL. An empty string disables the feed.
            timeout: Request timeout in seconds (ignored when *client* is given).
            client: Pre-built httpx client, e.g. one with a mock transport.
        """
        self._repository_url = repository_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    @property
    def repository_url(self) -> str:
        return self._repository_url

    def is_enabled(self) -> bool:
        return bool(self._repository_url)

    def get_extensions(self) -> list[ExtensionInfo]:
        """Download the feed and return its extensions sorted by key.

        Raises:
            FeedError: On transport errors, non-2xx responses, or a body
                that is not a JSON object of info.xml documents.
        """
        if not self.is_enabled():
            logger.debug("Extension feed disabled; returning empty catalog")
            return []

        url = self._repository_url + INDEX_PATH
        logger.info("Fetching extension feed %s", url)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedError(url, f"HTTP {e.response.status_code}") from None
        except httpx.HTTPError as e:
            raise FeedError(url, str(e) or type(e).__name__) from None

        try:
            payload = response.json()
        except ValueError:
            raise FeedError(url, "response is not valid JSON") from None
        if not isinstance(payload, dict):
            raise FeedError(url, "expected a JSON object keyed by extension")

        infos = []
        for key, document in payload.items():
            if not isinstance(document, str):
                raise FeedError(url, f"entry {key!r} is not an info.xml document")
            try:
                infos.append(parse_info_xml(document))
            except InfoParseError as e:
                raise FeedError(url, f"entry {key!r}: {e}") from None
        logger.debug("Extension feed listed %d extensions", len(infos))
        return sorted(infos, key=lambda info: info.key)

    def close(self) -> None:
        """Close the underlying httpx client if this browser created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ExtensionBrowser:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
