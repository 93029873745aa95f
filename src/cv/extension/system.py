"""ExtensionSystem -- the booted extension services of one site.

Wires the browser, container, mapper and manager together from a
SiteConfig and exposes them through the ExtensionServices capability set.
One ExtensionSystem is created per command execution and closed after it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import ArgumentError

from cv.exceptions import BootError
from cv.extension.browser import ExtensionBrowser
from cv.extension.container import ExtensionContainer
from cv.extension.manager import ExtensionManager
from cv.extension.mapper import ExtensionMapper
from cv.storage.engine import create_session_factory, create_site_engine

if TYPE_CHECKING:
    import httpx
    from sqlalchemy import Engine

    from cv.models.config import SiteConfig
    from cv.models.extension import ExtensionInfo

logger = logging.getLogger(__name__)


class ExtensionSystem:
    """Bundled ExtensionServices implementation.

    Usage::

        config = load_site_config("/var/www/site")
        with ExtensionSystem.boot(config) as system:
            keys = system.list_local_keys()
    """

    def __init__(
        self,
        *,
        browser: ExtensionBrowser,
        container: ExtensionContainer,
        mapper: ExtensionMapper,
        manager: ExtensionManager,
        engine: Engine | None = None,
    ) -> None:
        self.browser = browser
        self.container = container
        self.mapper = mapper
        self.manager = manager
        self._engine = engine

    @classmethod
    def boot(
        cls,
        config: SiteConfig,
        *,
        repository_url: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> ExtensionSystem:
        """Build the extension system for the site described by *config*.

        Args:
            config: Site configuration.
            repository_url: Feed URL overriding ``config.repository_url``.
            http_client: Optional pre-built httpx client for the feed.

        Raises:
            BootError: If the site root is missing or the database URL
                cannot be used.
        """
        if not config.root.is_dir():
            raise BootError(f"Site root not found: {config.root}")

        try:
            engine = create_site_engine(config.resolved_db_url)
        except (ArgumentError, ImportError) as e:
            raise BootError(f"Cannot open site database: {e}") from None

        url = config.repository_url if repository_url is None else repository_url
        logger.debug("Booting extension system for %s (feed %s)", config.root, url or "disabled")

        container = ExtensionContainer(config.resolved_ext_dir)
        return cls(
            browser=ExtensionBrowser(url, timeout=config.feed_timeout, client=http_client),
            container=container,
            mapper=ExtensionMapper(container),
            manager=ExtensionManager(container, create_session_factory(engine)),
            engine=engine,
        )

    # ------------------------------------------------------------------
    # ExtensionServices
    # ------------------------------------------------------------------

    @property
    def repository_url(self) -> str:
        return self.browser.repository_url

    def fetch_catalog(self) -> list[ExtensionInfo]:
        return self.browser.get_extensions()

    def list_local_keys(self) -> list[str]:
        return self.container.get_keys()

    def get_statuses(self) -> dict[str, str]:
        return self.manager.get_statuses()

    def resolve_metadata(self, key: str) -> ExtensionInfo:
        return self.mapper.key_to_info(key)

    def refresh(self, *, local: bool = True, remote: bool = True) -> None:
        """Rescan the container and/or re-check the remote feed.

        Raises:
            FeedError: If *remote* and the feed cannot be read.
        """
        if local:
            logger.info("Rescanning local extensions in %s", self.container.base_dir)
            self.container.refresh()
            self.mapper.refresh()
            self.container.get_keys()
        if remote:
            self.browser.get_extensions()

    def close(self) -> None:
        self.browser.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> ExtensionSystem:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
