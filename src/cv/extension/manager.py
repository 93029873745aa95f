"""Installation status of extensions.

Statuses combine two sources: the ``civicrm_extension`` table (what the
site believes is installed) and the local container (what is on disk).
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session, sessionmaker

from cv.extension.container import ExtensionContainer
from cv.models.extension import ExtensionStatus
from cv.storage.engine import sqlite_file_missing
from cv.storage.schema import ExtensionRecord

logger = logging.getLogger(__name__)


class ExtensionManager:
    """Compute the key -> status mapping for a site."""

    def __init__(
        self,
        container: ExtensionContainer,
        session_factory: sessionmaker[Session],
    ) -> None:
        self._container = container
        self._session_factory = session_factory

    def _load_records(self) -> list[tuple[str, bool]]:
        with self._session_factory() as session:
            bind = session.get_bind()
            if sqlite_file_missing(bind):
                logger.debug("No site database at %s; treating all extensions as uninstalled",
                             bind.url.database)
                return []
            if not inspect(bind).has_table(ExtensionRecord.__tablename__):
                # A site that never installed an extension has no table yet.
                logger.debug("No %s table; treating all extensions as uninstalled",
                             ExtensionRecord.__tablename__)
                return []
            stmt = select(ExtensionRecord.full_name, ExtensionRecord.is_active)
            return [(name, bool(active)) for name, active in session.execute(stmt)]

    def get_statuses(self) -> dict[str, str]:
        """Return ``{key: status}`` for every known extension.

        Recorded keys are ``installed`` or ``disabled``, with a
        ``-missing`` suffix when their code is gone from the container.
        Container keys with no record are ``uninstalled``.
        """
        statuses: dict[str, str] = {}
        for key, is_active in self._load_records():
            present = self._container.has_key(key)
            if is_active:
                status = ExtensionStatus.INSTALLED if present else ExtensionStatus.INSTALLED_MISSING
            else:
                status = ExtensionStatus.DISABLED if present else ExtensionStatus.DISABLED_MISSING
            statuses[key] = status.value

        for key in self._container.get_keys():
            statuses.setdefault(key, ExtensionStatus.UNINSTALLED.value)

        logger.debug("Loaded %d extension statuses", len(statuses))
        return statuses
