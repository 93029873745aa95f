"""Extension inventory -- the rows behind ``cv ext:list``.

Combines the remote feed and the local container into ExtensionRow lists,
filters them by a regular expression on key or short name, and sorts them
with remote rows first, then by name and key.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from cv.models.extension import ExtensionRow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cv.models.extension import ExtensionInfo
    from cv.protocols import ExtensionServices

logger = logging.getLogger(__name__)

# `/pattern/flags` as written on the command line, e.g. `/^org.civicrm/i`.
_DELIMITED = re.compile(r"^/(?P<body>.*)/(?P<flags>[imsx]*)$", re.DOTALL)
_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


def resolve_locations(local: bool, remote: bool) -> tuple[bool, bool]:
    """Return ``(local, remote)``, selecting both when neither was requested."""
    if local or remote:
        return local, remote
    return True, True


def compile_filter(pattern: str) -> re.Pattern[str]:
    """Compile a filter expression.

    Accepts ``/body/flags`` or a bare pattern. Invalid patterns raise
    ``re.error``.
    """
    match = _DELIMITED.match(pattern)
    if match is None:
        return re.compile(pattern)
    flags = 0
    for flag in match.group("flags"):
        flags |= _FLAGS[flag]
    return re.compile(match.group("body"), flags)


def filter_rows(rows: Iterable[ExtensionRow], pattern: str | re.Pattern[str]) -> list[ExtensionRow]:
    """Keep rows whose key or name contains a match for *pattern*."""
    regex = compile_filter(pattern) if isinstance(pattern, str) else pattern
    return [row for row in rows if regex.search(row.key) or regex.search(row.name)]


def sort_rows(rows: Iterable[ExtensionRow]) -> list[ExtensionRow]:
    """Sort by location descending, then name and key ascending."""
    # Two stable passes: ascending (name, key), then descending location.
    ordered = sorted(rows, key=lambda row: (row.name, row.key))
    return sorted(ordered, key=lambda row: row.location.value, reverse=True)


class ExtensionInventory:
    """Builds extension rows from an ExtensionServices implementation.

    The remote catalog is fetched at most once per inventory object, so an
    inventory should live exactly as long as one command execution.
    """

    def __init__(self, services: ExtensionServices) -> None:
        self._services = services
        self._remote_infos: list[ExtensionInfo] | None = None

    def remote_infos(self) -> list[ExtensionInfo]:
        if self._remote_infos is None:
            self._remote_infos = list(self._services.fetch_catalog())
        return self._remote_infos

    def remote_rows(self) -> list[ExtensionRow]:
        return [ExtensionRow.remote(info) for info in self.remote_infos()]

    def local_rows(self) -> list[ExtensionRow]:
        keys = self._services.list_local_keys()
        statuses = self._services.get_statuses()
        return [
            ExtensionRow.local(key, self._services.resolve_metadata(key), statuses.get(key, ""))
            for key in keys
        ]

    def find(
        self,
        regex: str | None = None,
        *,
        remote: bool = True,
        local: bool = True,
    ) -> list[ExtensionRow]:
        """Return the sorted inventory.

        Args:
            regex: Optional filter matched against key and name.
            remote: Include extensions from the remote feed.
            local: Include extensions from the local container.

        Raises:
            re.error: If *regex* is not a valid expression.
            CvError: Propagated from the extension services.
        """
        pattern = compile_filter(regex) if regex else None

        rows: list[ExtensionRow] = []
        if remote:
            rows.extend(self.remote_rows())
        if local:
            rows.extend(self.local_rows())

        if pattern is not None:
            rows = filter_rows(rows, pattern)

        logger.debug("Inventory has %d rows (remote=%s, local=%s)", len(rows), remote, local)
        return sort_rows(rows)
