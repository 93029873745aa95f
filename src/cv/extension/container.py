"""Local extension container.

Extensions live in a directory tree; each one is a directory holding an
info.xml whose root element carries the extension key.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cv.exceptions import ExtensionNotFoundError, InfoParseError
from cv.extension.info import read_info_file

logger = logging.getLogger(__name__)

INFO_FILE = "info.xml"


class ExtensionContainer:
    """Directory scanner mapping extension keys to their paths.

    The scan runs lazily on first access and is kept until refresh().
    Malformed info.xml files are skipped with a warning so one broken
    extension does not hide the others.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir
        self._paths: dict[str, Path] | None = None

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _scan(self) -> dict[str, Path]:
        if self._paths is not None:
            return self._paths

        paths: dict[str, Path] = {}
        if not self._base_dir.is_dir():
            logger.debug("Extension directory %s does not exist", self._base_dir)
        else:
            for info_path in sorted(self._base_dir.rglob(INFO_FILE)):
                try:
                    info = read_info_file(info_path)
                except InfoParseError as e:
                    logger.warning("Skipping extension: %s", e)
                    continue
                if info.key in paths:
                    logger.warning(
                        "Duplicate extension key %s in %s (keeping %s)",
                        info.key, info_path.parent, paths[info.key],
                    )
                    continue
                paths[info.key] = info_path.parent
            logger.debug("Found %d extensions under %s", len(paths), self._base_dir)

        self._paths = paths
        return paths

    def get_keys(self) -> list[str]:
        return sorted(self._scan())

    def has_key(self, key: str) -> bool:
        return key in self._scan()

    def get_path(self, key: str) -> Path:
        """Return the directory of extension *key*.

        Raises:
            ExtensionNotFoundError: If *key* is not in the container.
        """
        try:
            return self._scan()[key]
        except KeyError:
            raise ExtensionNotFoundError(key) from None

    def refresh(self) -> None:
        self._paths = None
