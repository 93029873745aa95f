"""Key to metadata lookups against the local container."""

from __future__ import annotations

from cv.extension.container import INFO_FILE, ExtensionContainer
from cv.extension.info import read_info_file
from cv.models.extension import ExtensionInfo


class ExtensionMapper:
    """Resolve extension keys to parsed info.xml metadata (cached)."""

    def __init__(self, container: ExtensionContainer) -> None:
        self._container = container
        self._infos: dict[str, ExtensionInfo] = {}

    def key_to_info(self, key: str) -> ExtensionInfo:
        """Return the metadata of extension *key*.

        Raises:
            ExtensionNotFoundError: If *key* is not in the container.
        """
        info = self._infos.get(key)
        if info is None:
            info = read_info_file(self._container.get_path(key) / INFO_FILE)
            self._infos[key] = info
        return info

    def refresh(self) -> None:
        self._infos.clear()
