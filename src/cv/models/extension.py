"""Extension domain models.

ExtensionInfo is the parsed metadata of a single extension (from info.xml).
ExtensionRow is the normalized, location-tagged row produced by the
inventory builder and consumed by the table renderer and the encoders.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

# Columns understood by `ext:list --columns`, in default display order.
COLUMNS: tuple[str, ...] = ("location", "key", "name", "version", "status")


class Location(str, enum.Enum):
    """Where an extension row was found."""

    REMOTE = "remote"
    LOCAL = "local"


class ExtensionStatus(str, enum.Enum):
    """Installation status labels reported by the extension manager."""

    INSTALLED = "installed"
    DISABLED = "disabled"
    UNINSTALLED = "uninstalled"
    INSTALLED_MISSING = "installed-missing"
    DISABLED_MISSING = "disabled-missing"


@dataclass(frozen=True)
class ExtensionInfo:
    """Metadata declared by an extension's info.xml.

    ``file`` is the extension's short name; ``key`` is the long,
    reverse-DNS style identifier (``org.example.foobar``).
    """

    key: str
    file: str = ""
    type: str = "module"
    label: str = ""
    description: str = ""
    version: str = ""
    status: str = ""
    compatibility: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExtensionRow:
    """One line of the extension inventory."""

    location: Location
    key: str
    name: str
    version: str
    status: str = ""

    @classmethod
    def remote(cls, info: ExtensionInfo) -> ExtensionRow:
        return cls(
            location=Location.REMOTE,
            key=info.key,
            name=info.file,
            version=info.version,
            status="",
        )

    @classmethod
    def local(cls, key: str, info: ExtensionInfo, status: str) -> ExtensionRow:
        return cls(
            location=Location.LOCAL,
            key=key,
            name=info.file,
            version=info.version,
            status=status,
        )

    def get(self, column: str, default: str = "") -> str:
        """Return the display value of *column*, or *default* for unknown columns."""
        if column == "location":
            return self.location.value
        if column in COLUMNS:
            return getattr(self, column)
        return default
