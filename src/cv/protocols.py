"""Protocol definitions for cv.

ExtensionServices is the capability set the inventory builder and the API
dispatcher consume. ExtensionSystem is the bundled implementation; tests and
embedding hosts may pass any object satisfying the protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cv.models.extension import ExtensionInfo


@runtime_checkable
class ExtensionServices(Protocol):
    """Access to a site's extension system."""

    @property
    def repository_url(self) -> str:
        """URL of the remote extension feed ("" when disabled)."""
        ...

    def fetch_catalog(self) -> list[ExtensionInfo]:
        """Return every extension advertised by the remote feed."""
        ...

    def list_local_keys(self) -> list[str]:
        """Return the keys of every extension present in the local container."""
        ...

    def get_statuses(self) -> dict[str, str]:
        """Return a mapping of extension key to installation status."""
        ...

    def resolve_metadata(self, key: str) -> ExtensionInfo:
        """Return the metadata of a locally present extension."""
        ...

    def refresh(self, *, local: bool = True, remote: bool = True) -> None:
        """Discard cached local and/or remote state."""
        ...
