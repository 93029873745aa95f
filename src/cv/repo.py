"""Feed URL selection from ``--repo``/``--dev``/``--filter-*`` options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cv.models.config import SiteConfig

DEFAULT_REPO = "https://civicrm.org/extdir"


@dataclass(frozen=True)
class RepoOptions:
    """Feed selection as given on the command line. None = not given."""

    repo: Optional[str] = None
    dev: bool = False
    filter_ver: Optional[str] = None
    filter_uf: Optional[str] = None
    filter_status: Optional[str] = None
    filter_ready: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.dev and all(
            value is None
            for value in (
                self.repo,
                self.filter_ver,
                self.filter_uf,
                self.filter_status,
                self.filter_ready,
            )
        )


def parse_repo_url(options: RepoOptions, config: SiteConfig) -> str | None:
    """Build the feed URL selected by *options*.

    Returns None when no feed option was given, meaning the site's own
    ``ext_repo_url`` applies. Otherwise returns
    ``{repo}/ver=..|uf=..|status=..|ready=..`` (``uf`` omitted when empty).
    ``--dev`` lifts the status and readiness filters.
    """
    if options.is_empty():
        return None

    repo = (options.repo or DEFAULT_REPO).rstrip("/")
    if options.dev:
        status, ready = "", ""
    else:
        status = "stable" if options.filter_status is None else options.filter_status
        ready = "ready" if options.filter_ready is None else options.filter_ready

    ver = config.host_version if options.filter_ver is None else options.filter_ver
    parts = [f"ver={ver}"]
    uf = config.uf if options.filter_uf is None else options.filter_uf
    if uf:
        parts.append(f"uf={uf}")
    parts.append(f"status={status}")
    parts.append(f"ready={ready}")
    return repo + "/" + "|".join(parts)
