"""Site configuration for cv.

SiteConfig describes where a site lives and how its extension system is
reached: the local extension directory, the database holding extension
statuses, and the remote feed URL template.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field

from cv.exceptions import BootError

logger = logging.getLogger(__name__)

DEFAULT_EXT_REPO_URL = "https://civicrm.org/extdir/ver={ver}|cms={uf}"
DEFAULT_ENV_FILE = ".cv.env"

# Environment variable -> SiteConfig field.
_ENV_FIELDS: dict[str, str] = {
    "CV_EXT_DIR": "ext_dir",
    "CV_DB_URL": "db_url",
    "CV_EXT_REPO_URL": "ext_repo_url",
    "CV_HOST_VERSION": "host_version",
    "CV_UF": "uf",
    "CV_FEED_TIMEOUT": "feed_timeout",
}


class SiteConfig(BaseModel):
    """Per-site configuration."""

    root: Path
    ext_dir: Optional[Path] = None  # None = <root>/ext
    db_url: Optional[str] = None  # None = SQLite file in <root>
    ext_repo_url: str = DEFAULT_EXT_REPO_URL
    host_version: str = "5.0"
    uf: str = "Standalone"
    feed_timeout: float = Field(default=30.0, gt=0)

    @property
    def resolved_ext_dir(self) -> Path:
        if self.ext_dir is None:
            return self.root / "ext"
        if self.ext_dir.is_absolute():
            return self.ext_dir
        return self.root / self.ext_dir

    @property
    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url
        return f"sqlite:///{self.root / 'civicrm.sqlite'}"

    @property
    def repository_url(self) -> str:
        """Feed URL with ``{ver}`` and ``{uf}`` tokens substituted."""
        return (
            self.ext_repo_url
            .replace("{ver}", self.host_version)
            .replace("{uf}", self.uf)
        )


def load_site_config(
    root: str | Path,
    env_file: str | Path | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> SiteConfig:
    """Build a SiteConfig for the site at *root*.

    Precedence (lowest first): field defaults, the dotenv file
    (``<root>/.cv.env`` unless *env_file* is given), ``CV_*`` environment
    variables, then *overrides*.

    Raises:
        BootError: If *root* is not a directory, or an explicit *env_file*
            does not exist.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise BootError(f"Site root not found: {root_path}")

    if env_file is None:
        env_path = root_path / DEFAULT_ENV_FILE
    else:
        env_path = Path(env_file)
        if not env_path.is_file():
            raise BootError(f"Env file not found: {env_path}")

    values: dict[str, object] = {"root": root_path}
    if env_path.is_file():
        logger.debug("Loading site settings from %s", env_path)
        for name, value in dotenv_values(env_path).items():
            if name in _ENV_FIELDS and value is not None:
                values[_ENV_FIELDS[name]] = value

    for name, field_name in _ENV_FIELDS.items():
        if name in os.environ:
            values[field_name] = os.environ[name]

    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    return SiteConfig(**values)
