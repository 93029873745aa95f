"""cv: command-line administration for a CiviCRM-style site.

Boots a site's extension system in-process, lists remote and local
extensions, and calls the site's API.
"""

from cv._version import __version__

# Inventory
from cv.inventory import ExtensionInventory, compile_filter, filter_rows, resolve_locations, sort_rows

# Models
from cv.models.extension import COLUMNS, ExtensionInfo, ExtensionRow, ExtensionStatus, Location
from cv.models.config import SiteConfig, load_site_config

# Services
from cv.protocols import ExtensionServices
from cv.extension.system import ExtensionSystem
from cv.api import ApiDispatcher

# Exceptions
from cv.exceptions import (
    ApiError,
    BootError,
    CvError,
    EncoderError,
    ExtensionNotFoundError,
    FeedError,
    InfoParseError,
)

__all__ = [
    "__version__",
    "ExtensionInventory",
    "compile_filter",
    "filter_rows",
    "resolve_locations",
    "sort_rows",
    "COLUMNS",
    "ExtensionInfo",
    "ExtensionRow",
    "ExtensionStatus",
    "Location",
    "SiteConfig",
    "load_site_config",
    "ExtensionServices",
    "ExtensionSystem",
    "ApiDispatcher",
    "ApiError",
    "BootError",
    "CvError",
    "EncoderError",
    "ExtensionNotFoundError",
    "FeedError",
    "InfoParseError",
]
