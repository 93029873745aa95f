"""Entity/action API over a site's extension services.

Calls return result envelopes in the host's style::

    {"is_error": 0, "count": 2, "values": [...]}
    {"is_error": 1, "error_message": "..."}

A CvError raised inside an action becomes an error envelope; anything else
is a programming error and propagates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from cv._version import __version__
from cv.exceptions import ApiError, CvError

if TYPE_CHECKING:
    from cv.models.config import SiteConfig
    from cv.protocols import ExtensionServices

logger = logging.getLogger(__name__)

Action = Callable[["ApiDispatcher", dict[str, Any]], list[dict[str, Any]]]

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


def to_bool(value: Any, *, name: str = "value") -> bool:
    """Interpret an API parameter as a boolean.

    Raises:
        ApiError: For strings that are not a recognised boolean.
    """
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ApiError(f"Parameter {name!r} must be a boolean, got {value!r}")
    return bool(value)


def success(values: list[dict[str, Any]]) -> dict[str, Any]:
    return {"is_error": 0, "count": len(values), "values": values}


def failure(message: str) -> dict[str, Any]:
    return {"is_error": 1, "error_message": message}


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


def _extension_get(api: ApiDispatcher, params: dict[str, Any]) -> list[dict[str, Any]]:
    services = api.services
    statuses = services.get_statuses()
    keys = services.list_local_keys()

    values = []
    for key in keys:
        info = services.resolve_metadata(key)
        values.append({
            "key": key,
            "name": info.file,
            "label": info.label,
            "version": info.version,
            "status": statuses.get(key, ""),
        })
    # Installed extensions whose code is gone have no metadata.
    local = set(keys)
    for key in sorted(statuses):
        if key not in local:
            values.append({"key": key, "name": "", "label": "", "version": "", "status": statuses[key]})

    if params.get("key"):
        values = [v for v in values if v["key"] == params["key"]]
    if params.get("status"):
        values = [v for v in values if v["status"] == params["status"]]
    return values


def _extension_refresh(api: ApiDispatcher, params: dict[str, Any]) -> list[dict[str, Any]]:
    local = to_bool(params.get("local", True), name="local")
    remote = to_bool(params.get("remote", True), name="remote")
    api.services.refresh(local=local, remote=remote)
    return []


def _system_get(api: ApiDispatcher, params: dict[str, Any]) -> list[dict[str, Any]]:
    values: dict[str, Any] = {
        "version": __version__,
        "repository_url": api.services.repository_url,
    }
    if api.config is not None:
        values.update({
            "host_version": api.config.host_version,
            "uf": api.config.uf,
            "root": str(api.config.root),
            "ext_dir": str(api.config.resolved_ext_dir),
        })
    return [values]


_ACTIONS: dict[tuple[str, str], Action] = {
    ("extension", "get"): _extension_get,
    ("extension", "refresh"): _extension_refresh,
    ("system", "get"): _system_get,
}


class ApiDispatcher:
    """Dispatch ``Entity.action`` calls to the registered actions."""

    def __init__(self, services: ExtensionServices, config: SiteConfig | None = None) -> None:
        self.services = services
        self.config = config

    @staticmethod
    def actions() -> list[str]:
        """Return the known ``Entity.action`` names."""
        return [f"{entity.capitalize()}.{action}" for entity, action in _ACTIONS]

    def call(self, entity: str, action: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Invoke ``entity.action`` and return its result envelope."""
        handler = _ACTIONS.get((entity.lower(), action.lower()))
        if handler is None:
            return failure(f"API ({entity}, {action}) does not exist")

        logger.debug("API call %s.%s %r", entity, action, params)
        try:
            return success(handler(self, dict(params or {})))
        except CvError as e:
            logger.debug("API call %s.%s failed: %s", entity, action, e)
            return failure(str(e))

    def __call__(self, entity: str, action: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return self.call(entity, action, params)
