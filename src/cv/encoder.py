"""Structured output encoders.

Every format takes plain data (dicts, lists, scalars) and returns text.
The special format ``none`` produces no output at all.
"""

from __future__ import annotations

import json
import logging
import os
import shlex
from typing import Any, Callable, Iterable

import yaml

from cv.exceptions import EncoderError

logger = logging.getLogger(__name__)

OUTPUT_ENV = "CV_OUTPUT"


def _encode_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


def _encode_json_pretty(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=4, default=str)


def _encode_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True).rstrip("\n")


def _flatten(data: Any, prefix: str = "") -> list[tuple[str, Any]]:
    if isinstance(data, dict):
        items = data.items()
    elif isinstance(data, (list, tuple)):
        items = enumerate(data)
    else:
        return [(prefix or "value", data)]
    pairs: list[tuple[str, Any]] = []
    for key, value in items:
        path = f"{prefix}_{key}" if prefix else str(key)
        pairs.extend(_flatten(value, path))
    return pairs


def _encode_shell(data: Any) -> str:
    lines = []
    for name, value in _flatten(data):
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = int(value)
        lines.append(f"{name}={shlex.quote(str(value))}")
    return "\n".join(lines)


_ENCODERS: dict[str, Callable[[Any], str]] = {
    "json": _encode_json,
    "json-pretty": _encode_json_pretty,
    "yaml": _encode_yaml,
    "shell": _encode_shell,
    "none": lambda data: "",
}


def get_formats() -> list[str]:
    return list(_ENCODERS)


def get_default_format(fallback: str = "json-pretty", allowed: Iterable[str] | None = None) -> str:
    """Return the format named by ``CV_OUTPUT``, or *fallback*.

    When *allowed* is given, an environment value outside it is ignored.
    """
    fmt = os.environ.get(OUTPUT_ENV)
    if not fmt:
        return fallback
    if allowed is not None and fmt not in allowed:
        logger.debug("Ignoring %s=%s; using %s", OUTPUT_ENV, fmt, fallback)
        return fallback
    return fmt


def encode(data: Any, fmt: str) -> str:
    """Encode *data* in format *fmt*.

    Raises:
        EncoderError: If *fmt* is not a known format.
    """
    try:
        encoder = _ENCODERS[fmt]
    except KeyError:
        raise EncoderError(fmt) from None
    return encoder(data)
