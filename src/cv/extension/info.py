"""info.xml parsing.

An extension describes itself with an ``info.xml`` document::

    <extension key="org.example.foobar" type="module">
      <file>foobar</file>
      <name>Foo Bar</name>
      <version>1.2.0</version>
      <develStage>stable</develStage>
      <compatibility><ver>5.0</ver></compatibility>
    </extension>

The same document format is embedded in the remote feed.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from cv.exceptions import InfoParseError
from cv.models.extension import ExtensionInfo


def _text(root: ET.Element, tag: str) -> str:
    node = root.find(tag)
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def parse_info_xml(document: str | bytes) -> ExtensionInfo:
    """Parse an info.xml document into an ExtensionInfo.

    Raises:
        InfoParseError: If the document is not XML, the root element is not
            ``<extension>``, or it has no ``key`` attribute.
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise InfoParseError(f"Malformed info.xml: {e}") from None

    if root.tag != "extension":
        raise InfoParseError(f"Expected <extension> root element, got <{root.tag}>")
    key = (root.get("key") or "").strip()
    if not key:
        raise InfoParseError("info.xml is missing the extension key")

    compatibility = tuple(
        (ver.text or "").strip()
        for ver in root.findall("compatibility/ver")
        if ver.text and ver.text.strip()
    )
    return ExtensionInfo(
        key=key,
        file=_text(root, "file"),
        type=root.get("type", "module"),
        label=_text(root, "name"),
        description=_text(root, "description"),
        version=_text(root, "version"),
        status=_text(root, "develStage"),
        compatibility=compatibility,
    )


def read_info_file(path: Path) -> ExtensionInfo:
    """Parse the info.xml file at *path*."""
    try:
        return parse_info_xml(path.read_bytes())
    except InfoParseError as e:
        raise InfoParseError(f"{path}: {e}") from None
