"""Helper functions to work with XML namespaces and parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from pptx_markdown.utils.errors import MalformedDocumentError


@dataclass(frozen=True)
class Namespaces:
    """Common OpenXML namespace prefixes used across parsers."""

    PRESENTATION: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


Namespaces.PRESENTATION = {  # type: ignore[attr-defined]
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}
Namespaces.RELS = {  # type: ignore[attr-defined]
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}

_ALL_PREFIXES: Dict[str, str] = {**Namespaces.PRESENTATION, **Namespaces.RELS}

_TRUE_VALUES = {"1", "true"}
_FALSE_VALUES = {"0", "false"}


def parse_xml(data: bytes, part_name: Optional[str] = None) -> ET.Element:
    """Parse XML from raw bytes, reporting failures as malformed documents."""
    try:
        return ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedDocumentError(f"Unparseable XML: {exc}", part_name=part_name) from exc


def qn(name: str) -> str:
    """Expand a prefixed name such as ``a:off`` into Clark notation."""
    prefix, local = name.split(":", 1)
    return f"{{{_ALL_PREFIXES[prefix]}}}{local}"


def local_name(tag: str) -> str:
    return tag.split("}", 1)[-1]


def _attr_key(key: str) -> str:
    return qn(key) if ":" in key else key


def optional_attr(element: ET.Element, key: str) -> Optional[str]:
    return element.attrib.get(_attr_key(key))


def int_attr(element: ET.Element, key: str, default: Optional[int] = None) -> Optional[int]:
    """Integer attribute; ``default`` only when absent, never on a bad value."""
    value = element.attrib.get(_attr_key(key))
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise MalformedDocumentError(
            f"<{local_name(element.tag)}> attribute '{key}' is not an integer: {value!r}"
        ) from exc


def bool_attr(element: ET.Element, key: str, default: bool = False) -> bool:
    """Boolean attribute in OOXML spelling (``1``/``0``/``true``/``false``)."""
    value = element.attrib.get(_attr_key(key))
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise MalformedDocumentError(f"<{local_name(element.tag)}> attribute '{key}' is not a boolean: {value!r}")
