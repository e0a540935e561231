"""Inherited placeholder offsets from the slide layout and slide master."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET

from pptx_markdown.parser.rels_parser import RelationshipKind, SlideRelationships
from pptx_markdown.utils.logger import get_logger
from pptx_markdown.utils.xml_utils import Namespaces, int_attr, optional_attr, parse_xml

if TYPE_CHECKING:
    from pptx_markdown.parser.pptx_loader import PptxContainer

LOGGER = get_logger(__name__)

Offset = Tuple[int, int]

# Layout and master use the generic type for specialised slide placeholders.
_TYPE_ALIASES = {
    None: "body",
    "obj": "body",
    "subTitle": "body",
    "ctrTitle": "title",
}


def normalize_placeholder_type(ph_type: Optional[str]) -> str:
    return _TYPE_ALIASES.get(ph_type, ph_type or "body")


def placeholder_info(shape_el: ET.Element) -> Optional[Tuple[Optional[str], Optional[int]]]:
    """``(type, idx)`` of a shape's ``p:ph`` marker, or ``None`` for ordinary shapes."""
    ph = shape_el.find("./*/p:nvPr/p:ph", Namespaces.PRESENTATION)
    if ph is None:
        return None
    return optional_attr(ph, "type"), int_attr(ph, "idx")


def shape_offset(shape_el: ET.Element) -> Optional[Offset]:
    """``a:off`` of the shape's own transform, if it declares one."""
    off = shape_el.find("./p:spPr/a:xfrm/a:off", Namespaces.PRESENTATION)
    if off is None:
        off = shape_el.find("./p:xfrm/a:off", Namespaces.PRESENTATION)
    if off is None:
        return None
    return int_attr(off, "x", 0), int_attr(off, "y", 0)


@dataclass(slots=True)
class PlaceholderIndex:
    """Placeholder offsets of one layout or master part."""

    by_idx: Dict[int, Offset] = field(default_factory=dict)
    by_type: Dict[str, Offset] = field(default_factory=dict)

    @classmethod
    def from_xml(cls, part_name: str, payload: bytes) -> "PlaceholderIndex":
        index = cls()
        root = parse_xml(payload, part_name)
        for shape_el in root.iterfind(".//p:sp", Namespaces.PRESENTATION):
            info = placeholder_info(shape_el)
            offset = shape_offset(shape_el)
            if info is None or offset is None:
                continue
            ph_type, ph_idx = info
            if ph_idx is not None:
                index.by_idx.setdefault(ph_idx, offset)
            index.by_type.setdefault(normalize_placeholder_type(ph_type), offset)
        return index


class PlaceholderResolver:
    """Looks a slide placeholder up in its layout, then in the layout's master."""

    def __init__(self, layers: List[PlaceholderIndex]) -> None:
        self._layers = layers

    @classmethod
    def empty(cls) -> "PlaceholderResolver":
        return cls([])

    @classmethod
    def for_slide(cls, container: "PptxContainer", relationships: SlideRelationships) -> "PlaceholderResolver":
        layers: List[PlaceholderIndex] = []
        source_rels = relationships
        for kind in (RelationshipKind.SLIDE_LAYOUT, RelationshipKind.SLIDE_MASTER):
            rel = source_rels.first_of_kind(kind)
            if rel is None:
                break
            payload = container.read_optional_part(rel.target_path)
            if payload is None:
                LOGGER.debug("%s references missing part %s", source_rels.source_part, rel.target_path)
                break
            layers.append(PlaceholderIndex.from_xml(rel.target_path, payload))
            source_rels = SlideRelationships.for_part(container, rel.target_path)
        return cls(layers)

    def offset_for(self, ph_type: Optional[str], ph_idx: Optional[int]) -> Optional[Offset]:
        normalized = normalize_placeholder_type(ph_type)
        for layer in self._layers:
            if ph_idx is not None and ph_idx in layer.by_idx:
                return layer.by_idx[ph_idx]
            if normalized in layer.by_type:
                return layer.by_type[normalized]
        return None
