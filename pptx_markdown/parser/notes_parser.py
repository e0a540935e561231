"""Extract the speaker-notes text used as a slide's leading comment."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from pptx_markdown.parser.placeholder_resolver import placeholder_info
from pptx_markdown.parser.rels_parser import RelationshipKind, SlideRelationships
from pptx_markdown.utils.logger import get_logger
from pptx_markdown.utils.text_normalizer import normalize_slide_text
from pptx_markdown.utils.xml_utils import Namespaces, parse_xml

if TYPE_CHECKING:
    from pptx_markdown.parser.pptx_loader import PptxContainer

LOGGER = get_logger(__name__)

NS = Namespaces.PRESENTATION


class NotesParser:
    """Reads the body placeholder of a slide's notes part."""

    def comment_for(self, container: "PptxContainer", relationships: SlideRelationships) -> Optional[str]:
        rel = relationships.first_of_kind(RelationshipKind.NOTES_SLIDE)
        if rel is None:
            return None
        payload = container.read_optional_part(rel.target_path)
        if payload is None:
            LOGGER.debug("Notes part %s referenced by %s is absent", rel.target_path, relationships.source_part)
            return None
        return self.parse(payload, rel.target_path)

    def parse(self, payload: bytes, part_name: Optional[str] = None) -> Optional[str]:
        root = parse_xml(payload, part_name)
        paragraphs: List[str] = []
        for shape_el in root.iterfind(".//p:sp", NS):
            info = placeholder_info(shape_el)
            if info is None or info[0] != "body":
                continue
            for p_el in shape_el.iterfind("p:txBody/a:p", NS):
                text = normalize_slide_text(p_el, preserve_whitespace=False)
                if text:
                    paragraphs.append(text)
        return " ".join(paragraphs) or None
