"""Parse a slide part into typed elements in document order."""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple, Union
from xml.etree import ElementTree as ET

from pptx_markdown.model.elements import (
    ElementPosition,
    ImageElement,
    ListElement,
    ListItem,
    SlideElement,
    TableElement,
    TextElement,
    TextParagraph,
    TextRun,
    UnknownElement,
)
from pptx_markdown.parser.media_extractor import ImageLoader
from pptx_markdown.parser.placeholder_resolver import PlaceholderResolver, placeholder_info, shape_offset
from pptx_markdown.parser.rels_parser import SlideRelationships
from pptx_markdown.utils.errors import MalformedDocumentError
from pptx_markdown.utils.logger import get_logger
from pptx_markdown.utils.text_normalizer import normalize_slide_text
from pptx_markdown.utils.xml_utils import Namespaces, bool_attr, int_attr, local_name, optional_attr, parse_xml, qn

LOGGER = get_logger(__name__)

NS = Namespaces.PRESENTATION

MAX_GROUP_DEPTH = 64
TABLE_URI = "http://schemas.openxmlformats.org/drawingml/2006/table"

P_SP = qn("p:sp")
P_GRP_SP = qn("p:grpSp")
P_PIC = qn("p:pic")
P_GRAPHIC_FRAME = qn("p:graphicFrame")
A_R = qn("a:r")
A_FLD = qn("a:fld")
A_BR = qn("a:br")

# Group-level property nodes that are not shapes.
_STRUCTURAL_TAGS = frozenset({qn("p:nvGrpSpPr"), qn("p:grpSpPr"), qn("p:extLst")})

PositionFactory = Callable[[], ElementPosition]
# ``None`` for plain text, otherwise ``(ordered, level)``.
ListProperties = Optional[Tuple[bool, int]]


@dataclass(frozen=True, slots=True)
class GroupTransform:
    """Affine child-to-slide mapping accumulated over enclosing groups."""

    scale_x: float = 1.0
    scale_y: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return self.scale_x * x + self.translate_x, self.scale_y * y + self.translate_y

    def compose(self, inner: "GroupTransform") -> "GroupTransform":
        """Mapping that applies ``inner`` first, then ``self``."""
        return GroupTransform(
            scale_x=self.scale_x * inner.scale_x,
            scale_y=self.scale_y * inner.scale_y,
            translate_x=self.scale_x * inner.translate_x + self.translate_x,
            translate_y=self.scale_y * inner.translate_y + self.translate_y,
        )

    @classmethod
    def from_group(cls, group_el: ET.Element) -> "GroupTransform":
        """Read ``off``/``ext``/``chOff``/``chExt`` of a ``p:grpSp``."""
        xfrm = group_el.find("p:grpSpPr/a:xfrm", NS)
        if xfrm is None:
            return IDENTITY
        off_x, off_y = _pair(xfrm.find("a:off", NS), "x", "y")
        ch_off_x, ch_off_y = _pair(xfrm.find("a:chOff", NS), "x", "y")
        ext_cx, ext_cy = _pair(xfrm.find("a:ext", NS), "cx", "cy")
        ch_cx, ch_cy = _pair(xfrm.find("a:chExt", NS), "cx", "cy")
        scale_x = ext_cx / ch_cx if ext_cx and ch_cx else 1.0
        scale_y = ext_cy / ch_cy if ext_cy and ch_cy else 1.0
        return cls(
            scale_x=scale_x,
            scale_y=scale_y,
            translate_x=off_x - ch_off_x * scale_x,
            translate_y=off_y - ch_off_y * scale_y,
        )


IDENTITY = GroupTransform()


def _pair(element: Optional[ET.Element], first: str, second: str) -> Tuple[int, int]:
    if element is None:
        return 0, 0
    return int_attr(element, first, 0), int_attr(element, second, 0)


class SlideParser:
    """Transforms PresentationML shape trees into slide elements."""

    def __init__(
        self,
        part_name: str,
        relationships: SlideRelationships,
        image_loader: ImageLoader,
        placeholders: Optional[PlaceholderResolver] = None,
    ) -> None:
        self._part_name = part_name
        self._relationships = relationships
        self._images = image_loader
        self._placeholders = placeholders or PlaceholderResolver.empty()
        self._order: Iterator[int] = itertools.count()

    def parse(self, data: bytes) -> List[SlideElement]:
        """Flatten the shape tree and classify every shape, in document order."""
        root = parse_xml(data, self._part_name)
        sp_tree = root.find("p:cSld/p:spTree", NS)
        if sp_tree is None:
            raise MalformedDocumentError("Slide has no p:cSld/p:spTree", part_name=self._part_name)

        self._order = itertools.count()
        elements: List[SlideElement] = []
        # Work stack of (node, accumulated transform, nesting depth); reversed so pops follow document order.
        stack: List[Tuple[ET.Element, GroupTransform, int]] = [
            (child, IDENTITY, 0) for child in reversed(list(sp_tree))
        ]
        while stack:
            node, transform, depth = stack.pop()
            if node.tag == P_GRP_SP:
                if depth >= MAX_GROUP_DEPTH:
                    raise MalformedDocumentError(
                        f"Group nesting exceeds {MAX_GROUP_DEPTH} levels", part_name=self._part_name
                    )
                group_transform = transform.compose(GroupTransform.from_group(node))
                stack.extend((child, group_transform, depth + 1) for child in reversed(list(node)))
                continue
            if node.tag in _STRUCTURAL_TAGS:
                continue
            elements.extend(self._classify(node, transform, depth))

        LOGGER.debug("Extracted %d elements from %s", len(elements), self._part_name)
        return elements

    # ------------------------------------------------------------------
    # Shape classification
    def _classify(self, node: ET.Element, transform: GroupTransform, depth: int) -> List[SlideElement]:
        make_position = self._position_factory(node, transform, depth)
        tag = node.tag

        if tag == P_SP:
            tx_body = node.find("p:txBody", NS)
            if tx_body is None:
                return [UnknownElement(position=make_position(), tag="sp")]
            return self._parse_text_body(tx_body, make_position)
        if tag == P_GRAPHIC_FRAME:
            return [self._parse_graphic_frame(node, make_position)]
        if tag == P_PIC:
            return [self._parse_picture(node, make_position)]

        LOGGER.debug("Unrecognized shape node: %s", local_name(tag))
        return [UnknownElement(position=make_position(), tag=local_name(tag))]

    def _position_factory(self, node: ET.Element, transform: GroupTransform, depth: int) -> PositionFactory:
        offset = shape_offset(node)
        if offset is None:
            info = placeholder_info(node)
            if info is not None:
                offset = self._placeholders.offset_for(*info)
        x, y = transform.apply(*(offset or (0, 0)))

        def make_position() -> ElementPosition:
            return ElementPosition(x=x, y=y, depth=depth, document_order=next(self._order))

        return make_position

    # ------------------------------------------------------------------
    # Text and lists
    def _parse_text_body(self, tx_body: ET.Element, make_position: PositionFactory) -> List[SlideElement]:
        """Split paragraphs into text blocks and lists of the same kind."""
        blocks: List[SlideElement] = []
        group: List[Tuple[List[TextRun], ListProperties]] = []
        group_kind: Optional[Union[str, bool]] = None

        for p_el in tx_body.iterfind("a:p", NS):
            runs = self._parse_runs(p_el)
            if not any(run.content.strip() for run in runs):
                continue
            list_props = self._list_properties(p_el)
            kind: Union[str, bool] = "text" if list_props is None else list_props[0]
            if group and kind != group_kind:
                blocks.append(self._build_block(group, make_position))
                group = []
            group_kind = kind
            group.append((runs, list_props))

        if group:
            blocks.append(self._build_block(group, make_position))
        return blocks

    def _build_block(
        self, group: List[Tuple[List[TextRun], ListProperties]], make_position: PositionFactory
    ) -> SlideElement:
        first_props = group[0][1]
        if first_props is None:
            paragraphs = [TextParagraph(runs=runs) for runs, _ in group]
            return TextElement(paragraphs=paragraphs, position=make_position())
        items = [ListItem(runs=runs, level=props[1]) for runs, props in group if props is not None]
        return ListElement(items=items, ordered=first_props[0], position=make_position())

    def _list_properties(self, p_el: ET.Element) -> ListProperties:
        ppr = p_el.find("a:pPr", NS)
        if ppr is None or ppr.find("a:buNone", NS) is not None:
            return None
        level = max(0, int_attr(ppr, "lvl", 0))
        if ppr.find("a:buAutoNum", NS) is not None:
            return True, level
        if ppr.find("a:buChar", NS) is not None or optional_attr(ppr, "lvl") is not None:
            return False, level
        return None

    def _parse_runs(self, p_el: ET.Element) -> List[TextRun]:
        """Collect runs, merging neighbours that share the same style."""
        runs: List[TextRun] = []
        for child in p_el:
            if child.tag in (A_R, A_FLD):
                run = self._parse_run(child)
            elif child.tag == A_BR:
                run = TextRun(content="\n")
            else:
                continue
            if not run.content:
                continue
            if runs and runs[-1].same_style(run):
                runs[-1].content += run.content
            else:
                runs.append(run)
        return runs

    def _parse_run(self, run_el: ET.Element) -> TextRun:
        text_el = run_el.find("a:t", NS)
        content = normalize_slide_text(text_el.text if text_el is not None else "")
        rpr = run_el.find("a:rPr", NS)
        if rpr is None:
            return TextRun(content=content)
        return TextRun(content=content, bold=bool_attr(rpr, "b"), italic=bool_attr(rpr, "i"))

    # ------------------------------------------------------------------
    # Tables and pictures
    def _parse_graphic_frame(self, frame_el: ET.Element, make_position: PositionFactory) -> SlideElement:
        graphic_data = frame_el.find("a:graphic/a:graphicData", NS)
        tbl = None
        if graphic_data is not None and graphic_data.get("uri") == TABLE_URI:
            tbl = graphic_data.find("a:tbl", NS)
        if tbl is None:
            uri = graphic_data.get("uri") if graphic_data is not None else None
            LOGGER.debug("Skipping non-table graphic frame %s", uri)
            return UnknownElement(position=make_position(), tag="graphicFrame")

        rows = [[self._cell_text(tc) for tc in tr.iterfind("a:tc", NS)] for tr in tbl.iterfind("a:tr", NS)]
        return TableElement.from_rows(rows, make_position())

    def _cell_text(self, tc_el: ET.Element) -> str:
        tx_body = tc_el.find("a:txBody", NS)
        if tx_body is None:
            return ""
        paragraphs = ("".join(run.content for run in self._parse_runs(p_el)) for p_el in tx_body.iterfind("a:p", NS))
        return normalize_slide_text(" ".join(paragraphs), preserve_whitespace=False)

    def _parse_picture(self, pic_el: ET.Element, make_position: PositionFactory) -> SlideElement:
        blip = pic_el.find("p:blipFill/a:blip", NS)
        r_id = optional_attr(blip, "r:embed") if blip is not None else None
        if not r_id:
            LOGGER.debug("Picture without embedded image in %s", self._part_name)
            return UnknownElement(position=make_position(), tag="pic")

        relationship = self._relationships.find(r_id)
        if relationship is None or relationship.is_external:
            LOGGER.warning("Cannot resolve image %s in %s", r_id, self._part_name)
            return UnknownElement(position=make_position(), tag="pic")

        loaded = self._images.load(relationship)
        return ImageElement(
            relationship_id=r_id,
            target_path=relationship.target_path,
            position=make_position(),
            data=loaded.data,
            format=loaded.format,
        )
