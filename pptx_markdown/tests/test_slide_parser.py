"""Tests for shape-tree flattening and element classification."""
import unittest
from typing import Dict

from pptx_markdown.model.elements import (
    ImageElement,
    ListElement,
    TableElement,
    TextElement,
    UnknownElement,
)
from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.parser.media_extractor import ImageLoader
from pptx_markdown.parser.placeholder_resolver import PlaceholderIndex, PlaceholderResolver
from pptx_markdown.parser.rels_parser import SlideRelationships
from pptx_markdown.parser.slide_parser import MAX_GROUP_DEPTH, GroupTransform, SlideParser
from pptx_markdown.tests.pptx_builder import (
    REL_IMAGE,
    bullet,
    chart_frame,
    group,
    numbered,
    paragraph,
    picture,
    plain_shape,
    png_bytes,
    rels_xml,
    run,
    slide_xml,
    table,
    text_shape,
)
from pptx_markdown.utils.errors import MalformedDocumentError

PART = "ppt/slides/slide1.xml"


class StubContainer:
    """Serves parts from a dict, the only container surface the image loader needs."""

    def __init__(self, parts: Dict[str, bytes]) -> None:
        self.parts = parts

    def read_part(self, name: str) -> bytes:
        return self.parts[name]


class SlideParserTest(unittest.TestCase):
    def setUp(self) -> None:
        self.image = png_bytes()
        self.container = StubContainer({"ppt/media/image1.png": self.image})
        self.relationships = SlideRelationships.from_xml(
            PART,
            rels_xml(
                ("rId2", REL_IMAGE, "../media/image1.png"),
                ("rId3", REL_IMAGE, "https://example.com/logo.png"),
                external=["rId3"],
            ),
        )

    def _parse(self, *shapes: str, config: ParserConfig = None, placeholders=None):
        config = config or ParserConfig(compress_images=False)
        loader = ImageLoader(self.container, config)
        parser = SlideParser(PART, self.relationships, loader, placeholders)
        return parser.parse(slide_xml(*shapes))

    # ------------------------------------------------------------------
    # Text and lists
    def test_runs_with_same_style_merge(self) -> None:
        elements = self._parse(text_shape(paragraph(run("Hello "), run("world"), run("!", bold=True))))

        self.assertEqual(len(elements), 1)
        text = elements[0]
        self.assertIsInstance(text, TextElement)
        runs = text.paragraphs[0].runs
        self.assertEqual([r.content for r in runs], ["Hello world", "!"])
        self.assertTrue(runs[1].bold)
        self.assertFalse(runs[0].bold)

    def test_line_break_becomes_newline(self) -> None:
        elements = self._parse(text_shape(paragraph(run("one"), "<a:br/>", run("two"))))
        self.assertEqual(elements[0].paragraphs[0].text, "one\ntwo")

    def test_empty_paragraphs_are_dropped(self) -> None:
        self.assertEqual(self._parse(text_shape(paragraph(), paragraph(run("   ")))), [])

    def test_bullets_become_unordered_list_with_levels(self) -> None:
        elements = self._parse(text_shape(bullet("first"), bullet("nested", level=1)))

        self.assertEqual(len(elements), 1)
        listing = elements[0]
        self.assertIsInstance(listing, ListElement)
        self.assertFalse(listing.ordered)
        self.assertEqual([(item.text, item.level) for item in listing.items], [("first", 0), ("nested", 1)])

    def test_auto_numbering_becomes_ordered_list(self) -> None:
        elements = self._parse(text_shape(numbered("a"), numbered("b")))
        self.assertTrue(elements[0].ordered)
        self.assertEqual(len(elements[0].items), 2)

    def test_mixed_paragraph_kinds_split_into_blocks(self) -> None:
        elements = self._parse(
            text_shape(paragraph(run("Intro")), bullet("point"), numbered("step"), paragraph(run("Outro")))
        )

        kinds = [type(element).__name__ for element in elements]
        self.assertEqual(kinds, ["TextElement", "ListElement", "ListElement", "TextElement"])
        self.assertFalse(elements[1].ordered)
        self.assertTrue(elements[2].ordered)
        orders = [element.position.document_order for element in elements]
        self.assertEqual(orders, sorted(orders))
        self.assertEqual(len(set(orders)), 4)

    # ------------------------------------------------------------------
    # Tables, pictures, unknown shapes
    def test_table_rows_are_padded(self) -> None:
        elements = self._parse(table([["A", "B", "C"], ["D", "E"]]))

        tbl = elements[0]
        self.assertIsInstance(tbl, TableElement)
        self.assertEqual(tbl.column_count, 3)
        self.assertEqual(tbl.rows, [["A", "B", "C"], ["D", "E", ""]])

    def test_picture_with_extraction(self) -> None:
        elements = self._parse(picture("rId2", x=10, y=20))

        image = elements[0]
        self.assertIsInstance(image, ImageElement)
        self.assertEqual(image.target_path, "ppt/media/image1.png")
        self.assertEqual(image.data, self.image)
        self.assertEqual(image.format, "png")
        self.assertEqual((image.position.x, image.position.y), (10, 20))

    def test_picture_without_extraction_has_no_bytes(self) -> None:
        elements = self._parse(picture("rId2"), config=ParserConfig(extract_images=False))
        self.assertIsInstance(elements[0], ImageElement)
        self.assertIsNone(elements[0].data)

    def test_unresolvable_or_external_picture_is_unknown(self) -> None:
        elements = self._parse(picture("rId9"), picture("rId3"))
        self.assertTrue(all(isinstance(element, UnknownElement) for element in elements))

    def test_shapes_without_markdown_meaning_are_unknown(self) -> None:
        elements = self._parse(plain_shape(), chart_frame(), "<p:cxnSp/>")
        self.assertEqual([element.tag for element in elements], ["sp", "graphicFrame", "cxnSp"])

    # ------------------------------------------------------------------
    # Groups and positions
    def test_nested_group_offsets_accumulate(self) -> None:
        inner = group(text_shape(paragraph(run("deep")), x=10, y=20), off=(1000, 2000))
        elements = self._parse(group(inner, off=(100, 200)))

        position = elements[0].position
        self.assertEqual((position.x, position.y), (1110, 2220))
        self.assertEqual(position.depth, 2)

    def test_group_child_space_is_scaled(self) -> None:
        shape = text_shape(paragraph(run("scaled")), x=60, y=70)
        elements = self._parse(group(shape, off=(0, 0), ext=(200, 200), ch_off=(50, 50), ch_ext=(100, 100)))

        position = elements[0].position
        self.assertEqual((position.x, position.y), (20, 40))

    def test_group_transform_composition(self) -> None:
        outer = GroupTransform(scale_x=2, scale_y=2, translate_x=10, translate_y=10)
        inner = GroupTransform(translate_x=5, translate_y=5)
        self.assertEqual(outer.compose(inner).apply(1, 1), (22, 22))

    def test_group_nesting_at_the_cap_is_accepted(self) -> None:
        node = text_shape(paragraph(run("bottom")))
        for _ in range(MAX_GROUP_DEPTH):
            node = group(node)
        elements = self._parse(node)
        self.assertEqual(elements[0].position.depth, MAX_GROUP_DEPTH)

    def test_group_nesting_beyond_the_cap_is_malformed(self) -> None:
        node = text_shape(paragraph(run("bottom")))
        for _ in range(MAX_GROUP_DEPTH + 1):
            node = group(node)
        with self.assertRaises(MalformedDocumentError) as ctx:
            self._parse(node)
        self.assertEqual(ctx.exception.part_name, PART)

    def test_placeholder_offset_is_inherited(self) -> None:
        layout = PlaceholderIndex(by_idx={}, by_type={"title": (500, 700)})
        shape = text_shape(paragraph(run("Title")), placeholder='<p:ph type="ctrTitle"/>')
        elements = self._parse(shape, placeholders=PlaceholderResolver([layout]))

        self.assertEqual((elements[0].position.x, elements[0].position.y), (500, 700))

    def test_missing_shape_tree_is_malformed(self) -> None:
        loader = ImageLoader(self.container, ParserConfig())
        parser = SlideParser(PART, self.relationships, loader)
        with self.assertRaises(MalformedDocumentError):
            parser.parse(b'<p:sld xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main"/>')


if __name__ == "__main__":
    unittest.main()
