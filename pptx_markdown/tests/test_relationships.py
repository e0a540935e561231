"""Tests for relationship parsing and target resolution."""
import unittest

from pptx_markdown.parser.rels_parser import (
    RelationshipKind,
    SlideRelationships,
    rels_part_for,
)
from pptx_markdown.tests.pptx_builder import REL_IMAGE, REL_LAYOUT, REL_NOTES, rels_xml
from pptx_markdown.utils.errors import MalformedDocumentError


slide_rels_xml = rels_xml(
    ("rId1", REL_LAYOUT, "../slideLayouts/slideLayout2.xml"),
    ("rId2", REL_IMAGE, "../media/image1.png"),
    ("rId3", REL_NOTES, "../notesSlides/notesSlide1.xml"),
    ("rId4", "http://schemas.openxmlformats.org/officeDocument/2006/relationships/hyperlink", "https://example.com"),
    ("rId5", REL_IMAGE, "/ppt/media/image9.jpeg"),
    external=["rId4"],
)


class RelationshipsTest(unittest.TestCase):
    """Validate relationship categorisation and target resolution."""

    def setUp(self) -> None:
        self.rels = SlideRelationships.from_xml("ppt/slides/slide1.xml", slide_rels_xml)

    def test_rels_part_name(self) -> None:
        self.assertEqual(rels_part_for("ppt/slides/slide3.xml"), "ppt/slides/_rels/slide3.xml.rels")
        self.assertEqual(rels_part_for("presentation.xml"), "_rels/presentation.xml.rels")

    def test_relative_targets_resolve_against_source_folder(self) -> None:
        self.assertEqual(self.rels.resolve("rId2"), "ppt/media/image1.png")
        self.assertEqual(self.rels.resolve("rId1"), "ppt/slideLayouts/slideLayout2.xml")

    def test_absolute_target_drops_leading_slash(self) -> None:
        self.assertEqual(self.rels.resolve("rId5"), "ppt/media/image9.jpeg")

    def test_unknown_id_resolves_to_none(self) -> None:
        self.assertIsNone(self.rels.resolve("rId99"))
        self.assertNotIn("rId99", self.rels)

    def test_external_targets_are_kept_verbatim(self) -> None:
        rel = self.rels.find("rId4")
        assert rel is not None
        self.assertTrue(rel.is_external)
        self.assertEqual(rel.target_path, "https://example.com")
        self.assertIs(rel.kind, RelationshipKind.HYPERLINK)

    def test_kind_lookup(self) -> None:
        self.assertEqual(len(self.rels.of_kind(RelationshipKind.IMAGE)), 2)
        notes = self.rels.first_of_kind(RelationshipKind.NOTES_SLIDE)
        assert notes is not None
        self.assertEqual(notes.target_path, "ppt/notesSlides/notesSlide1.xml")
        self.assertIsNone(self.rels.first_of_kind(RelationshipKind.SLIDE_MASTER))

    def test_empty_set(self) -> None:
        empty = SlideRelationships.empty("ppt/slides/slide2.xml")
        self.assertEqual(len(empty), 0)
        self.assertIsNone(empty.resolve("rId1"))

    def test_duplicate_id_is_malformed(self) -> None:
        payload = rels_xml(("rId1", REL_IMAGE, "a.png"), ("rId1", REL_IMAGE, "b.png"))
        with self.assertRaises(MalformedDocumentError) as ctx:
            SlideRelationships.from_xml("ppt/slides/slide1.xml", payload)
        self.assertEqual(ctx.exception.part_name, "ppt/slides/_rels/slide1.xml.rels")

    def test_unparseable_rels_is_malformed(self) -> None:
        with self.assertRaises(MalformedDocumentError):
            SlideRelationships.from_xml("ppt/slides/slide1.xml", b"<Relationships")


if __name__ == "__main__":
    unittest.main()
