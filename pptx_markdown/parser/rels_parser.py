"""Utilities for reading Open Packaging Convention relationship parts."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from pptx_markdown.utils.errors import MalformedDocumentError
from pptx_markdown.utils.logger import get_logger
from pptx_markdown.utils.xml_utils import Namespaces, parse_xml

if TYPE_CHECKING:
    from pptx_markdown.parser.pptx_loader import PptxContainer

LOGGER = get_logger(__name__)

OFFICE_REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

RELTYPE_IMAGE = f"{OFFICE_REL_NS}/image"
RELTYPE_NOTES_SLIDE = f"{OFFICE_REL_NS}/notesSlide"
RELTYPE_SLIDE_LAYOUT = f"{OFFICE_REL_NS}/slideLayout"
RELTYPE_SLIDE_MASTER = f"{OFFICE_REL_NS}/slideMaster"
RELTYPE_HYPERLINK = f"{OFFICE_REL_NS}/hyperlink"


class RelationshipKind(Enum):
    IMAGE = RELTYPE_IMAGE
    NOTES_SLIDE = RELTYPE_NOTES_SLIDE
    SLIDE_LAYOUT = RELTYPE_SLIDE_LAYOUT
    SLIDE_MASTER = RELTYPE_SLIDE_MASTER
    HYPERLINK = RELTYPE_HYPERLINK
    OTHER = "other"

    @classmethod
    def from_type(cls, rel_type: str) -> "RelationshipKind":
        try:
            return cls(rel_type)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Relationship:
    """Represents a single OPC relationship."""

    r_id: str
    target_path: str
    kind: RelationshipKind
    target: str = ""
    is_external: bool = False


def rels_part_for(part_name: str) -> str:
    """Name of the companion relationship part, e.g. ``ppt/slides/_rels/slide1.xml.rels``."""
    folder, _, base = part_name.rpartition("/")
    if not folder:
        return f"_rels/{base}.rels"
    return f"{folder}/_rels/{base}.rels"


class SlideRelationships:
    """Relationship set of a single source part, keyed by relationship id."""

    def __init__(self, source_part: str, relationships: Dict[str, Relationship]) -> None:
        self.source_part = source_part
        self._by_id = relationships

    @classmethod
    def empty(cls, source_part: str) -> "SlideRelationships":
        return cls(source_part, {})

    @classmethod
    def for_part(cls, container: "PptxContainer", part_name: str) -> "SlideRelationships":
        """Read the companion ``.rels`` part; a missing one yields an empty set."""
        rels_name = rels_part_for(part_name)
        payload = container.read_optional_part(rels_name)
        if payload is None:
            LOGGER.debug("No relationship part for %s", part_name)
            return cls.empty(part_name)
        return cls.from_xml(part_name, payload)

    @classmethod
    def from_xml(cls, source_part: str, payload: bytes) -> "SlideRelationships":
        rels_name = rels_part_for(source_part)
        root = parse_xml(payload, rels_name)
        base_dir = PurePosixPath(source_part).parent

        result: Dict[str, Relationship] = {}
        for rel_el in root.iterfind("rel:Relationship", Namespaces.RELS):
            r_id = rel_el.attrib.get("Id")
            if not r_id:
                raise MalformedDocumentError("Relationship without Id", part_name=rels_name)
            if r_id in result:
                raise MalformedDocumentError(f"Duplicate relationship id {r_id!r}", part_name=rels_name)
            target = rel_el.attrib.get("Target", "")
            is_external = rel_el.attrib.get("TargetMode") == "External"
            result[r_id] = Relationship(
                r_id=r_id,
                target_path=cls._resolve_target_path(base_dir, target, is_external),
                kind=RelationshipKind.from_type(rel_el.attrib.get("Type", "")),
                target=target,
                is_external=is_external,
            )
        return cls(source_part, result)

    def resolve(self, r_id: str) -> Optional[str]:
        """Return the target part path for ``r_id`` or ``None``."""
        rel = self._by_id.get(r_id)
        return rel.target_path if rel is not None else None

    def find(self, r_id: str) -> Optional[Relationship]:
        return self._by_id.get(r_id)

    def of_kind(self, kind: RelationshipKind) -> List[Relationship]:
        return [rel for rel in self._by_id.values() if rel.kind is kind]

    def first_of_kind(self, kind: RelationshipKind) -> Optional[Relationship]:
        for rel in self._by_id.values():
            if rel.kind is kind and not rel.is_external:
                return rel
        return None

    def __iter__(self) -> Iterator[Relationship]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, r_id: object) -> bool:
        return r_id in self._by_id

    @staticmethod
    def _resolve_target_path(base_dir: PurePosixPath, target: str, is_external: bool) -> str:
        if is_external or not target:
            return target
        if target.startswith("/"):
            return posixpath.normpath(target.lstrip("/"))
        return posixpath.normpath(base_dir.joinpath(target).as_posix())
