"""In-memory representation of the typed content found on a slide."""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class ElementPosition:
    """Slide-relative offset in EMU after composing every enclosing group transform."""

    x: float
    y: float
    depth: int = 0
    document_order: int = 0

    @property
    def sort_key(self) -> Tuple[float, float, int]:
        return (self.y, self.x, self.document_order)


@dataclass(slots=True)
class TextRun:
    """Represents a contiguous run of text with associated inline styling."""

    content: str
    bold: bool = False
    italic: bool = False

    def same_style(self, other: "TextRun") -> bool:
        return self.bold == other.bold and self.italic == other.italic


@dataclass(slots=True)
class TextParagraph:
    """One ``a:p`` of a text body, already merged into style-homogeneous runs."""

    runs: List[TextRun]

    @property
    def text(self) -> str:
        return "".join(run.content for run in self.runs)


@dataclass(slots=True)
class TextElement:
    """Plain paragraphs of a text body."""

    paragraphs: List[TextParagraph]
    position: ElementPosition

    @property
    def runs(self) -> List[TextRun]:
        return [run for paragraph in self.paragraphs for run in paragraph.runs]


@dataclass(slots=True)
class ListItem:
    """Single bullet or numbered paragraph."""

    runs: List[TextRun]
    level: int = 0

    @property
    def text(self) -> str:
        return "".join(run.content for run in self.runs)


@dataclass(slots=True)
class ListElement:
    """Consecutive list paragraphs of the same kind."""

    items: List[ListItem]
    ordered: bool
    position: ElementPosition


@dataclass(slots=True)
class TableElement:
    """Tabular structure extracted from a DrawingML table."""

    rows: List[List[str]]
    column_count: int
    position: ElementPosition

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]], position: ElementPosition) -> "TableElement":
        """Pad ragged rows so every row has ``max(len(row))`` cells."""
        column_count = max((len(row) for row in rows), default=0)
        padded = [list(row) + [""] * (column_count - len(row)) for row in rows]
        return cls(rows=padded, column_count=column_count, position=position)


@dataclass(slots=True)
class ImageElement:
    """A picture reference, with its bytes when extraction is enabled."""

    relationship_id: str
    target_path: str
    position: ElementPosition
    data: Optional[bytes] = None
    format: str = ""

    @property
    def mime_type(self) -> str:
        return media_type_for(f"image.{self.format}")


@dataclass(slots=True)
class UnknownElement:
    """Catch-all for shapes without Markdown meaning."""

    position: ElementPosition
    tag: str = ""


SlideElement = TextElement | ListElement | TableElement | ImageElement | UnknownElement


@dataclass(frozen=True, slots=True)
class ManualImage:
    """Image bytes handed to the caller under the manual image policy."""

    data: bytes
    format: str
    source_path: str
    slide_number: int
    sequence_index: int
    relationship_id: str = ""

    @property
    def file_stem(self) -> str:
        return image_file_stem(self.slide_number, self.sequence_index)

    @property
    def file_name(self) -> str:
        return f"{self.file_stem}.{self.format}"


def image_file_stem(slide_number: int, sequence_index: int) -> str:
    return f"slide{slide_number}_image{sequence_index}"


_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".svg": "image/svg+xml",
    ".emf": "image/x-emf",
    ".wmf": "image/x-wmf",
    ".wdp": "image/vnd.ms-photo",
}


def media_type_for(path: str) -> str:
    """Determine MIME type from file extension."""
    suffix = path[path.rfind("."):].lower() if "." in path else ""
    if suffix in _MEDIA_TYPES:
        return _MEDIA_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or "application/octet-stream"
