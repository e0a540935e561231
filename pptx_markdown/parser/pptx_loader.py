"""PPTX container giving serialized, lazy access to the parts of the archive."""
from __future__ import annotations

import re
import threading
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional, Union

from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.utils.errors import InvalidArchiveError, MalformedDocumentError, MissingPartError, PackageIOError
from pptx_markdown.utils.logger import get_logger

if TYPE_CHECKING:
    from pptx_markdown.model.slide_model import Slide
    from pptx_markdown.parser.media_extractor import ImageCompressor

LOGGER = get_logger(__name__)

SLIDE_PART_PATTERN = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
_NUMERIC_SUFFIX = re.compile(r"(\d+)\.xml$")


def slide_number_from_part(part_name: str) -> int:
    """Numeric suffix of a slide part name (``ppt/slides/slide7.xml`` → 7)."""
    match = _NUMERIC_SUFFIX.search(part_name)
    if match is None:
        raise MalformedDocumentError("Slide part name has no numeric suffix", part_name=part_name)
    return int(match.group(1))


class PptxContainer:
    """Owns the opened archive; every read goes through a single lock."""

    def __init__(
        self,
        archive: zipfile.ZipFile,
        source: Path,
        config: ParserConfig,
        compressor: Optional["ImageCompressor"] = None,
    ) -> None:
        self._archive: Optional[zipfile.ZipFile] = archive
        self._lock = threading.Lock()
        self._names = frozenset(archive.namelist())
        self.source = source
        self.config = config
        self.compressor = compressor
        self._slide_parts = self._collect_slide_parts()

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        config: Optional[ParserConfig] = None,
        *,
        compressor: Optional["ImageCompressor"] = None,
    ) -> "PptxContainer":
        """Open a PPTX archive without reading any part yet."""
        source = Path(path)
        try:
            archive = zipfile.ZipFile(source)
        except zipfile.BadZipFile as exc:
            raise InvalidArchiveError(f"Not a zip archive: {exc}", part_name=str(source)) from exc
        except OSError as exc:
            raise PackageIOError(f"Cannot open archive: {exc}", part_name=str(source)) from exc

        container = cls(archive, source, config or ParserConfig(), compressor)
        LOGGER.info("Opened %s with %d slides", source.name, container.slide_count)
        return container

    def __enter__(self) -> "PptxContainer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._archive is not None:
                self._archive.close()
                self._archive = None

    @property
    def closed(self) -> bool:
        return self._archive is None

    # ------------------------------------------------------------------
    # Part access
    @property
    def slide_count(self) -> int:
        return len(self._slide_parts)

    def list_slide_parts(self) -> List[str]:
        """Slide part names in ascending numeric order."""
        return list(self._slide_parts)

    def has_part(self, name: str) -> bool:
        return name in self._names

    def read_part(self, name: str) -> bytes:
        if name not in self._names:
            raise MissingPartError("Part not found in package", part_name=name)
        with self._lock:
            if self._archive is None:
                raise PackageIOError("Container is closed", part_name=name)
            try:
                return self._archive.read(name)
            except (OSError, zipfile.BadZipFile) as exc:
                raise PackageIOError(f"Cannot read part: {exc}", part_name=name) from exc

    def read_optional_part(self, name: str) -> Optional[bytes]:
        if name not in self._names:
            return None
        return self.read_part(name)

    # ------------------------------------------------------------------
    # Parsing entry points
    def parse_all(self) -> List["Slide"]:
        """Parse every slide sequentially; the first failure aborts."""
        return self._orchestrator().parse_all()

    def parse_all_parallel(self, max_workers: Optional[int] = None) -> List["Slide"]:
        """Parse slides on a bounded thread pool; output equals ``parse_all``."""
        return self._orchestrator().parse_all_parallel(max_workers=max_workers)

    def iter_slides(self) -> Iterator["Slide"]:
        """Lazily yield one assembled slide at a time."""
        return self._orchestrator().iter_slides()

    def _orchestrator(self):
        from pptx_markdown.parser.orchestrator import SlideOrchestrator

        return SlideOrchestrator(self, self.config)

    def _collect_slide_parts(self) -> List[str]:
        parts = [name for name in self._names if SLIDE_PART_PATTERN.match(name)]
        parts.sort(key=slide_number_from_part)
        return parts
