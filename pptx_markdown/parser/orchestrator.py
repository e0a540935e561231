"""Drive per-slide parsing sequentially, on a worker pool, or as a stream."""
from __future__ import annotations

import os
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.model.slide_model import Slide
from pptx_markdown.parser.media_extractor import ImageLoader
from pptx_markdown.parser.notes_parser import NotesParser
from pptx_markdown.parser.placeholder_resolver import PlaceholderResolver
from pptx_markdown.parser.pptx_loader import slide_number_from_part
from pptx_markdown.parser.rels_parser import SlideRelationships
from pptx_markdown.parser.slide_assembler import SlideAssembler
from pptx_markdown.parser.slide_parser import SlideParser
from pptx_markdown.utils.errors import PptxError
from pptx_markdown.utils.logger import get_logger

if TYPE_CHECKING:
    from pptx_markdown.parser.pptx_loader import PptxContainer

LOGGER = get_logger(__name__)


class SlideState(Enum):
    PENDING = "pending"
    PARSING = "parsing"
    ASSEMBLED = "assembled"
    FAILED = "failed"


def default_worker_count() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class SlideOrchestrator:
    """Runs the extraction pipeline over every slide part of a container."""

    def __init__(self, container: "PptxContainer", config: ParserConfig) -> None:
        self._container = container
        self._config = config
        self._assembler = SlideAssembler(config)
        self._notes = NotesParser()
        self.states: Dict[str, SlideState] = {}

    def parse_slide(self, part_name: str) -> Slide:
        """Pending → Parsing → Assembled for one part; Failed on any error."""
        slide_number = slide_number_from_part(part_name)
        self.states[part_name] = SlideState.PARSING
        try:
            slide = self._build_slide(part_name, slide_number)
        except PptxError as exc:
            self.states[part_name] = SlideState.FAILED
            exc.with_context(part_name=part_name, slide_number=slide_number)
            raise
        self.states[part_name] = SlideState.ASSEMBLED
        return slide

    def _build_slide(self, part_name: str, slide_number: int) -> Slide:
        data = self._container.read_part(part_name)
        relationships = SlideRelationships.for_part(self._container, part_name)
        placeholders = PlaceholderResolver.for_slide(self._container, relationships)
        loader = ImageLoader(self._container, self._config, self._container.compressor)

        elements = SlideParser(part_name, relationships, loader, placeholders).parse(data)

        comment = None
        if self._config.include_slide_comments:
            comment = self._notes.comment_for(self._container, relationships)

        LOGGER.debug("Assembled slide %d from %s", slide_number, part_name)
        return self._assembler.assemble(slide_number, part_name, elements, comment)

    # ------------------------------------------------------------------
    def parse_all(self) -> List[Slide]:
        parts = self._pending_parts()
        slides = [self.parse_slide(part_name) for part_name in parts]
        LOGGER.info("Parsed %d slides sequentially", len(slides))
        return slides

    def parse_all_parallel(self, max_workers: Optional[int] = None) -> List[Slide]:
        """Parse on a bounded pool, returning slides in part order or raising the first failure."""
        parts = self._pending_parts()
        if not parts:
            return []
        workers = max(1, min(max_workers or default_worker_count(), len(parts)))
        slots: List[Optional[Slide]] = [None] * len(parts)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pptx-slide") as executor:
            futures: Dict[Future, int] = {
                executor.submit(self.parse_slide, part_name): index for index, part_name in enumerate(parts)
            }
            _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            if not_done:
                # A slide failed: drop queued work and let running slides finish.
                for future in not_done:
                    future.cancel()
                wait(not_done)

            errors = {
                index: future.exception()
                for future, index in futures.items()
                if not future.cancelled() and future.exception() is not None
            }
            if errors:
                error = errors[min(errors)]
                LOGGER.error("Aborting parallel parse: %s", error)
                raise error

            for future, index in futures.items():
                slots[index] = future.result()

        LOGGER.info("Parsed %d slides with %d workers", len(slots), workers)
        return [slide for slide in slots if slide is not None]

    def iter_slides(self) -> Iterator[Slide]:
        """Yield slides one at a time; only the current slide is held in memory."""
        for part_name in self._pending_parts():
            yield self.parse_slide(part_name)

    def _pending_parts(self) -> List[str]:
        parts = self._container.list_slide_parts()
        for part_name in parts:
            self.states[part_name] = SlideState.PENDING
        return parts
