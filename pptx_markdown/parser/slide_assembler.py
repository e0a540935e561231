"""Combine sorted elements, slide number and optional comment into a Slide."""
from __future__ import annotations

from typing import Iterable, Optional

from pptx_markdown.model.elements import SlideElement
from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.model.slide_model import Slide
from pptx_markdown.parser.hierarchy_sorter import sort_elements


class SlideAssembler:
    def __init__(self, config: ParserConfig) -> None:
        self._config = config

    def assemble(
        self,
        slide_number: int,
        part_name: str,
        elements: Iterable[SlideElement],
        comment: Optional[str] = None,
    ) -> Slide:
        return Slide(
            slide_number=slide_number,
            elements=tuple(sort_elements(elements)),
            config=self._config,
            part_name=part_name,
            comment=comment if self._config.include_slide_comments else None,
        )
