"""Assembled slide that renderers and callers consume."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pptx_markdown.model.elements import ImageElement, ManualImage, SlideElement
from pptx_markdown.model.parser_config import ImageHandlingMode, ParserConfig


@dataclass(frozen=True, slots=True)
class Slide:
    """Elements of one slide in visual reading order."""

    slide_number: int
    elements: Tuple[SlideElement, ...]
    config: ParserConfig = field(default_factory=ParserConfig, compare=False)
    part_name: str = ""
    comment: Optional[str] = None

    def numbered_images(self) -> List[Tuple[int, ImageElement]]:
        """Images in reading order with their 1-based sequence index on this slide."""
        images = [element for element in self.elements if isinstance(element, ImageElement)]
        return list(enumerate(images, start=1))

    def convert_to_md(self) -> Optional[str]:
        """Render the slide as Markdown; ``None`` when nothing renders."""
        from pptx_markdown.renderer.markdown_renderer import MarkdownRenderer

        markdown = MarkdownRenderer(self.config).render(self)
        return markdown or None

    def load_images_manually(self) -> List[ManualImage]:
        """Extracted images for out-of-band handling under ``ImageHandlingMode.MANUAL``."""
        if self.config.image_handling_mode is not ImageHandlingMode.MANUAL:
            return []
        return [
            ManualImage(
                data=image.data,
                format=image.format,
                source_path=image.target_path,
                slide_number=self.slide_number,
                sequence_index=index,
                relationship_id=image.relationship_id,
            )
            for index, image in self.numbered_images()
            if image.data is not None
        ]
