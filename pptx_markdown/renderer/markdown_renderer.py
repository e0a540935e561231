"""Render an assembled slide into Markdown text."""
from __future__ import annotations

import base64
from typing import List, Optional

from pptx_markdown.model.elements import (
    ImageElement,
    ListElement,
    SlideElement,
    TableElement,
    TextElement,
    TextRun,
    image_file_stem,
)
from pptx_markdown.model.parser_config import ImageHandlingMode, ParserConfig
from pptx_markdown.model.slide_model import Slide
from pptx_markdown.renderer.image_saver import ImageSaver
from pptx_markdown.renderer.utils import emphasize, escape_markdown
from pptx_markdown.utils.errors import ConfigError

UNORDERED_INDENT = "  "
ORDERED_INDENT = "   "


class MarkdownRenderer:
    """Produce Markdown for one slide under the configured image policy."""

    def __init__(self, config: ParserConfig, saver: Optional[ImageSaver] = None) -> None:
        self._config = config
        self._saver = saver or ImageSaver()

    def render(self, slide: Slide) -> str:
        blocks: List[str] = []
        if slide.comment:
            blocks.append(self._render_comment(slide.comment))

        image_index = 0
        for element in slide.elements:
            if isinstance(element, ImageElement):
                image_index += 1
                rendered = self._render_image(element, slide.slide_number, image_index)
            else:
                rendered = self._render_element(element)
            if rendered:
                blocks.append(rendered)
        return "\n\n".join(blocks)

    def _render_element(self, element: SlideElement) -> str:
        if isinstance(element, TextElement):
            # Paragraph lines never start indented.
            return "\n".join(self._render_runs(paragraph.runs).lstrip(" \t") for paragraph in element.paragraphs)
        if isinstance(element, ListElement):
            return self._render_list(element)
        if isinstance(element, TableElement):
            return self._render_table(element)
        return ""

    def _render_comment(self, comment: str) -> str:
        return f"<!-- {comment.replace('-->', '--&gt;')} -->"

    def _render_runs(self, runs: List[TextRun], line_break: str = "  \n") -> str:
        return "".join(emphasize(run, line_break) for run in runs)

    def _render_list(self, element: ListElement) -> str:
        lines = []
        # One counter per level; entering a level starts it at 1, leaving it discards it.
        counters: List[int] = []
        for item in element.items:
            text = self._render_runs(item.runs, line_break=" ").strip()
            if element.ordered:
                del counters[item.level + 1 :]
                counters.extend([0] * (item.level + 1 - len(counters)))
                counters[item.level] += 1
                lines.append(f"{ORDERED_INDENT * item.level}{counters[item.level]}. {text}")
            else:
                lines.append(f"{UNORDERED_INDENT * item.level}- {text}")
        return "\n".join(lines)

    def _render_table(self, element: TableElement) -> str:
        if not element.rows or element.column_count == 0:
            return ""
        header, *body = element.rows
        lines = [self._table_row(header), "| " + " | ".join(["---"] * element.column_count) + " |"]
        lines.extend(self._table_row(row) for row in body)
        return "\n".join(lines)

    def _table_row(self, cells: List[str]) -> str:
        return "| " + " | ".join(escape_markdown(cell) for cell in cells) + " |"

    # ------------------------------------------------------------------
    def _render_image(self, image: ImageElement, slide_number: int, sequence_index: int) -> str:
        if image.data is None:
            return ""
        mode = self._config.image_handling_mode
        stem = image_file_stem(slide_number, sequence_index)

        if mode is ImageHandlingMode.IN_MARKDOWN:
            payload = base64.b64encode(image.data).decode("ascii")
            return f"![{stem}](data:{image.mime_type};base64,{payload})"
        if mode is ImageHandlingMode.SAVE:
            if self._config.image_output_path is None:
                raise ConfigError("image_handling_mode=SAVE requires image_output_path")
            path = self._saver.save(image.data, self._config.image_output_path, f"{stem}.{image.format}")
            location = path.as_posix()
            if " " in location:
                location = f"<{location}>"
            return f"![{stem}]({location})"
        # MANUAL: the caller collects the bytes through Slide.load_images_manually().
        return ""
