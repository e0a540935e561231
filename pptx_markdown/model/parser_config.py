"""Immutable parser configuration, validated once at construction."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pptx_markdown.utils.errors import ConfigError


class ImageHandlingMode(Enum):
    """How the renderer deals with extracted image bytes."""

    IN_MARKDOWN = "in_markdown"
    MANUAL = "manual"
    SAVE = "save"


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Options controlling extraction and Markdown rendering.

    | Field | Default | Meaning |
    |---|---|---|
    | extract_images | True | read picture bytes from the package |
    | compress_images | True | re-encode pictures as JPEG |
    | image_quality | 80 | JPEG quality, 0-100 |
    | image_handling_mode | IN_MARKDOWN | embed, expose manually, or save |
    | image_output_path | None | target directory, required for SAVE |
    | include_slide_comments | False | leading comment line from slide notes |
    """

    extract_images: bool = True
    compress_images: bool = True
    image_quality: int = 80
    image_handling_mode: ImageHandlingMode = ImageHandlingMode.IN_MARKDOWN
    image_output_path: Optional[Path] = None
    include_slide_comments: bool = False

    def __post_init__(self) -> None:
        for flag in ("extract_images", "compress_images", "include_slide_comments"):
            if not isinstance(getattr(self, flag), bool):
                raise ConfigError(f"{flag} must be a bool, got {getattr(self, flag)!r}")

        quality = self.image_quality
        if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 100:
            raise ConfigError(f"image_quality must be an integer between 0 and 100, got {quality!r}")

        object.__setattr__(self, "image_handling_mode", _coerce_mode(self.image_handling_mode))

        if self.image_output_path is not None:
            if not isinstance(self.image_output_path, (str, Path)):
                raise ConfigError(f"image_output_path must be a path, got {self.image_output_path!r}")
            object.__setattr__(self, "image_output_path", Path(self.image_output_path))

        if self.image_handling_mode is ImageHandlingMode.SAVE and self.image_output_path is None:
            raise ConfigError("image_handling_mode=SAVE requires image_output_path")

    def with_options(self, **changes: object) -> "ParserConfig":
        """Return a copy with ``changes`` applied, validated like a fresh config."""
        try:
            return dataclasses.replace(self, **changes)
        except TypeError as exc:
            raise ConfigError(str(exc)) from exc


def _coerce_mode(value: Union[ImageHandlingMode, str]) -> ImageHandlingMode:
    if isinstance(value, ImageHandlingMode):
        return value
    if isinstance(value, str):
        try:
            return ImageHandlingMode(value.strip().lower())
        except ValueError:
            pass
    choices = ", ".join(mode.value for mode in ImageHandlingMode)
    raise ConfigError(f"image_handling_mode must be one of {choices}, got {value!r}")
