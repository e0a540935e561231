"""
PPTX picture extraction

Reads image parts referenced by slide relationships and optionally passes
them through a re-compression codec before they reach the model.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Optional, Protocol

from PIL import Image, UnidentifiedImageError

from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.utils.errors import ImageProcessingError
from pptx_markdown.utils.logger import get_logger

if TYPE_CHECKING:
    from pptx_markdown.parser.pptx_loader import PptxContainer
    from pptx_markdown.parser.rels_parser import Relationship

LOGGER = get_logger(__name__)

COMPRESSED_FORMAT = "jpg"

# Pillow cannot rasterize these reliably; they are passed through untouched.
VECTOR_FORMATS = frozenset({"emf", "wmf", "svg", "emz", "wmz"})


class ImageCompressor(Protocol):
    """Narrow codec contract: re-encode bytes at a quality or raise ``ImageProcessingError``."""

    def recompress(self, data: bytes, quality: int) -> bytes:
        ...


class PillowImageCompressor:
    """Re-encodes any raster image Pillow can decode as a JPEG."""

    background = (255, 255, 255)

    def recompress(self, data: bytes, quality: int) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                rgb = self._to_rgb(img)
                buffer = io.BytesIO()
                rgb.save(buffer, format="JPEG", quality=quality, optimize=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise ImageProcessingError(f"Cannot re-encode image: {exc}") from exc
        return buffer.getvalue()

    def _to_rgb(self, img: Image.Image) -> Image.Image:
        if img.mode == "P":
            img = img.convert("RGBA" if "transparency" in img.info else "RGB")
        if img.mode in ("RGBA", "LA"):
            flattened = Image.new("RGB", img.size, self.background)
            flattened.paste(img, mask=img.getchannel("A"))
            return flattened
        if img.mode != "RGB":
            return img.convert("RGB")
        return img


@dataclass(slots=True)
class LoadedImage:
    data: Optional[bytes]
    format: str


def image_format(target_path: str) -> str:
    """Lower-case extension of an image part, ``jpeg`` folded into ``jpg``."""
    suffix = PurePosixPath(target_path).suffix.lower().lstrip(".")
    if suffix == "jpeg":
        return "jpg"
    return suffix or "bin"


class ImageLoader:
    """Fetches picture bytes for a slide according to the parser configuration."""

    def __init__(
        self,
        container: "PptxContainer",
        config: ParserConfig,
        compressor: Optional[ImageCompressor] = None,
    ) -> None:
        self._container = container
        self._config = config
        self._compressor = compressor or PillowImageCompressor()

    def load(self, relationship: "Relationship") -> LoadedImage:
        source_format = image_format(relationship.target_path)
        if not self._config.extract_images:
            return LoadedImage(data=None, format=source_format)

        data = self._container.read_part(relationship.target_path)
        if not self._config.compress_images or source_format in VECTOR_FORMATS:
            return LoadedImage(data=data, format=source_format)

        try:
            compressed = self._compressor.recompress(data, self._config.image_quality)
        except ImageProcessingError as exc:
            exc.with_context(part_name=relationship.target_path)
            raise
        LOGGER.debug(
            "Recompressed %s: %d -> %d bytes", relationship.target_path, len(data), len(compressed)
        )
        return LoadedImage(data=compressed, format=COMPRESSED_FORMAT)
