"""Test cases for picture loading and recompression."""

import io
import unittest
from unittest.mock import Mock, patch

from PIL import Image

from pptx_markdown.model.parser_config import ParserConfig
from pptx_markdown.parser.media_extractor import (
    ImageLoader,
    PillowImageCompressor,
    image_format,
)
from pptx_markdown.parser.rels_parser import Relationship, RelationshipKind
from pptx_markdown.tests.pptx_builder import png_bytes
from pptx_markdown.utils.errors import ImageProcessingError


def _relationship(target_path: str) -> Relationship:
    return Relationship(r_id="rId1", target_path=target_path, kind=RelationshipKind.IMAGE)


class PillowCompressorTest(unittest.TestCase):
    def test_png_with_alpha_becomes_jpeg(self) -> None:
        data = PillowImageCompressor().recompress(png_bytes((8, 8)), 60)
        with Image.open(io.BytesIO(data)) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")
            self.assertEqual(img.size, (8, 8))

    def test_undecodable_bytes_raise(self) -> None:
        with self.assertRaises(ImageProcessingError):
            PillowImageCompressor().recompress(b"not an image", 80)

    def test_oversized_image_raises_processing_error(self) -> None:
        with patch.object(Image, "MAX_IMAGE_PIXELS", 10), self.assertRaises(ImageProcessingError):
            PillowImageCompressor().recompress(png_bytes((8, 8)), 80)


class ImageLoaderTest(unittest.TestCase):
    """Loader behaviour for each extraction and compression setting."""

    def setUp(self) -> None:
        self.container = Mock()
        self.container.read_part.return_value = b"raw"
        self.compressor = Mock()
        self.compressor.recompress.return_value = b"jpeg"

    def test_extraction_disabled_reads_nothing(self) -> None:
        loader = ImageLoader(self.container, ParserConfig(extract_images=False), self.compressor)
        loaded = loader.load(_relationship("ppt/media/image1.png"))

        self.assertIsNone(loaded.data)
        self.assertEqual(loaded.format, "png")
        self.container.read_part.assert_not_called()

    def test_compression_uses_configured_quality(self) -> None:
        loader = ImageLoader(self.container, ParserConfig(image_quality=42), self.compressor)
        loaded = loader.load(_relationship("ppt/media/image1.png"))

        self.compressor.recompress.assert_called_once_with(b"raw", 42)
        self.assertEqual(loaded.data, b"jpeg")
        self.assertEqual(loaded.format, "jpg")

    def test_uncompressed_keeps_source_format(self) -> None:
        loader = ImageLoader(self.container, ParserConfig(compress_images=False), self.compressor)
        loaded = loader.load(_relationship("ppt/media/photo.JPEG"))

        self.assertEqual(loaded.data, b"raw")
        self.assertEqual(loaded.format, "jpg")
        self.compressor.recompress.assert_not_called()

    def test_vector_images_pass_through(self) -> None:
        loader = ImageLoader(self.container, ParserConfig(), self.compressor)
        loaded = loader.load(_relationship("ppt/media/image3.emf"))

        self.assertEqual((loaded.data, loaded.format), (b"raw", "emf"))
        self.compressor.recompress.assert_not_called()

    def test_codec_failure_names_the_part(self) -> None:
        self.compressor.recompress.side_effect = ImageProcessingError("broken")
        loader = ImageLoader(self.container, ParserConfig(), self.compressor)

        with self.assertRaises(ImageProcessingError) as ctx:
            loader.load(_relationship("ppt/media/image2.png"))
        self.assertEqual(ctx.exception.part_name, "ppt/media/image2.png")

    def test_image_format(self) -> None:
        self.assertEqual(image_format("ppt/media/a.PNG"), "png")
        self.assertEqual(image_format("ppt/media/a.jpeg"), "jpg")
        self.assertEqual(image_format("ppt/media/blob"), "bin")


if __name__ == "__main__":
    unittest.main()
