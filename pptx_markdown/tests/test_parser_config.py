"""Tests for parser configuration validation."""
import unittest
from pathlib import Path

from pptx_markdown.model.parser_config import ImageHandlingMode, ParserConfig
from pptx_markdown.utils.errors import ConfigError


class ParserConfigTest(unittest.TestCase):
    def test_defaults(self) -> None:
        config = ParserConfig()
        self.assertTrue(config.extract_images)
        self.assertTrue(config.compress_images)
        self.assertEqual(config.image_quality, 80)
        self.assertIs(config.image_handling_mode, ImageHandlingMode.IN_MARKDOWN)
        self.assertIsNone(config.image_output_path)
        self.assertFalse(config.include_slide_comments)

    def test_save_requires_output_path(self) -> None:
        with self.assertRaises(ConfigError):
            ParserConfig(image_handling_mode=ImageHandlingMode.SAVE)

    def test_output_path_is_coerced(self) -> None:
        config = ParserConfig(image_handling_mode="save", image_output_path="out/images")
        self.assertIs(config.image_handling_mode, ImageHandlingMode.SAVE)
        self.assertEqual(config.image_output_path, Path("out/images"))

    def test_quality_bounds(self) -> None:
        for quality in (-1, 101, 50.5, True, "80"):
            with self.subTest(quality=quality), self.assertRaises(ConfigError):
                ParserConfig(image_quality=quality)
        self.assertEqual(ParserConfig(image_quality=0).image_quality, 0)
        self.assertEqual(ParserConfig(image_quality=100).image_quality, 100)

    def test_unknown_mode(self) -> None:
        with self.assertRaises(ConfigError):
            ParserConfig(image_handling_mode="inline")

    def test_flags_must_be_bool(self) -> None:
        with self.assertRaises(ConfigError):
            ParserConfig(extract_images="yes")

    def test_with_options_revalidates(self) -> None:
        config = ParserConfig().with_options(image_quality=30)
        self.assertEqual(config.image_quality, 30)
        with self.assertRaises(ConfigError):
            config.with_options(image_handling_mode=ImageHandlingMode.SAVE)
        with self.assertRaises(ConfigError):
            config.with_options(no_such_option=True)

    def test_config_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            ParserConfig(image_quality=500)


if __name__ == "__main__":
    unittest.main()
