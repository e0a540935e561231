"""Entry-point for the pptx → Markdown pipeline."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from pptx_markdown.model.parser_config import ImageHandlingMode, ParserConfig
from pptx_markdown.model.slide_model import Slide
from pptx_markdown.parser.pptx_loader import PptxContainer
from pptx_markdown.utils.debug import DebugDumper
from pptx_markdown.utils.logger import get_logger, set_verbosity

LOGGER = get_logger(__name__)

SLIDE_SEPARATOR = "\n\n"


def open_presentation(path: Union[str, Path], config: Optional[ParserConfig] = None) -> PptxContainer:
    """Open a PPTX package; the caller closes it (or uses it as a context manager)."""
    return PptxContainer.open(path, config)


def slides_to_markdown(slides: List[Slide]) -> str:
    """Join the Markdown of every slide that renders something."""
    rendered = (slide.convert_to_md() for slide in slides)
    return SLIDE_SEPARATOR.join(markdown for markdown in rendered if markdown)


def convert_presentation(
    path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    *,
    parallel: bool = False,
    debug_dir: Optional[Path] = None,
) -> str:
    """Parse every slide of ``path`` and return the whole deck as Markdown."""
    with open_presentation(path, config) as container:
        slides = container.parse_all_parallel() if parallel else container.parse_all()

    if debug_dir is not None:
        DebugDumper(debug_dir).dump(slides)
    return slides_to_markdown(slides)


def main(
    pptx_file: str,
    output_file: Optional[str] = None,
    *,
    config: Optional[ParserConfig] = None,
    parallel: bool = False,
    debug_dir: Optional[str] = None,
) -> Path:
    """Run the PPTX → slide model → Markdown pipeline and write the result."""
    pptx_path = Path(pptx_file).resolve()
    if not pptx_path.exists():
        raise FileNotFoundError(f"PPTX file not found: {pptx_path}")

    LOGGER.info("Converting %s", pptx_path.name)
    markdown = convert_presentation(
        pptx_path,
        config,
        parallel=parallel,
        debug_dir=Path(debug_dir).resolve() if debug_dir else None,
    )

    output_path = Path(output_file).resolve() if output_file else pptx_path.with_suffix(".md")
    output_path.write_text(markdown + "\n", encoding="utf-8")
    LOGGER.info("Wrote %s", output_path)
    return output_path


if __name__ == "__main__":  # pragma: no cover
    import argparse

    parser = argparse.ArgumentParser(description="Convert PPTX slides into Markdown")
    parser.add_argument("pptx_file", help="Path to the input .pptx file")
    parser.add_argument("-o", "--output", help="Markdown file to write (defaults next to the input)")
    parser.add_argument("--parallel", action="store_true", help="Parse slides on a worker pool")
    parser.add_argument("--no-images", action="store_true", help="Do not extract image bytes")
    parser.add_argument("--no-compress", action="store_true", help="Keep images in their original format")
    parser.add_argument("--quality", type=int, default=80, help="JPEG quality for recompressed images")
    parser.add_argument(
        "--image-mode",
        choices=[mode.value for mode in ImageHandlingMode],
        default=ImageHandlingMode.IN_MARKDOWN.value,
        help="Embed images, leave them to the caller, or save them to --image-dir",
    )
    parser.add_argument("--image-dir", help="Directory for saved images")
    parser.add_argument("--comments", action="store_true", help="Add speaker notes as a leading comment")
    parser.add_argument("--debug-dir", help="Directory for the JSON dump of the slide model")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    set_verbosity(args.verbose)
    cli_config = ParserConfig(
        extract_images=not args.no_images,
        compress_images=not args.no_compress,
        image_quality=args.quality,
        image_handling_mode=ImageHandlingMode(args.image_mode),
        image_output_path=args.image_dir,
        include_slide_comments=args.comments,
    )
    main(args.pptx_file, args.output, config=cli_config, parallel=args.parallel, debug_dir=args.debug_dir)
