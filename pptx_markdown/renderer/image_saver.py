"""Write extracted images to disk for the save image policy."""
from __future__ import annotations

from pathlib import Path

from pptx_markdown.utils.errors import PackageIOError
from pptx_markdown.utils.logger import get_logger

LOGGER = get_logger(__name__)


class ImageSaver:
    """Filesystem collaborator; returns the absolute path it wrote."""

    def save(self, data: bytes, directory: Path, file_name: str) -> Path:
        target_dir = Path(directory).expanduser().resolve()
        target = target_dir / file_name
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise PackageIOError(f"Cannot write image: {exc}", part_name=str(target)) from exc
        LOGGER.debug("Saved %s (%d bytes)", target, len(data))
        return target
