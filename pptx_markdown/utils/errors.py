"""Exception hierarchy shared by the parser, renderer and orchestrator."""
from __future__ import annotations

from typing import Optional


class PptxError(Exception):
    """Base error carrying the slide and part that triggered it, when known."""

    def __init__(self, message: str, *, part_name: Optional[str] = None, slide_number: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.part_name = part_name
        self.slide_number = slide_number

    def with_context(self, *, part_name: Optional[str] = None, slide_number: Optional[int] = None) -> "PptxError":
        """Fill in missing location details and return ``self`` for re-raising."""
        if self.part_name is None:
            self.part_name = part_name
        if self.slide_number is None:
            self.slide_number = slide_number
        return self

    def __str__(self) -> str:
        location = []
        if self.slide_number is not None:
            location.append(f"slide {self.slide_number}")
        if self.part_name:
            location.append(self.part_name)
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class PackageIOError(PptxError):
    """The archive could not be opened, read or written."""


class InvalidArchiveError(PackageIOError):
    """The file exists but is not a readable zip container."""


class MissingPartError(PptxError, LookupError):
    """An expected part is absent from the package."""


class MalformedDocumentError(PptxError, ValueError):
    """Unparseable XML, invalid structure, or group nesting beyond the cap."""


class ImageProcessingError(PptxError):
    """The image codec failed to decode or re-encode an embedded picture."""


class ConfigError(PptxError, ValueError):
    """Invalid parser configuration, detected before parsing starts."""
