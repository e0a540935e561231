"""
Text normalization utilities for slide text.

Removes invisible characters PowerPoint leaves in runs and optionally
collapses whitespace for single-line contexts such as notes comments and
table cells.
"""

import re
from typing import Optional, Union
from xml.etree.ElementTree import Element


class TextNormalizer:
    """Normalizes text extracted from DrawingML runs."""

    SPECIAL_CHARS = {
        '\u00a0': ' ',      # Non-breaking space → regular space
        '\u2009': ' ',      # Thin space → regular space
        '\u2007': ' ',      # Figure space → regular space
        '\u2008': ' ',      # Punctuation space → regular space
        '\u200b': '',       # Zero-width space → remove
        '\u200c': '',       # Zero-width non-joiner → remove
        '\u200d': '',       # Zero-width joiner → remove
        '\ufeff': '',       # Byte order mark → remove
        '\u00ad': '',       # Soft hyphen → remove
        '\u2011': '-',      # Non-breaking hyphen → regular hyphen
        '\u000b': '\n',     # Vertical tab, PowerPoint's soft line break
    }

    WHITESPACE_PATTERN = re.compile(r'\s+')

    # Tabs and newlines survive; everything else in C0/C1 goes.
    CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0c\x0e-\x1f\x7f-\x9f]')

    def __init__(self, preserve_whitespace: bool = True):
        """Initialize text normalizer.

        Args:
            preserve_whitespace: If True, keep run whitespace as authored.
                                If False, collapse it to single spaces and trim.
        """
        self.preserve_whitespace = preserve_whitespace

    def normalize_text(self, text: str) -> str:
        if not text:
            return text

        normalized = self._replace_special_chars(text)
        normalized = self.CONTROL_CHARS_PATTERN.sub('', normalized)

        if not self.preserve_whitespace:
            normalized = self.WHITESPACE_PATTERN.sub(' ', normalized).strip()

        return normalized

    def extract_plain_text(self, element: Optional[Element]) -> str:
        """Concatenate all text below ``element`` and normalize it."""
        if element is None:
            return ""
        return self.normalize_text(''.join(element.itertext()))

    def _replace_special_chars(self, text: str) -> str:
        for original, replacement in self.SPECIAL_CHARS.items():
            text = text.replace(original, replacement)
        return text


_RUN_NORMALIZER = TextNormalizer(preserve_whitespace=True)
_LINE_NORMALIZER = TextNormalizer(preserve_whitespace=False)


def normalize_slide_text(text: Union[str, Element, None], preserve_whitespace: bool = True) -> str:
    """Convenience function to normalize a run string or an XML subtree.

    Args:
        text: Text string or XML element to normalize
        preserve_whitespace: Keep whitespace (runs) or collapse it (single lines)

    Returns:
        Normalized text string
    """
    normalizer = _RUN_NORMALIZER if preserve_whitespace else _LINE_NORMALIZER

    if isinstance(text, Element):
        return normalizer.extract_plain_text(text)
    if text is None:
        return ""
    return normalizer.normalize_text(str(text))
