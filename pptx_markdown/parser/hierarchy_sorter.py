"""Reorder extracted elements into visual reading order."""
from __future__ import annotations

from typing import Iterable, List

from pptx_markdown.model.elements import SlideElement


def sort_elements(elements: Iterable[SlideElement]) -> List[SlideElement]:
    """Top-to-bottom, then left-to-right; document order breaks exact ties.

    The key is total because ``document_order`` is unique per slide, so the
    result does not depend on the order of the input.
    """
    return sorted(elements, key=lambda element: element.position.sort_key)
