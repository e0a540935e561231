"""Common helpers shared by renderer implementations."""
from __future__ import annotations

import re

from pptx_markdown.model.elements import TextRun

_INLINE_SPECIALS = re.compile(r"([\\`*_\[\]<>|])")
_BLOCK_MARKERS = re.compile(r"^(\s*)([#+=-])", re.MULTILINE)
_ORDERED_MARKERS = re.compile(r"^(\s*)(\d+)([.)])", re.MULTILINE)


def escape_markdown(text: str) -> str:
    """Backslash-escape characters Markdown would otherwise interpret."""
    escaped = _INLINE_SPECIALS.sub(r"\\\1", text)
    escaped = _BLOCK_MARKERS.sub(r"\1\\\2", escaped)
    return _ORDERED_MARKERS.sub(r"\1\2\\\3", escaped)


def emphasis_marker(run: TextRun) -> str:
    if run.bold and run.italic:
        return "***"
    if run.bold:
        return "**"
    if run.italic:
        return "_"
    return ""


def emphasize(run: TextRun, line_break: str = "  \n") -> str:
    """Escape a run and wrap each of its lines in the run's emphasis markers."""
    marker = emphasis_marker(run)
    lines = []
    for line in run.content.split("\n"):
        escaped = escape_markdown(line)
        core = escaped.strip()
        if not marker or not core:
            lines.append(escaped)
            continue
        lead = escaped[: len(escaped) - len(escaped.lstrip())]
        trail = escaped[len(escaped.rstrip()):]
        lines.append(f"{lead}{marker}{core}{marker}{trail}")
    return line_break.join(lines)
