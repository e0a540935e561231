"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from pptx_markdown.model.slide_model import Slide


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, slides: Sequence[Slide]) -> Path:
        """Persist the slide models as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = [self._serialize(slide) for slide in slides]
        target = self.directory / "slides.json"
        target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return target

    def _serialize(self, value: Any) -> Any:
        if is_dataclass(value) and not isinstance(value, type):
            data = {f.name: self._serialize(getattr(value, f.name)) for f in fields(value) if f.name != "config"}
            data["kind"] = type(value).__name__
            return data
        if isinstance(value, bytes):
            return {"bytes": len(value)}
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
