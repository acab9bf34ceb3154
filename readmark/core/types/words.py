from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class RawTextRun:
    """One positioned text run as delivered by a text-extraction provider.

    Coordinates are in source units with the origin at the top-left corner
    of the page, so ``baseline_y`` grows downwards.
    """

    text: str
    x: float
    baseline_y: float
    glyph_height: float
    width: float
    skew: Tuple[float, float] = (0.0, 0.0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "text": str(self.text),
            "x": float(self.x),
            "baseline_y": float(self.baseline_y),
            "glyph_height": float(self.glyph_height),
            "width": float(self.width),
            "skew": [float(self.skew[0]), float(self.skew[1])],
        }


@dataclass(frozen=True)
class WordBox:
    x: float
    baseline_y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class WordItem:
    """A single positioned word with its section and sentence membership."""

    text: str
    box: WordBox
    section_index: int = 0
    sentence_index: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "text": str(self.text),
            "x": float(self.box.x),
            "baseline_y": float(self.box.baseline_y),
            "width": float(self.box.width),
            "height": float(self.box.height),
            "section_index": int(self.section_index),
            "sentence_index": int(self.sentence_index),
        }
