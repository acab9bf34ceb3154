from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

MODE_WORD = "word"
MODE_PHRASE = "phrase"

TIER_VISITED = "visited"
TIER_ANNOTATE = "annotate"
TIER_ERASE = "erase"

_VALID_MODES = {MODE_WORD, MODE_PHRASE}
_VALID_TIERS = {TIER_VISITED, TIER_ANNOTATE, TIER_ERASE}


def normalize_mode(value: str, *, default: str = MODE_WORD) -> str:
    text = str(value or "").strip().lower()
    if text in _VALID_MODES:
        return text
    return str(default or MODE_WORD)


def normalize_tier(value: str, *, default: str = TIER_VISITED) -> str:
    text = str(value or "").strip().lower()
    if text in _VALID_TIERS:
        return text
    return str(default or TIER_VISITED)


@dataclass(frozen=True)
class Cursor:
    """Reading position: 1-based page, 0-based word index on that page."""

    page: int
    word: int

    def to_dict(self) -> Dict[str, int]:
        return {"page": int(self.page), "word": int(self.word)}


@dataclass(frozen=True)
class MarkRequest:
    page: int
    word: int
    tier: str = TIER_VISITED

    @property
    def key(self) -> tuple[int, int, str]:
        return (int(self.page), int(self.word), self.tier)
