from .geometry import HighlightRect
from .navigation import (
    MODE_PHRASE,
    MODE_WORD,
    TIER_ANNOTATE,
    TIER_ERASE,
    TIER_VISITED,
    Cursor,
    MarkRequest,
    normalize_mode,
    normalize_tier,
)
from .words import RawTextRun, WordBox, WordItem

__all__ = [
    "Cursor",
    "HighlightRect",
    "MarkRequest",
    "MODE_PHRASE",
    "MODE_WORD",
    "RawTextRun",
    "TIER_ANNOTATE",
    "TIER_ERASE",
    "TIER_VISITED",
    "WordBox",
    "WordItem",
    "normalize_mode",
    "normalize_tier",
]
