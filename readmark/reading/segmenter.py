"""Split raw text runs into positioned words grouped by section and sentence.

Sections are paragraph-like groups separated by a large vertical jump
between consecutive runs; sentences end at a token whose trimmed text ends
with terminal punctuation.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional, Sequence

from readmark.core.types import RawTextRun, WordBox, WordItem
from readmark.utils.logger import logger

LINE_HEIGHT_TOLERANCE = 1.5
SKEW_EPSILON = 1e-4
PAGE_NUMBER_MAX_WORDS = 3
PAGE_MARGIN_FRACTION = 0.15

_SENTENCE_END_RE = re.compile(r"[.!?]$")
_TOKEN_RE = re.compile(r"\S+")
_DIGITS_RE = re.compile(r"^\d+$")
_ROMAN_RE = re.compile(r"^[ivxlcdm]+$", re.IGNORECASE)


def _is_finite(*values: float) -> bool:
    try:
        return all(math.isfinite(float(v)) for v in values)
    except (TypeError, ValueError):
        return False


def is_usable_run(run: RawTextRun) -> bool:
    """Return True when a run carries upright, visible, well-formed text."""
    if not run.text or not run.text.strip():
        return False
    if not _is_finite(run.x, run.baseline_y, run.glyph_height, run.width):
        return False
    if run.glyph_height <= 0 or run.width <= 0:
        return False
    skew_b, skew_c = run.skew
    if abs(skew_b) > SKEW_EPSILON or abs(skew_c) > SKEW_EPSILON:
        return False
    return True


class WordSegmenter:
    """Turn one page's text runs into an ordered list of ``WordItem``."""

    def __init__(
        self,
        line_height_tolerance: float = LINE_HEIGHT_TOLERANCE,
        filter_page_numbers: bool = True,
    ) -> None:
        self.line_height_tolerance = float(line_height_tolerance)
        self.filter_page_numbers = bool(filter_page_numbers)

    @classmethod
    def from_settings(cls, settings) -> "WordSegmenter":
        return cls(
            line_height_tolerance=settings.line_height_tolerance,
            filter_page_numbers=settings.filter_page_numbers,
        )

    def segment(
        self,
        runs: Iterable[RawTextRun],
        page_height: Optional[float] = None,
    ) -> List[WordItem]:
        words: List[WordItem] = []
        section_index = 0
        sentence_index = 0
        last_y: Optional[float] = None
        last_height: Optional[float] = None
        skipped = 0

        for run in runs:
            if not is_usable_run(run):
                skipped += 1
                continue
            text_len = len(run.text)

            if last_y is not None and last_height is not None:
                gap = abs(run.baseline_y - last_y)
                if gap > last_height * self.line_height_tolerance:
                    section_index += 1

            for match in _TOKEN_RE.finditer(run.text):
                token = match.group(0)
                # Width is shared out by character count, whitespace included.
                x_offset = (match.start() / text_len) * run.width
                token_width = (len(token) / text_len) * run.width
                box = WordBox(
                    x=run.x + x_offset,
                    baseline_y=run.baseline_y,
                    width=token_width,
                    height=run.glyph_height,
                )
                words.append(
                    WordItem(
                        text=token,
                        box=box,
                        section_index=section_index,
                        sentence_index=sentence_index,
                    )
                )
                if _SENTENCE_END_RE.search(token.strip()):
                    sentence_index += 1

            last_y = run.baseline_y
            last_height = run.glyph_height

        if skipped:
            logger.debug("Skipped %d unusable text runs", skipped)

        if self.filter_page_numbers and page_height:
            words = drop_page_numbers(words, float(page_height))
        return words


def _looks_like_page_number(section_words: Sequence[WordItem], page_height: float) -> bool:
    if not section_words or len(section_words) > PAGE_NUMBER_MAX_WORDS:
        return False
    text = "".join(w.text for w in section_words).strip()
    if not (_DIGITS_RE.match(text) or _ROMAN_RE.match(text)):
        return False
    y = section_words[0].box.baseline_y
    return y < page_height * PAGE_MARGIN_FRACTION or y > page_height * (
        1.0 - PAGE_MARGIN_FRACTION
    )


def drop_page_numbers(words: Sequence[WordItem], page_height: float) -> List[WordItem]:
    """Remove isolated page-number sections found in the header or footer band.

    Section and sentence indices of the surviving words are renumbered
    densely so they still start at 0 and never decrease.
    """
    by_section: dict[int, List[WordItem]] = {}
    for word in words:
        by_section.setdefault(word.section_index, []).append(word)
    dropped = {
        section
        for section, members in by_section.items()
        if _looks_like_page_number(members, page_height)
    }
    if not dropped:
        return list(words)
    logger.debug("Dropping %d page-number sections", len(dropped))
    kept = [w for w in words if w.section_index not in dropped]
    return renumber(kept)


def renumber(words: Sequence[WordItem]) -> List[WordItem]:
    """Compact section and sentence indices to a dense 0-based sequence."""
    out: List[WordItem] = []
    section_map: dict[int, int] = {}
    sentence_map: dict[int, int] = {}
    for word in words:
        section = section_map.setdefault(word.section_index, len(section_map))
        sentence = sentence_map.setdefault(word.sentence_index, len(sentence_map))
        if section == word.section_index and sentence == word.sentence_index:
            out.append(word)
            continue
        out.append(
            WordItem(
                text=word.text,
                box=word.box,
                section_index=section,
                sentence_index=sentence,
            )
        )
    return out


def segment_page(
    runs: Iterable[RawTextRun],
    page_height: Optional[float] = None,
    line_height_tolerance: float = LINE_HEIGHT_TOLERANCE,
    filter_page_numbers: bool = True,
) -> List[WordItem]:
    segmenter = WordSegmenter(
        line_height_tolerance=line_height_tolerance,
        filter_page_numbers=filter_page_numbers,
    )
    return segmenter.segment(runs, page_height=page_height)
