from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from readmark.core.types import HighlightRect, WordItem

PDF_SCALE = 2.0
LINE_TOLERANCE_MULTIPLIER = 2.0
GAP_TOLERANCE_MULTIPLIER = 6.0
MIN_GAP_PX = 12.0
GAP_WIDTH_RATIO = 0.8
BOX_HEIGHT_FACTOR = 1.2
ASCENT_FRACTION = 0.85


def word_rect(
    word: WordItem, scale: float = PDF_SCALE, page_height: Optional[float] = None
) -> HighlightRect:
    """Device-space box for a word.

    Source coordinates are top-left based. Pass ``page_height`` when the
    source uses a bottom-left origin so the baseline is flipped first.
    """
    baseline = word.box.baseline_y
    if page_height is not None:
        baseline = float(page_height) - baseline
    x = word.box.x * scale
    y = baseline * scale
    width = word.box.width * scale
    height = word.box.height * scale * BOX_HEIGHT_FACTOR
    top = y - height * ASCENT_FRACTION
    return HighlightRect(x=x, y=top, width=width, height=height, line_y=round(y))


def line_tolerance(scale: float = PDF_SCALE) -> float:
    return max(2.0, LINE_TOLERANCE_MULTIPLIER * scale)


def adaptive_gap_tolerance(
    rects: Sequence[HighlightRect],
    scale: float = PDF_SCALE,
    min_gap_px: float = MIN_GAP_PX,
    width_ratio: float = GAP_WIDTH_RATIO,
) -> float:
    """Gap allowance that widens with the average word width.

    Headings set with wide spacing still merge into one region.
    """
    if not rects:
        return min_gap_px * scale
    mean_width = float(np.mean([r.width for r in rects]))
    return max(min_gap_px * scale, mean_width * width_ratio)


def fixed_gap_tolerance(
    scale: float = PDF_SCALE, multiplier: float = GAP_TOLERANCE_MULTIPLIER
) -> float:
    return max(2.0, multiplier * scale)


def _sorted(rects: Sequence[HighlightRect]) -> List[HighlightRect]:
    if not rects:
        return []
    table = np.array(
        [[round(r.line_y), r.x, r.line_y, r.y, r.width, r.height] for r in rects],
        dtype=float,
    )
    # np.lexsort treats the last key as primary.
    order = np.lexsort(table.T[::-1])
    return [rects[int(i)] for i in order]


def _union(current: HighlightRect, nxt: HighlightRect) -> HighlightRect:
    left = min(current.x, nxt.x)
    right = max(current.right, nxt.right)
    top = min(current.y, nxt.y)
    bottom = max(current.bottom, nxt.bottom)
    return HighlightRect(
        x=left,
        y=top,
        width=right - left,
        height=bottom - top,
        line_y=round((current.line_y + nxt.line_y) / 2.0),
    )


def merge_rects(
    rects: Iterable[HighlightRect],
    line_tol: Optional[float] = None,
    gap_tol: Optional[float] = None,
    scale: float = PDF_SCALE,
) -> List[HighlightRect]:
    """Merge word boxes that sit on the same line and nearly touch.

    The result only depends on the set of input rectangles, not their order.
    """
    ordered = _sorted(list(rects))
    if not ordered:
        return []
    if line_tol is None:
        line_tol = line_tolerance(scale)
    if gap_tol is None:
        gap_tol = adaptive_gap_tolerance(ordered, scale)

    merged: List[HighlightRect] = []
    current = ordered[0]
    for nxt in ordered[1:]:
        same_line = abs(round(nxt.line_y) - round(current.line_y)) <= line_tol
        if same_line and nxt.x <= current.right + gap_tol:
            current = _union(current, nxt)
            continue
        merged.append(current)
        current = nxt
    merged.append(current)
    return merged


class RectMerger:
    """Settings-bound front end to :func:`merge_rects`."""

    def __init__(
        self,
        scale: float = PDF_SCALE,
        min_gap_px: float = MIN_GAP_PX,
        gap_width_ratio: float = GAP_WIDTH_RATIO,
        gap_tolerance_multiplier: float = GAP_TOLERANCE_MULTIPLIER,
        line_tolerance_multiplier: float = LINE_TOLERANCE_MULTIPLIER,
    ) -> None:
        self.scale = float(scale)
        self.min_gap_px = float(min_gap_px)
        self.gap_width_ratio = float(gap_width_ratio)
        self.gap_tolerance_multiplier = float(gap_tolerance_multiplier)
        self.line_tolerance_multiplier = float(line_tolerance_multiplier)

    @classmethod
    def from_settings(cls, settings) -> "RectMerger":
        return cls(
            scale=settings.pdf_scale,
            min_gap_px=settings.min_gap_px,
            gap_width_ratio=settings.gap_width_ratio,
            gap_tolerance_multiplier=settings.gap_tolerance_multiplier,
            line_tolerance_multiplier=settings.line_tolerance_multiplier,
        )

    @property
    def line_tolerance(self) -> float:
        return max(2.0, self.line_tolerance_multiplier * self.scale)

    def merge(self, rects: Iterable[HighlightRect]) -> List[HighlightRect]:
        rects = list(rects)
        gap = adaptive_gap_tolerance(
            rects, self.scale, self.min_gap_px, self.gap_width_ratio
        )
        return merge_rects(rects, line_tol=self.line_tolerance, gap_tol=gap)

    def merge_tight(self, rects: Iterable[HighlightRect]) -> List[HighlightRect]:
        gap = fixed_gap_tolerance(self.scale, self.gap_tolerance_multiplier)
        return merge_rects(rects, line_tol=self.line_tolerance, gap_tol=gap)

    def word_rects(
        self,
        words: Sequence[WordItem],
        indices: Iterable[int],
        page_height: Optional[float] = None,
    ) -> List[HighlightRect]:
        out = []
        for i in indices:
            if 0 <= i < len(words):
                out.append(word_rect(words[i], self.scale, page_height))
        return out
