from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from readmark.core.types import MODE_PHRASE, Cursor, HighlightRect, WordItem
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.rect_merge import RectMerger, word_rect


@dataclass
class PageLayers:
    """Drawable rectangles for one page, bottom layer first."""

    page: int
    annotated: List[HighlightRect] = field(default_factory=list)
    visited: List[HighlightRect] = field(default_factory=list)
    cursor: List[HighlightRect] = field(default_factory=list)
    anchor: List[HighlightRect] = field(default_factory=list)
    drag_preview: List[HighlightRect] = field(default_factory=list)
    style: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.annotated or self.visited or self.cursor or self.anchor or self.drag_preview
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "page": int(self.page),
            "annotated": [r.to_dict() for r in self.annotated],
            "visited": [r.to_dict() for r in self.visited],
            "cursor": [r.to_dict() for r in self.cursor],
            "anchor": [r.to_dict() for r in self.anchor],
            "drag_preview": [r.to_dict() for r in self.drag_preview],
            "style": dict(self.style),
        }


def compute_page_layers(
    document: ReadingDocument,
    store: HighlightStore,
    merger: RectMerger,
    page: int,
    cursor: Optional[Cursor] = None,
    mode: str = "word",
    anchor: Optional[Cursor] = None,
    drag_indices: Sequence[int] = (),
    style: Optional[Dict[str, str]] = None,
) -> PageLayers:
    layers = PageLayers(page=page, style=dict(style or {}))
    words = document.words(page)
    if not words:
        return layers

    annotated = store.annotated_indices(page)
    layers.annotated = merger.merge(merger.word_rects(words, annotated))

    # Visited words already covered by an annotation are not drawn twice.
    visited = store.visited(page)
    annotated_set = set(annotated)
    visited_indices = [
        i
        for i in sorted(visited.indices)
        if i not in annotated_set
        and 0 <= i < len(words)
        and (visited.section is None or words[i].section_index == visited.section)
    ]
    layers.visited = merger.merge(merger.word_rects(words, visited_indices))

    if cursor is not None and cursor.page == page and 0 <= cursor.word < len(words):
        if mode == MODE_PHRASE:
            sentence = words[cursor.word].sentence_index
            members = [i for i, w in enumerate(words) if w.sentence_index == sentence]
            layers.cursor = merger.merge_tight(merger.word_rects(words, members))
        else:
            layers.cursor = merger.word_rects(words, [cursor.word])

    if anchor is not None and anchor.page == page:
        layers.anchor = merger.word_rects(words, [anchor.word])

    if drag_indices:
        layers.drag_preview = merger.merge_tight(merger.word_rects(words, drag_indices))
    return layers


def word_at(
    words: Sequence[WordItem], x: float, y: float, scale: float = 2.0
) -> int:
    """Index of the word under a device-space point.

    Falls back to the word whose box centre is nearest; -1 on an empty page.
    """
    if not words:
        return -1
    rects = [word_rect(w, scale) for w in words]
    for index, rect in enumerate(rects):
        if rect.contains(x, y):
            return index
    best, best_dist = -1, math.inf
    for index, rect in enumerate(rects):
        cx, cy = rect.center()
        dist = math.hypot(cx - x, cy - y)
        if dist < best_dist:
            best, best_dist = index, dist
    return best
