from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from readmark.core.types import TIER_ANNOTATE, TIER_ERASE, Cursor
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.mark_scheduler import MarkScheduler
from readmark.utils.logger import logger


@dataclass(frozen=True)
class DragSelection:
    start: Cursor
    end: Cursor


@dataclass(frozen=True)
class SelectionCommit:
    tier: str
    words: Tuple[Tuple[int, int], ...]


class SelectionManager:
    """Shift-click anchor ranges and pointer-drag ranges.

    Both gestures expand to every word between their endpoints (inclusive,
    across pages) and queue the result on the mark scheduler.
    """

    def __init__(
        self,
        document: ReadingDocument,
        store: HighlightStore,
        scheduler: MarkScheduler,
    ) -> None:
        self.document = document
        self.store = store
        self.scheduler = scheduler
        self.anchor: Optional[Cursor] = None
        self.drag: Optional[DragSelection] = None
        self.tool_active = False

    def _commit(self, start: Cursor, end: Cursor, tier: str) -> SelectionCommit:
        words = tuple(
            self.document.iter_range((start.page, start.word), (end.page, end.word))
        )
        for page, word in words:
            self.scheduler.schedule(page, word, tier)
        logger.debug(
            "Selection %s -> %s committed as %s (%d words)",
            start.to_dict(),
            end.to_dict(),
            tier,
            len(words),
        )
        return SelectionCommit(tier=tier, words=words)

    # ----- anchor range -----
    def anchor_click(self, page: int, word: int) -> Optional[SelectionCommit]:
        """First call sets the anchor, the second annotates the range."""
        if self.anchor is None:
            self.anchor = Cursor(page, word)
            return None
        anchor, self.anchor = self.anchor, None
        return self._commit(anchor, Cursor(page, word), TIER_ANNOTATE)

    def clear_anchor(self) -> None:
        self.anchor = None

    # ----- drag range -----
    def set_tool_active(self, active: bool) -> None:
        self.tool_active = bool(active)
        if not self.tool_active:
            self.cancel_drag()

    def drag_start(self, page: int, word: int) -> bool:
        if not self.tool_active:
            return False
        here = Cursor(page, word)
        self.drag = DragSelection(start=here, end=here)
        return True

    def drag_enter(self, page: int, word: int) -> bool:
        if not self.tool_active or self.drag is None:
            return False
        self.drag = DragSelection(start=self.drag.start, end=Cursor(page, word))
        return True

    def drag_commit(self) -> Optional[SelectionCommit]:
        if self.drag is None:
            return None
        drag, self.drag = self.drag, None
        # Only the start word decides between erasing and annotating.
        erase = self.store.is_annotated(drag.start.page, drag.start.word)
        return self._commit(drag.start, drag.end, TIER_ERASE if erase else TIER_ANNOTATE)

    def cancel_drag(self) -> None:
        self.drag = None

    def preview_range(self, page: int) -> List[int]:
        """Word indices on ``page`` covered by the live drag preview."""
        if self.drag is None:
            return []
        start, end = self.drag.start, self.drag.end
        return [
            word
            for p, word in self.document.iter_range(
                (start.page, start.word), (end.page, end.word)
            )
            if p == page
        ]
