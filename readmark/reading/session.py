"""Command surface tying the reading core together.

``ReaderSession`` owns the document, the highlight store, the mark
scheduler, the navigation controller and the selection manager. Hosts feed
it parsed pages and abstract commands, read back drawable layers, and
perform the returned side effects (scrolling) themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from readmark.core.errors import ReadingError
from readmark.core.types import (
    TIER_ANNOTATE,
    TIER_ERASE,
    TIER_VISITED,
    Cursor,
    RawTextRun,
    WordItem,
)
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.layers import PageLayers, compute_page_layers, word_at
from readmark.reading.mark_scheduler import FlushResult, MarkScheduler, RequestFrame
from readmark.reading.navigation import Effect, NavigationController, RangeMarked, ScrollToPage
from readmark.reading.rect_merge import RectMerger
from readmark.reading.segmenter import WordSegmenter
from readmark.reading.selection import SelectionCommit, SelectionManager
from readmark.utils.config import ReaderSettings
from readmark.utils.logger import logger

ADVANCE_WORD = "advance-word"
RETREAT_WORD = "retreat-word"
ADVANCE_PHRASE = "advance-phrase"
RETREAT_PHRASE = "retreat-phrase"
JUMP_SECTION_START = "jump-section-start"
JUMP_NEXT_SECTION = "jump-next-section"
SET_ANNOTATE_MODE = "set-annotate-mode"
SET_HIGHLIGHT_TOOL = "set-highlight-tool"
CLICK_WORD = "click-word"
DOUBLE_CLICK_WORD = "double-click-word"
DRAG_START = "drag-start"
DRAG_ENTER = "drag-enter"
DRAG_COMMIT = "drag-commit"


@dataclass(frozen=True)
class Command:
    """An input event reduced to its meaning.

    ``flag`` carries the on/off switch for mode commands and the shift
    state for clicks.
    """

    name: str
    page: Optional[int] = None
    word: Optional[int] = None
    flag: bool = False


class ReaderSession:
    def __init__(
        self,
        page_count: int = 0,
        settings: Optional[ReaderSettings] = None,
        request_frame: Optional[RequestFrame] = None,
    ) -> None:
        self.settings = settings or ReaderSettings()
        self.document = ReadingDocument(page_count)
        self.store = HighlightStore(self.document)
        self.scheduler = MarkScheduler(self.store, request_frame)
        self.navigator = NavigationController(self.document, self.store, self.scheduler)
        self.selection = SelectionManager(self.document, self.store, self.scheduler)
        self.segmenter = WordSegmenter.from_settings(self.settings)
        self.merger = RectMerger.from_settings(self.settings)
        self.annotating = False
        self.erasing = False
        self._handlers: Dict[str, Callable[[Command], List[Effect]]] = {
            ADVANCE_WORD: lambda c: self.advance_word(),
            RETREAT_WORD: lambda c: self.retreat_word(),
            ADVANCE_PHRASE: lambda c: self.advance_phrase(),
            RETREAT_PHRASE: lambda c: self.retreat_phrase(),
            JUMP_SECTION_START: lambda c: self.jump_section_start(),
            JUMP_NEXT_SECTION: lambda c: self.jump_next_section(),
            SET_ANNOTATE_MODE: lambda c: self.set_annotate_mode(c.flag),
            SET_HIGHLIGHT_TOOL: lambda c: self.set_highlight_tool(c.flag),
            CLICK_WORD: lambda c: self.click_word(*self._position(c), shift=c.flag),
            DOUBLE_CLICK_WORD: lambda c: self.double_click_word(*self._position(c)),
            DRAG_START: lambda c: self.drag_start(*self._position(c)),
            DRAG_ENTER: lambda c: self.drag_enter(*self._position(c)),
            DRAG_COMMIT: lambda c: self.drag_commit(),
        }

    @staticmethod
    def _position(command: Command) -> tuple[int, int]:
        if command.page is None or command.word is None:
            raise ReadingError(f"Command {command.name!r} needs a page and a word.")
        return int(command.page), int(command.word)

    # ----- state -----
    @property
    def cursor(self) -> Optional[Cursor]:
        return self.navigator.cursor

    @property
    def mode(self) -> str:
        return self.navigator.mode

    @property
    def active_tier(self) -> str:
        if not self.annotating:
            return TIER_VISITED
        return TIER_ERASE if self.erasing else TIER_ANNOTATE

    # ----- page input -----
    def load_page_runs(
        self,
        page: int,
        runs: Iterable[RawTextRun],
        page_height: Optional[float] = None,
    ) -> List[WordItem]:
        words = self.segmenter.segment(runs, page_height=page_height)
        self.document.set_page_words(page, words, page_height=page_height)
        return words

    def set_page_words(
        self,
        page: int,
        words: Sequence[WordItem],
        page_height: Optional[float] = None,
    ) -> None:
        self.document.set_page_words(page, words, page_height=page_height)

    def open(self, page: int = 1) -> List[Effect]:
        return self.navigator.start(page)

    # ----- frame handling -----
    def flush(self) -> FlushResult:
        return self.scheduler.flush()

    def tick(self) -> int:
        """Run pending frame callbacks when the session owns its frame clock."""
        if self.scheduler.clock is None:
            return 0
        return self.scheduler.clock.tick()

    # ----- keyboard navigation -----
    def advance_word(self) -> List[Effect]:
        return self.navigator.advance_word()

    def retreat_word(self) -> List[Effect]:
        return self.navigator.retreat_word()

    def advance_phrase(self) -> List[Effect]:
        return self.navigator.advance_phrase()

    def retreat_phrase(self) -> List[Effect]:
        return self.navigator.retreat_phrase()

    def jump_section_start(self) -> List[Effect]:
        return self.navigator.jump_section_start()

    def jump_next_section(self) -> List[Effect]:
        return self.navigator.jump_next_section()

    def set_annotate_mode(self, on: bool) -> List[Effect]:
        """Switch the active tier; turning it on marks the current position.

        Whether annotate mode erases is decided once, from the cursor word's
        state at the moment the mode is switched on.
        """
        if not on:
            self.annotating = False
            self.erasing = False
            self.navigator.tier = TIER_VISITED
            return []
        if self.annotating:
            return []
        cursor = self.navigator.cursor
        self.erasing = bool(
            cursor is not None and self.store.is_annotated(cursor.page, cursor.word)
        )
        self.annotating = True
        self.navigator.tier = self.active_tier
        return self.navigator.mark_current()

    # ----- pointer input -----
    def click_word(self, page: int, word: int, shift: bool = False) -> List[Effect]:
        if shift:
            return self._selection_effects(self.selection.anchor_click(page, word))
        self.selection.clear_anchor()
        return self.navigator.place_cursor(page, word)

    def double_click_word(self, page: int, word: int) -> List[Effect]:
        if not self.navigator.accepts(page, word):
            return []
        effects = self.navigator.place_cursor(page, word)
        if not any(isinstance(e, ScrollToPage) for e in effects):
            effects.append(ScrollToPage(page))
        return effects

    def set_highlight_tool(self, on: bool) -> List[Effect]:
        self.selection.set_tool_active(on)
        return []

    def drag_start(self, page: int, word: int) -> List[Effect]:
        self.selection.drag_start(page, word)
        return []

    def drag_enter(self, page: int, word: int) -> List[Effect]:
        self.selection.drag_enter(page, word)
        return []

    def drag_commit(self) -> List[Effect]:
        return self._selection_effects(self.selection.drag_commit())

    @staticmethod
    def _selection_effects(commit: Optional[SelectionCommit]) -> List[Effect]:
        if commit is None:
            return []
        return [RangeMarked(commit.tier, len(commit.words))]

    def dispatch(self, command: Command) -> List[Effect]:
        handler = self._handlers.get(command.name)
        if handler is None:
            logger.warning("Unknown reader command %r", command.name)
            raise ReadingError(f"Unknown command: {command.name!r}")
        return handler(command)

    # ----- output -----
    def page_layers(self, page: int) -> PageLayers:
        return compute_page_layers(
            self.document,
            self.store,
            self.merger,
            page,
            cursor=self.navigator.cursor,
            mode=self.navigator.mode,
            anchor=self.selection.anchor,
            drag_indices=self.selection.preview_range(page),
            style=self.settings.highlight_style(),
        )

    def word_at(self, page: int, x: float, y: float) -> int:
        return word_at(self.document.words(page), x, y, scale=self.merger.scale)

    def export_annotations(self) -> Dict[int, List[int]]:
        return self.store.export_annotations()
