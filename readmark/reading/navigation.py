"""Cursor state machine for keyboard-style reading navigation.

Each command moves the cursor (or declines to), queues highlight marks on
the scheduler and returns the side effects it produced. Visited state for
everything before a newly entered section or page is cleared directly on
the store; annotations are never touched by a crossing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from readmark.core.types import (
    MODE_PHRASE,
    MODE_WORD,
    TIER_ANNOTATE,
    TIER_ERASE,
    TIER_VISITED,
    Cursor,
    normalize_mode,
    normalize_tier,
)
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.mark_scheduler import MarkScheduler
from readmark.reading.page_index import (
    find_next_sentence,
    find_prev_sentence,
    last_sentence_start,
    sentence_run,
)
from readmark.utils.logger import logger


@dataclass(frozen=True)
class ClearVisitedBefore:
    page: int
    section: Optional[int]


@dataclass(frozen=True)
class SectionErased:
    page: int
    section: int
    tier: str


@dataclass(frozen=True)
class ScrollToPage:
    page: int


@dataclass(frozen=True)
class RangeMarked:
    tier: str
    count: int


Effect = Union[ClearVisitedBefore, SectionErased, ScrollToPage, RangeMarked]


class NavigationController:
    def __init__(
        self,
        document: ReadingDocument,
        store: HighlightStore,
        scheduler: MarkScheduler,
        cursor: Optional[Cursor] = None,
        mode: str = MODE_WORD,
    ) -> None:
        self.document = document
        self.store = store
        self.scheduler = scheduler
        self.cursor = cursor
        self.mode = normalize_mode(mode)
        self._tier = TIER_VISITED

    @property
    def tier(self) -> str:
        return self._tier

    @tier.setter
    def tier(self, value: str) -> None:
        self._tier = normalize_tier(value)

    # ----- helpers -----
    def _current(self):
        """Return ``(page, word, words)`` or None when there is no cursor."""
        if self.cursor is None:
            return None
        page, word = self.cursor.page, self.cursor.word
        return page, word, self.document.words(page)

    def _move(self, page: int, word: int, effects: List[Effect]) -> None:
        if self.cursor is None or self.cursor.page != page:
            effects.append(ScrollToPage(page))
        self.cursor = Cursor(page, word)

    def _mark(self, page: int, word: int) -> None:
        self.scheduler.schedule(page, word, self._tier)

    def _mark_all(self, page: int, indices: Iterable[int]) -> None:
        for index in indices:
            self.scheduler.schedule(page, index, self._tier)

    def _unmark(self, page: int, word: int) -> None:
        self.scheduler.discard(page, word, self._tier)
        self.store.unmark(page, word, self._tier)

    def _is_marked(self, page: int, word: int) -> bool:
        if self._tier in (TIER_ANNOTATE, TIER_ERASE):
            return self.store.is_annotated(page, word)
        return self.store.is_visited(page, word)

    def _cross(self, page: int, section: Optional[int], effects: List[Effect]) -> None:
        self.scheduler.discard_visited_before(page, section)
        self.store.clear_visited_before(page, section)
        effects.append(ClearVisitedBefore(page, section))
        logger.debug("Entering page %d section %s", page, section)

    def _first_section(self, page: int) -> Optional[int]:
        words = self.document.words(page)
        return words[0].section_index if words else None

    def _next_landing_page(self, page: int) -> Optional[int]:
        """Next page that is either populated or not parsed yet."""
        for candidate in range(page + 1, self.document.page_count + 1):
            if not self.document.is_parsed(candidate) or self.document.has_words(candidate):
                return candidate
        return None

    def _prev_landing_page(self, page: int) -> Optional[int]:
        for candidate in range(page - 1, 0, -1):
            if not self.document.is_parsed(candidate) or self.document.has_words(candidate):
                return candidate
        return None

    def _enter_next_page(self, page: int, effects: List[Effect]) -> Optional[int]:
        target = self._next_landing_page(page)
        if target is None:
            return None
        self._cross(target, self._first_section(target), effects)
        self._move(target, 0, effects)
        return target

    # ----- commands -----
    def start(self, page: int = 1) -> List[Effect]:
        """Place the cursor on the first word of a page after opening."""
        effects: List[Effect] = []
        self.mode = MODE_WORD
        self._move(page, 0, effects)
        self.scheduler.schedule(page, 0, TIER_VISITED)
        return effects

    def accepts(self, page: int, word: int) -> bool:
        """True when ``(page, word)`` is a position the cursor may occupy.

        Unparsed pages only accept the provisional word 0.
        """
        if page < 1 or word < 0:
            return False
        if not self.document.is_parsed(page):
            return word == 0
        return word < len(self.document.words(page))

    def place_cursor(self, page: int, word: int) -> List[Effect]:
        if not self.accepts(page, word):
            logger.debug("Ignoring cursor placement at page %d word %d", page, word)
            return []
        effects: List[Effect] = []
        self.mode = MODE_WORD
        self._move(page, word, effects)
        self._mark(page, word)
        return effects

    def mark_current(self) -> List[Effect]:
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        if self.mode == MODE_PHRASE and 0 <= word < len(words):
            sentence = words[word].sentence_index
            self._mark_all(
                page, [i for i, w in enumerate(words) if w.sentence_index == sentence]
            )
        else:
            self._mark(page, word)
        return []

    def advance_word(self) -> List[Effect]:
        self.mode = MODE_WORD
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        effects: List[Effect] = []

        if not words:
            if self._enter_next_page(page, effects) is None:
                return []
            self._mark(self.cursor.page, 0)
            return effects
        if not 0 <= word < len(words):
            return []

        index = self.document.index(page)
        target = index.next_in_section[word]
        if target == -1:
            target = index.first_of_next_section[word]
            if target != -1:
                self._cross(page, words[target].section_index, effects)
        if target != -1:
            self._move(page, target, effects)
            self._mark(page, target)
            return effects

        if self._enter_next_page(page, effects) is None:
            return []
        self._mark(self.cursor.page, 0)
        return effects

    def retreat_word(self) -> List[Effect]:
        self.mode = MODE_WORD
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        effects: List[Effect] = []

        target_page, target_word = page, -1
        if words:
            if not 0 <= word < len(words):
                return []
            index = self.document.index(page)
            target_word = index.prev_in_section[word]
            if target_word == -1:
                current = words[word].section_index
                earlier = [s for s in index.section_order if s < current]
                if earlier:
                    # Last word, so advance-then-retreat returns to the start.
                    target_word = index.last_index_of_section(max(earlier))
        if target_word == -1:
            prev_page = self._prev_landing_page(page)
            if prev_page is None:
                return []
            target_page = prev_page
            target_word = max(0, len(self.document.words(prev_page)) - 1)

        self._unmark(page, word)
        self._move(target_page, target_word, effects)
        self._mark(target_page, target_word)
        return effects

    def advance_phrase(self) -> List[Effect]:
        self.mode = MODE_PHRASE
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        effects: List[Effect] = []

        if words:
            if not 0 <= word < len(words):
                return []
            current_run = sentence_run(words, word, same_section=True)
            marked = sum(1 for i in current_run if self._is_marked(page, i))
            if 0 < marked < len(current_run):
                self._mark_all(page, current_run)
                return effects

            target = find_next_sentence(words, word)
            if target != -1:
                if words[target].section_index != words[word].section_index:
                    self._cross(page, words[target].section_index, effects)
                self._move(page, target, effects)
                self._mark_all(page, sentence_run(words, target))
                return effects

        target_page = self._enter_next_page(page, effects)
        if target_page is None:
            return []
        target_words = self.document.words(target_page)
        if target_words:
            self._mark_all(target_page, sentence_run(target_words, 0))
        else:
            self._mark(target_page, 0)
        return effects

    def retreat_phrase(self) -> List[Effect]:
        self.mode = MODE_PHRASE
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        effects: List[Effect] = []

        if words and not 0 <= word < len(words):
            return []
        target_page, target_word = page, -1
        if words:
            target_word = find_prev_sentence(words, word)
        if target_word == -1:
            prev_page = self.document.prev_populated_page(page)
            if prev_page is None:
                return []
            target_page = prev_page
            target_word = last_sentence_start(self.document.words(prev_page))

        if words:
            for i in sentence_run(words, word):
                self._unmark(page, i)
        self._move(target_page, target_word, effects)
        target_words = self.document.words(target_page)
        self._mark_all(target_page, sentence_run(target_words, target_word))
        return effects

    def jump_section_start(self) -> List[Effect]:
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        if not 0 <= word < len(words):
            return []
        effects: List[Effect] = []
        section = words[word].section_index
        index = self.document.index(page)

        first = index.first_index_of_section(section)
        last = index.last_index_of_section(section)
        for i in range(first, last + 1):
            if words[i].section_index == section:
                self.scheduler.discard(page, i, self._tier)
        if self._tier == TIER_VISITED:
            self.store.clear_visited_section(page, section)
        else:
            self.store.erase_annotated_section(page, section)
        effects.append(SectionErased(page, section, self._tier))

        self._move(page, first, effects)
        self._mark(page, first)
        return effects

    def jump_next_section(self) -> List[Effect]:
        state = self._current()
        if state is None:
            return []
        page, word, words = state
        effects: List[Effect] = []

        if words:
            if not 0 <= word < len(words):
                return []
            target = self.document.index(page).first_of_next_section[word]
            if target != -1:
                self._cross(page, words[target].section_index, effects)
                self._move(page, target, effects)
                self._mark(page, target)
                return effects

        if self._enter_next_page(page, effects) is None:
            return []
        self._mark(self.cursor.page, 0)
        return effects
