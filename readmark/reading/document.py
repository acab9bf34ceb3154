from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from readmark.core.errors import ReadingError
from readmark.core.types import WordItem
from readmark.reading.page_index import PageNavIndex, build_page_index
from readmark.utils.logger import logger


class ReadingDocument:
    """Per-page word lists and their navigation indices.

    Pages are numbered from 1. A page that has not been parsed yet behaves
    like an empty page for navigation purposes.
    """

    def __init__(self, page_count: int = 0) -> None:
        self.page_count = max(0, int(page_count))
        self._words: Dict[int, Tuple[WordItem, ...]] = {}
        self._index: Dict[int, PageNavIndex] = {}
        self._page_heights: Dict[int, float] = {}

    def set_page_words(
        self,
        page: int,
        words: Sequence[WordItem],
        page_height: Optional[float] = None,
    ) -> PageNavIndex:
        page = int(page)
        if page < 1:
            raise ReadingError(f"Page numbers start at 1, got {page}.")
        frozen = tuple(words)
        self._words[page] = frozen
        self._index[page] = build_page_index(frozen)
        if page_height:
            self._page_heights[page] = float(page_height)
        if page > self.page_count:
            self.page_count = page
        logger.debug(
            "Indexed page %d: %d words, %d sections",
            page,
            len(frozen),
            len(self._index[page].section_order),
        )
        return self._index[page]

    def words(self, page: int) -> Tuple[WordItem, ...]:
        return self._words.get(int(page), ())

    def index(self, page: int) -> Optional[PageNavIndex]:
        return self._index.get(int(page))

    def page_height(self, page: int) -> Optional[float]:
        return self._page_heights.get(int(page))

    def is_parsed(self, page: int) -> bool:
        return int(page) in self._words

    def has_words(self, page: int) -> bool:
        return bool(self._words.get(int(page)))

    def word(self, page: int, index: int) -> Optional[WordItem]:
        words = self.words(page)
        if 0 <= index < len(words):
            return words[index]
        return None

    def section_of(self, page: int, index: int) -> Optional[int]:
        word = self.word(page, index)
        return None if word is None else word.section_index

    def next_populated_page(self, after: int) -> Optional[int]:
        for page in range(int(after) + 1, self.page_count + 1):
            if self.has_words(page):
                return page
        return None

    def prev_populated_page(self, before: int) -> Optional[int]:
        for page in range(int(before) - 1, 0, -1):
            if self.has_words(page):
                return page
        return None

    def parsed_pages(self) -> List[int]:
        return sorted(self._words)

    def iter_range(
        self, start: Tuple[int, int], end: Tuple[int, int]
    ) -> Iterator[Tuple[int, int]]:
        """Yield every ``(page, word)`` between two positions, inclusive.

        The endpoints may come in either order. Interior pages are covered
        completely, the first and last pages partially.
        """
        (a_page, a_word), (b_page, b_word) = start, end
        if (b_page, b_word) < (a_page, a_word):
            (a_page, a_word), (b_page, b_word) = (b_page, b_word), (a_page, a_word)
        for page in range(a_page, b_page + 1):
            words = self.words(page)
            if not words:
                continue
            first = a_word if page == a_page else 0
            last = b_word if page == b_page else len(words) - 1
            first = max(0, first)
            last = min(len(words) - 1, last)
            for index in range(first, last + 1):
                yield page, index
