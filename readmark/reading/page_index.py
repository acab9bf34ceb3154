from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from readmark.core.types import WordItem


@dataclass(frozen=True)
class PageNavIndex:
    """Precomputed neighbour lookups for one page's words.

    Every array has one entry per word; ``-1`` means "no such word".
    """

    next_in_section: Tuple[int, ...]
    prev_in_section: Tuple[int, ...]
    first_of_next_section: Tuple[int, ...]
    section_order: Tuple[int, ...]
    section_first_index: Dict[int, int]
    section_last_index: Dict[int, int]
    sentence_first_index: Dict[int, int]

    def __len__(self) -> int:
        return len(self.next_in_section)

    def sections(self) -> Tuple[int, ...]:
        return self.section_order

    def first_index_of_section(self, section: int) -> int:
        return self.section_first_index.get(section, -1)

    def last_index_of_section(self, section: int) -> int:
        return self.section_last_index.get(section, -1)

    def first_of_sentence(self, sentence: int) -> int:
        return self.sentence_first_index.get(sentence, -1)


def build_page_index(words: Sequence[WordItem]) -> PageNavIndex:
    n = len(words)
    next_in_section = [-1] * n
    prev_in_section = [-1] * n
    first_of_next_section = [-1] * n

    section_first: Dict[int, int] = {}
    section_last: Dict[int, int] = {}
    section_order: List[int] = []
    sentence_first: Dict[int, int] = {}
    for i, word in enumerate(words):
        if word.section_index not in section_first:
            section_first[word.section_index] = i
            section_order.append(word.section_index)
        section_last[word.section_index] = i
        sentence_first.setdefault(word.sentence_index, i)

    last_seen: Dict[int, int] = {}
    for i, word in enumerate(words):
        s = word.section_index
        if s in last_seen:
            prev_in_section[i] = last_seen[s]
        last_seen[s] = i

    next_seen: Dict[int, int] = {}
    for i in range(n - 1, -1, -1):
        s = words[i].section_index
        if s in next_seen:
            next_in_section[i] = next_seen[s]
        next_seen[s] = i

    next_section_first: Dict[int, int] = {}
    for pos, s in enumerate(section_order):
        if pos + 1 < len(section_order):
            next_section_first[s] = section_first[section_order[pos + 1]]
        else:
            next_section_first[s] = -1
    for i, word in enumerate(words):
        first_of_next_section[i] = next_section_first[word.section_index]

    return PageNavIndex(
        next_in_section=tuple(next_in_section),
        prev_in_section=tuple(prev_in_section),
        first_of_next_section=tuple(first_of_next_section),
        section_order=tuple(section_order),
        section_first_index=section_first,
        section_last_index=section_last,
        sentence_first_index=sentence_first,
    )


def sentence_run(
    words: Sequence[WordItem], index: int, same_section: bool = False
) -> List[int]:
    """Contiguous indices around ``index`` sharing its sentence.

    With ``same_section`` the run must also stay inside the word's section.
    """
    if index < 0 or index >= len(words):
        return []
    anchor = words[index]

    def belongs(i: int) -> bool:
        w = words[i]
        if w.sentence_index != anchor.sentence_index:
            return False
        return not same_section or w.section_index == anchor.section_index

    start = index
    while start > 0 and belongs(start - 1):
        start -= 1
    end = index
    while end + 1 < len(words) and belongs(end + 1):
        end += 1
    return list(range(start, end + 1))


def find_next_sentence(words: Sequence[WordItem], index: int) -> int:
    """First index after ``index`` whose sentence is later, or -1."""
    if index < 0 or index >= len(words):
        return -1
    current = words[index].sentence_index
    for i in range(index + 1, len(words)):
        if words[i].sentence_index > current:
            return i
    return -1


def find_prev_sentence(words: Sequence[WordItem], index: int) -> int:
    """First index of the sentence before the one holding ``index``, or -1."""
    if index < 0 or index >= len(words):
        return -1
    current = words[index].sentence_index
    for i in range(index - 1, -1, -1):
        if words[i].sentence_index < current:
            previous = words[i].sentence_index
            start = i
            while start > 0 and words[start - 1].sentence_index == previous:
                start -= 1
            return start
    return -1


def last_sentence_start(words: Sequence[WordItem]) -> int:
    if not words:
        return -1
    last = words[-1].sentence_index
    start = len(words) - 1
    while start > 0 and words[start - 1].sentence_index == last:
        start -= 1
    return start
