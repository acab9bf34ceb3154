from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from readmark.core.types import TIER_ANNOTATE, TIER_ERASE, TIER_VISITED
from readmark.reading.document import ReadingDocument


@dataclass
class VisitedState:
    """Transient highlight of the single in-progress section on a page."""

    section: Optional[int] = None
    indices: Set[int] = field(default_factory=set)

    def copy(self) -> "VisitedState":
        return VisitedState(section=self.section, indices=set(self.indices))


class HighlightStore:
    """Visited (transient) and annotated (persistent) highlight state.

    Visited state keeps one active section per page. Annotated state maps
    ``page -> section -> word indices`` and is only removed by explicit
    erase calls.
    """

    def __init__(self, document: ReadingDocument) -> None:
        self.document = document
        self._visited: Dict[int, VisitedState] = {}
        self._annotated: Dict[int, Dict[int, Set[int]]] = {}
        self.revision = 0

    # ----- queries -----
    def visited(self, page: int) -> VisitedState:
        entry = self._visited.get(page)
        return entry.copy() if entry is not None else VisitedState()

    def is_visited(self, page: int, word: int) -> bool:
        entry = self._visited.get(page)
        if entry is None or word not in entry.indices:
            return False
        return entry.section is None or self.document.section_of(page, word) == entry.section

    def is_annotated(self, page: int, word: int) -> bool:
        section = self.document.section_of(page, word)
        if section is None:
            return False
        return word in self._annotated.get(page, {}).get(section, ())

    def annotated_sections(self, page: int) -> Dict[int, List[int]]:
        return {s: sorted(ix) for s, ix in self._annotated.get(page, {}).items()}

    def annotated_indices(self, page: int) -> List[int]:
        out: Set[int] = set()
        for indices in self._annotated.get(page, {}).values():
            out.update(indices)
        return sorted(out)

    def export_annotations(self) -> Dict[int, List[int]]:
        """Flatten annotations to ``page -> sorted word indices``."""
        return {
            page: self.annotated_indices(page)
            for page in sorted(self._annotated)
            if self._annotated[page]
        }

    # ----- single mutations -----
    def mark_visited(self, page: int, word: int) -> bool:
        section = self.document.section_of(page, word)
        entry = self._visited.get(page)
        if entry is not None and entry.section == section:
            if word in entry.indices:
                return False
            entry.indices.add(word)
        elif entry is not None and entry.section is None:
            # Fresh load: keep earlier marks that already sit in this section.
            kept = {
                i for i in entry.indices if self.document.section_of(page, i) == section
            }
            kept.add(word)
            self._visited[page] = VisitedState(section=section, indices=kept)
        else:
            self._visited[page] = VisitedState(section=section, indices={word})
        return True

    def mark_annotated(self, page: int, word: int) -> bool:
        section = self.document.section_of(page, word)
        if section is None:
            return False
        indices = self._annotated.setdefault(page, {}).setdefault(section, set())
        if word in indices:
            return False
        indices.add(word)
        return True

    def unmark_visited(self, page: int, word: int) -> bool:
        entry = self._visited.get(page)
        if entry is None or word not in entry.indices:
            return False
        entry.indices.discard(word)
        if not entry.indices:
            entry.section = None
        return True

    def unmark_annotated(self, page: int, word: int) -> bool:
        section = self.document.section_of(page, word)
        page_map = self._annotated.get(page)
        if section is None or not page_map or word not in page_map.get(section, ()):
            return False
        page_map[section].discard(word)
        if not page_map[section]:
            del page_map[section]
        if not page_map:
            del self._annotated[page]
        return True

    erase_annotated = unmark_annotated

    # ----- bulk mutations -----
    def clear_visited_before(self, page: int, section: Optional[int]) -> bool:
        """Reset visited state for every page/section strictly before a target."""
        changed = False
        for p, entry in self._visited.items():
            if entry.section is None:
                continue
            earlier_page = p < page
            earlier_section = p == page and section is not None and entry.section < section
            if earlier_page or earlier_section:
                self._visited[p] = VisitedState()
                changed = True
        if changed:
            self.revision += 1
        return changed

    def clear_visited_section(self, page: int, section: Optional[int]) -> bool:
        entry = self._visited.get(page)
        if entry is None or section is None or entry.section != section:
            return False
        self._visited[page] = VisitedState()
        self.revision += 1
        return True

    def erase_annotated_section(self, page: int, section: Optional[int]) -> bool:
        page_map = self._annotated.get(page)
        if section is None or not page_map or section not in page_map:
            return False
        del page_map[section]
        if not page_map:
            del self._annotated[page]
        self.revision += 1
        return True

    def unmark(self, page: int, word: int, tier: str) -> bool:
        """Remove one word from the tier a navigation command is working in."""
        if tier in (TIER_ANNOTATE, TIER_ERASE):
            changed = self.unmark_annotated(page, word)
        else:
            changed = self.unmark_visited(page, word)
        if changed:
            self.revision += 1
        return changed

    def apply_batch(self, tier: str, items: Iterable[Tuple[int, int]]) -> int:
        """Apply a batch of ``(page, word)`` marks as a single commit.

        Returns the number of words whose state actually changed.
        """
        if tier == TIER_ERASE:
            op = self.erase_annotated
        elif tier == TIER_ANNOTATE:
            op = self.mark_annotated
        elif tier == TIER_VISITED:
            op = self.mark_visited
        else:
            raise ValueError(f"Unknown highlight tier: {tier!r}")
        changed = 0
        for page, word in items:
            if op(page, word):
                changed += 1
        if changed:
            self.revision += 1
        return changed

    def reset(self) -> None:
        self._visited.clear()
        self._annotated.clear()
        self.revision += 1
