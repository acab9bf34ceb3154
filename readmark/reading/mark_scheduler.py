"""Frame-batched application of highlight mutations.

Navigation can request many marks in a burst (key repeat, marking a whole
sentence). Requests are queued and applied once per frame: duplicates are
dropped and the survivors land in the store as one commit per tier, in
the fixed order visited, annotate, erase.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from readmark.core.types import (
    TIER_ANNOTATE,
    TIER_ERASE,
    TIER_VISITED,
    MarkRequest,
    normalize_tier,
)
from readmark.reading.highlight_store import HighlightStore
from readmark.utils.logger import logger

FrameCallback = Callable[[], None]
RequestFrame = Callable[[FrameCallback], None]

APPLY_ORDER = (TIER_VISITED, TIER_ANNOTATE, TIER_ERASE)


class ManualFrameClock:
    """Frame source driven by explicit ``tick()`` calls."""

    def __init__(self) -> None:
        self._callbacks: List[FrameCallback] = []

    def request(self, callback: FrameCallback) -> None:
        self._callbacks.append(callback)

    def pending(self) -> int:
        return len(self._callbacks)

    def tick(self) -> int:
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return len(callbacks)


@dataclass(frozen=True)
class FlushResult:
    requested: int
    unique: int
    changed: Dict[str, int]


class MarkScheduler:
    def __init__(
        self,
        store: HighlightStore,
        request_frame: Optional[RequestFrame] = None,
    ) -> None:
        self.store = store
        if request_frame is None:
            self.clock: Optional[ManualFrameClock] = ManualFrameClock()
            request_frame = self.clock.request
        else:
            self.clock = None
        self._request_frame = request_frame
        self._pending: List[MarkRequest] = []
        self._scheduled = False
        self._lock = threading.Lock()
        self.flush_count = 0

    def schedule(self, page: int, word: int, tier: str = TIER_VISITED) -> None:
        request = MarkRequest(int(page), int(word), normalize_tier(tier))
        with self._lock:
            self._pending.append(request)
            if self._scheduled:
                return
            self._scheduled = True
        self._request_frame(self._on_frame)

    def schedule_many(self, items, tier: str = TIER_VISITED) -> None:
        for page, word in items:
            self.schedule(page, word, tier)

    def discard(self, page: int, word: int, tier: str = TIER_VISITED) -> int:
        """Drop queued marks for a word that is about to be unmarked directly.

        Unmarking in the annotate or erase tier cancels pending annotate and
        erase requests; unmarking in the visited tier cancels pending visited
        ones.
        """
        if normalize_tier(tier) == TIER_VISITED:
            targets = {TIER_VISITED}
        else:
            targets = {TIER_ANNOTATE, TIER_ERASE}
        with self._lock:
            before = len(self._pending)
            self._pending = [
                r
                for r in self._pending
                if not (r.page == page and r.word == word and r.tier in targets)
            ]
            return before - len(self._pending)

    def discard_visited_before(self, page: int, section: Optional[int]) -> int:
        """Drop queued visited marks strictly before ``(page, section)``.

        Mirrors ``HighlightStore.clear_visited_before`` for requests that
        have not been flushed yet.
        """
        document = self.store.document

        def earlier(request: MarkRequest) -> bool:
            if request.tier != TIER_VISITED:
                return False
            if request.page < page:
                return True
            if request.page != page or section is None:
                return False
            word_section = document.section_of(request.page, request.word)
            return word_section is not None and word_section < section

        with self._lock:
            before = len(self._pending)
            self._pending = [r for r in self._pending if not earlier(r)]
            return before - len(self._pending)

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def _on_frame(self) -> None:
        with self._lock:
            self._scheduled = False
        self.flush()

    def flush(self) -> FlushResult:
        with self._lock:
            marks, self._pending = self._pending, []
            seen: set[Tuple[int, int, str]] = set()
            batches: Dict[str, List[Tuple[int, int]]] = {t: [] for t in APPLY_ORDER}
            for mark in marks:
                if mark.key in seen:
                    continue
                seen.add(mark.key)
                batches[mark.tier].append((mark.page, mark.word))

            changed: Dict[str, int] = {}
            for tier in APPLY_ORDER:
                if batches[tier]:
                    changed[tier] = self.store.apply_batch(tier, batches[tier])
            if marks:
                self.flush_count += 1
                logger.debug(
                    "Flushed %d mark requests (%d unique): %s",
                    len(marks),
                    len(seen),
                    changed,
                )
            return FlushResult(requested=len(marks), unique=len(seen), changed=changed)
