from __future__ import annotations

from readmark.core.types import (
    MODE_PHRASE,
    MODE_WORD,
    TIER_ANNOTATE,
    TIER_VISITED,
    Cursor,
    WordBox,
    WordItem,
)
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.mark_scheduler import MarkScheduler
from readmark.reading.navigation import (
    ClearVisitedBefore,
    NavigationController,
    ScrollToPage,
    SectionErased,
)


def _words(sections, sentences=None):
    sentences = sentences or sections
    return [
        WordItem(
            text=f"w{i}",
            box=WordBox(x=i * 40.0, baseline_y=100.0, width=30.0, height=10.0),
            section_index=section,
            sentence_index=sentence,
        )
        for i, (section, sentence) in enumerate(zip(sections, sentences))
    ]


def _controller(pages, cursor=None, page_count=None):
    document = ReadingDocument(page_count=page_count or len(pages))
    for number, words in enumerate(pages, start=1):
        if words is not None:
            document.set_page_words(number, words)
    store = HighlightStore(document)
    scheduler = MarkScheduler(store)
    controller = NavigationController(document, store, scheduler, cursor=cursor)
    return controller, store, scheduler


SECTIONS = [0, 0, 0, 1, 1, 1, 1, 2, 2, 2]


def test_advance_word_into_next_section_then_retreat() -> None:
    controller, store, scheduler = _controller([_words(SECTIONS)], cursor=Cursor(1, 2))
    scheduler.schedule_many([(1, 0), (1, 1), (1, 2)])
    scheduler.flush()

    effects = controller.advance_word()
    assert effects == [ClearVisitedBefore(1, 1)]
    assert controller.cursor == Cursor(1, 3)
    scheduler.flush()
    assert store.visited(1).indices == {3}

    assert controller.retreat_word() == []
    assert controller.cursor == Cursor(1, 2)
    scheduler.flush()
    assert store.is_visited(1, 2)
    assert not store.is_visited(1, 3)


def test_advance_word_within_section_marks_destination() -> None:
    controller, store, scheduler = _controller([_words(SECTIONS)], cursor=Cursor(1, 0))
    assert controller.advance_word() == []
    assert controller.cursor == Cursor(1, 1)
    scheduler.flush()
    assert store.is_visited(1, 1)


def test_advance_word_crosses_pages() -> None:
    controller, store, scheduler = _controller(
        [_words([0, 0, 0]), _words([0, 0])], cursor=Cursor(1, 2)
    )
    effects = controller.advance_word()
    assert effects == [ClearVisitedBefore(2, 0), ScrollToPage(2)]
    assert controller.cursor == Cursor(2, 0)

    assert controller.advance_word() == []
    assert controller.cursor == Cursor(2, 1)
    scheduler.flush()

    assert controller.advance_word() == []
    assert controller.cursor == Cursor(2, 1)
    assert scheduler.pending() == 0
    assert store.is_visited(2, 1)


def test_advance_word_skips_empty_pages_and_lands_on_unparsed_ones() -> None:
    controller, _, _ = _controller(
        [_words([0]), [], _words([0])], cursor=Cursor(1, 0)
    )
    controller.advance_word()
    assert controller.cursor == Cursor(3, 0)

    controller, _, _ = _controller([_words([0]), None], cursor=Cursor(1, 0))
    controller.advance_word()
    assert controller.cursor == Cursor(2, 0)


def test_retreat_word_moves_to_previous_page_last_word() -> None:
    controller, _, _ = _controller(
        [_words([0, 0, 1]), _words([0, 0])], cursor=Cursor(2, 0)
    )
    assert controller.retreat_word() == [ScrollToPage(1)]
    assert controller.cursor == Cursor(1, 2)


def test_retreat_word_at_document_start_is_noop() -> None:
    controller, store, scheduler = _controller([_words([0, 0])], cursor=Cursor(1, 0))
    scheduler.schedule(1, 0)
    scheduler.flush()
    assert controller.retreat_word() == []
    assert controller.cursor == Cursor(1, 0)
    assert store.is_visited(1, 0)


def test_advance_phrase_marks_next_sentence() -> None:
    words = _words([0] * 6, [0, 0, 1, 1, 1, 2])
    controller, store, scheduler = _controller([words], cursor=Cursor(1, 1))
    controller.advance_phrase()
    assert controller.mode == MODE_PHRASE
    assert controller.cursor == Cursor(1, 2)
    scheduler.flush()
    assert store.visited(1).indices == {2, 3, 4}


def test_advance_phrase_completes_partial_sentence_first() -> None:
    words = _words([0] * 6, [0, 0, 1, 1, 1, 2])
    controller, store, scheduler = _controller([words], cursor=Cursor(1, 2))
    scheduler.schedule(1, 2)
    scheduler.flush()

    assert controller.advance_phrase() == []
    assert controller.cursor == Cursor(1, 2)
    scheduler.flush()
    assert store.visited(1).indices == {2, 3, 4}

    controller.advance_phrase()
    assert controller.cursor == Cursor(1, 5)


def test_retreat_phrase_unmarks_current_sentence() -> None:
    words = _words([0] * 6, [0, 0, 1, 1, 1, 2])
    controller, store, scheduler = _controller([words], cursor=Cursor(1, 5))
    scheduler.schedule_many([(1, 2), (1, 3), (1, 4), (1, 5)])
    scheduler.flush()

    controller.retreat_phrase()
    assert controller.cursor == Cursor(1, 2)
    scheduler.flush()
    assert store.visited(1).indices == {2, 3, 4}


def test_phrase_crosses_to_previous_page_last_sentence() -> None:
    controller, _, _ = _controller(
        [_words([0, 0, 0], [0, 1, 1]), _words([0, 0], [0, 0])], cursor=Cursor(2, 0)
    )
    assert controller.retreat_phrase() == [ScrollToPage(1)]
    assert controller.cursor == Cursor(1, 1)


def test_jump_section_start_erases_section_and_marks_first_word() -> None:
    controller, store, scheduler = _controller([_words(SECTIONS)], cursor=Cursor(1, 5))
    scheduler.schedule_many([(1, 3), (1, 4), (1, 5)])
    scheduler.flush()

    effects = controller.jump_section_start()
    assert effects == [SectionErased(1, 1, TIER_VISITED)]
    assert controller.cursor == Cursor(1, 3)
    scheduler.flush()
    assert store.visited(1).indices == {3}


def test_jump_section_start_in_annotate_tier() -> None:
    controller, store, scheduler = _controller([_words(SECTIONS)], cursor=Cursor(1, 5))
    controller.tier = TIER_ANNOTATE
    store.apply_batch(TIER_ANNOTATE, [(1, 3), (1, 4), (1, 5), (1, 8)])

    controller.jump_section_start()
    scheduler.flush()
    assert store.annotated_indices(1) == [3, 8]


def test_jump_next_section() -> None:
    controller, _, _ = _controller([_words(SECTIONS), _words([0])], cursor=Cursor(1, 4))
    assert controller.jump_next_section() == [ClearVisitedBefore(1, 2)]
    assert controller.cursor == Cursor(1, 7)
    assert controller.jump_next_section() == [ClearVisitedBefore(2, 0), ScrollToPage(2)]
    assert controller.jump_next_section() == []


def test_word_commands_force_word_mode() -> None:
    controller, _, _ = _controller([_words(SECTIONS)], cursor=Cursor(1, 0))
    controller.mode = MODE_PHRASE
    controller.advance_word()
    assert controller.mode == MODE_WORD


def test_start_and_place_cursor() -> None:
    controller, store, scheduler = _controller([None, None], page_count=2)
    assert controller.advance_word() == []
    assert controller.start(1) == [ScrollToPage(1)]
    assert controller.cursor == Cursor(1, 0)
    assert controller.place_cursor(2, 0) == [ScrollToPage(2)]

    controller.tier = "unknown"
    assert controller.tier == TIER_VISITED


def test_page_crossing_drops_queued_marks_for_earlier_page() -> None:
    controller, store, scheduler = _controller(
        [_words([0, 0]), _words([0, 0])], cursor=Cursor(1, 0)
    )
    controller.advance_word()
    controller.advance_word()
    assert controller.cursor == Cursor(2, 0)

    scheduler.clock.tick()
    assert store.visited(1).indices == set()
    assert store.visited(2).indices == {0}


def test_section_crossing_drops_queued_marks_for_earlier_section() -> None:
    controller, store, scheduler = _controller([_words(SECTIONS)], cursor=Cursor(1, 1))
    controller.advance_word()
    controller.advance_word()
    assert controller.cursor == Cursor(1, 3)

    scheduler.flush()
    assert store.visited(1).indices == {3}


def test_place_cursor_rejects_positions_outside_the_page() -> None:
    controller, store, scheduler = _controller([_words([0, 0]), None], cursor=Cursor(1, 0))
    controller.advance_word()
    scheduler.flush()

    assert controller.place_cursor(1, -1) == []
    assert controller.place_cursor(1, 2) == []
    assert controller.place_cursor(2, 3) == []
    assert controller.place_cursor(0, 0) == []
    assert controller.cursor == Cursor(1, 1)
    scheduler.flush()
    assert store.visited(1).indices == {1}

    assert controller.place_cursor(2, 0) == [ScrollToPage(2)]
    assert controller.cursor == Cursor(2, 0)
