from __future__ import annotations

import pytest

from readmark.core.errors import ReadingError
from readmark.core.types import TIER_ANNOTATE, TIER_ERASE, TIER_VISITED, Cursor, RawTextRun
from readmark.reading.navigation import RangeMarked, ScrollToPage
from readmark.reading.session import (
    ADVANCE_PHRASE,
    ADVANCE_WORD,
    CLICK_WORD,
    DRAG_COMMIT,
    DRAG_ENTER,
    DRAG_START,
    SET_ANNOTATE_MODE,
    SET_HIGHLIGHT_TOOL,
    Command,
    ReaderSession,
)
from readmark.utils.config import ReaderSettings


def _runs():
    return [
        RawTextRun(text="The quick fox.", x=10.0, baseline_y=100.0, glyph_height=10.0, width=140.0),
        RawTextRun(text="It ran away.", x=10.0, baseline_y=112.0, glyph_height=10.0, width=120.0),
        RawTextRun(text="Next part here.", x=10.0, baseline_y=160.0, glyph_height=10.0, width=150.0),
    ]


def _session() -> ReaderSession:
    session = ReaderSession(page_count=2)
    session.load_page_runs(1, _runs(), page_height=800.0)
    session.load_page_runs(2, _runs()[:1], page_height=800.0)
    return session


def test_open_marks_first_word() -> None:
    session = _session()
    assert session.open() == [ScrollToPage(1)]
    assert session.tick() == 1
    assert session.store.is_visited(1, 0)
    assert session.active_tier == TIER_VISITED


def test_dispatch_routes_navigation_commands() -> None:
    session = _session()
    session.open()
    session.dispatch(Command(ADVANCE_WORD))
    assert session.cursor == Cursor(1, 1)

    session.dispatch(Command(ADVANCE_PHRASE))
    assert session.mode == "phrase"
    assert session.cursor == Cursor(1, 3)
    session.flush()
    assert session.store.visited(1).indices == {0, 1, 3, 4, 5}


def test_dispatch_rejects_unknown_or_incomplete_commands() -> None:
    session = _session()
    with pytest.raises(ReadingError):
        session.dispatch(Command("teleport"))
    with pytest.raises(ReadingError):
        session.dispatch(Command(CLICK_WORD))


def test_annotate_mode_picks_erase_from_cursor_word() -> None:
    session = _session()
    session.open()
    session.dispatch(Command(SET_ANNOTATE_MODE, flag=True))
    assert session.active_tier == TIER_ANNOTATE
    session.advance_word()
    session.flush()
    assert session.store.annotated_indices(1) == [0, 1]

    session.set_annotate_mode(False)
    session.click_word(1, 0)
    session.set_annotate_mode(True)
    assert session.active_tier == TIER_ERASE
    session.flush()
    assert session.store.annotated_indices(1) == [1]


def test_shift_click_range_reports_marked_count() -> None:
    session = _session()
    assert session.dispatch(Command(CLICK_WORD, page=1, word=5, flag=True)) == []
    effects = session.dispatch(Command(CLICK_WORD, page=1, word=2, flag=True))
    assert effects == [RangeMarked(TIER_ANNOTATE, 4)]
    session.tick()
    assert session.export_annotations() == {1: [2, 3, 4, 5]}


def test_drag_gesture_through_dispatch() -> None:
    session = _session()
    session.dispatch(Command(SET_HIGHLIGHT_TOOL, flag=True))
    session.dispatch(Command(DRAG_START, page=1, word=6))
    session.dispatch(Command(DRAG_ENTER, page=2, word=1))
    assert session.page_layers(2).drag_preview
    effects = session.dispatch(Command(DRAG_COMMIT))
    assert effects == [RangeMarked(TIER_ANNOTATE, 5)]
    session.flush()
    assert session.export_annotations() == {1: [6, 7, 8], 2: [0, 1]}


def test_double_click_scrolls_even_on_same_page() -> None:
    session = _session()
    session.open()
    assert session.double_click_word(1, 4) == [ScrollToPage(1)]
    assert session.cursor == Cursor(1, 4)


def test_word_at_and_layers() -> None:
    session = _session()
    session.open()
    session.flush()
    layers = session.page_layers(1)
    assert len(layers.cursor) == 1
    assert len(layers.visited) == 1
    assert not layers.is_empty()
    x, y = layers.cursor[0].center()
    assert session.word_at(1, x, y) == 0
    assert session.word_at(3, x, y) == -1


def test_click_outside_page_words_keeps_cursor_and_marks() -> None:
    session = _session()
    session.open()
    session.advance_word()
    session.tick()

    assert session.click_word(1, -1) == []
    assert session.double_click_word(1, 42) == []
    session.tick()
    assert session.cursor == Cursor(1, 1)
    assert session.store.visited(1).indices == {0, 1}

    session.advance_word()
    assert session.cursor == Cursor(1, 2)


def test_plain_click_drops_pending_anchor() -> None:
    session = _session()
    session.click_word(1, 5, shift=True)
    session.click_word(1, 0)
    assert session.selection.anchor is None
    assert session.click_word(1, 2, shift=True) == []


def test_page_layers_carry_highlight_style() -> None:
    session = ReaderSession(
        page_count=1,
        settings=ReaderSettings(reading_highlight_style="highlight", annotation_color="#00ff00"),
    )
    session.load_page_runs(1, _runs())
    style = session.page_layers(1).style
    assert style == {
        "reading_color": "#facc5a",
        "reading_style": "highlight",
        "annotation_color": "#00ff00",
    }
    assert session.page_layers(2).to_dict()["style"] == style
