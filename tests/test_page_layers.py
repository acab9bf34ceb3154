from __future__ import annotations

from readmark.core.types import MODE_PHRASE, TIER_ANNOTATE, Cursor, WordBox, WordItem
from readmark.reading.document import ReadingDocument
from readmark.reading.highlight_store import HighlightStore
from readmark.reading.layers import compute_page_layers, word_at
from readmark.reading.rect_merge import RectMerger, word_rect


def _words():
    # Two lines: words 0-3 on the first, 4-5 on the second section.
    out = []
    for i in range(4):
        out.append(
            WordItem(
                text=f"a{i}",
                box=WordBox(x=10.0 + i * 34.0, baseline_y=100.0, width=30.0, height=10.0),
                section_index=0,
                sentence_index=0 if i < 2 else 1,
            )
        )
    for i in range(2):
        out.append(
            WordItem(
                text=f"b{i}",
                box=WordBox(x=10.0 + i * 34.0, baseline_y=150.0, width=30.0, height=10.0),
                section_index=1,
                sentence_index=2,
            )
        )
    return out


def _fixture():
    document = ReadingDocument()
    document.set_page_words(1, _words())
    return document, HighlightStore(document), RectMerger(scale=2.0)


def test_layers_merge_runs_and_skip_annotated_visited_words() -> None:
    document, store, merger = _fixture()
    store.apply_batch(TIER_ANNOTATE, [(1, 0), (1, 1)])
    for word in (0, 1, 2, 3):
        store.mark_visited(1, word)

    layers = compute_page_layers(document, store, merger, 1, cursor=Cursor(1, 3))
    assert len(layers.annotated) == 1
    assert len(layers.visited) == 1
    assert layers.visited[0].x == word_rect(document.word(1, 2), 2.0).x
    assert layers.cursor == merger.word_rects(document.words(1), [3])
    assert layers.anchor == [] and layers.drag_preview == []


def test_phrase_cursor_covers_sentence() -> None:
    document, store, merger = _fixture()
    layers = compute_page_layers(
        document, store, merger, 1, cursor=Cursor(1, 2), mode=MODE_PHRASE, anchor=Cursor(1, 5)
    )
    assert len(layers.cursor) == 1
    assert layers.cursor[0].x == word_rect(document.word(1, 2), 2.0).x
    assert layers.cursor[0].right == word_rect(document.word(1, 3), 2.0).right
    assert len(layers.anchor) == 1
    assert layers.to_dict()["page"] == 1


def test_empty_page_has_no_layers() -> None:
    document, store, merger = _fixture()
    layers = compute_page_layers(document, store, merger, 2, cursor=Cursor(2, 0))
    assert layers.is_empty()


def test_word_at_prefers_containing_box_then_nearest() -> None:
    words = _words()
    inside = word_rect(words[4], 2.0)
    assert word_at(words, inside.x + 1.0, inside.y + 1.0) == 4
    assert word_at(words, 10_000.0, 0.0) == 3
    assert word_at([], 0.0, 0.0) == -1
