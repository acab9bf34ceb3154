from __future__ import annotations

import pytest

from readmark import main as cli
from readmark.core.errors import ExtractionError
from readmark.core.types import RawTextRun
from readmark.io.pdf_text import PageText
from readmark.utils.config import ReaderSettings


def _pages(path):
    run = RawTextRun(text="One two.", x=10.0, baseline_y=300.0, glyph_height=10.0, width=80.0)
    yield PageText(page=1, height=800.0, runs=[run], links=[])
    yield PageText(page=2, height=800.0, runs=[], links=[])


def test_main_prints_page_summaries(monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "load_document_runs", _pages)
    monkeypatch.setattr(cli, "load_reader_settings", ReaderSettings)

    assert cli.main(["--pdf", "book.pdf", "--sections"]) == 0
    out = capsys.readouterr().out
    assert "page 1: 2 words, 1 sections, 1 sentences, 0 links" in out
    assert "[0] One two." in out
    assert "page 2: 0 words" in out


def test_main_single_page(monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli, "load_document_runs", _pages)
    monkeypatch.setattr(cli, "load_reader_settings", ReaderSettings)

    cli.main(["--pdf", "book.pdf", "--page", "2"])
    out = capsys.readouterr().out
    assert "page 1" not in out
    assert "page 2" in out


def test_main_reports_extraction_errors(monkeypatch) -> None:
    def _fail(path):
        raise ExtractionError("no pymupdf")

    monkeypatch.setattr(cli, "load_document_runs", _fail)
    monkeypatch.setattr(cli, "load_reader_settings", ReaderSettings)
    assert cli.main(["--pdf", "book.pdf"]) == 1


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["--version"])
    assert capsys.readouterr().out.startswith("readmark ")
