"""PyMuPDF adapter producing raw text runs for the word segmenter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from readmark.core.errors import ExtractionError
from readmark.core.types import RawTextRun
from readmark.utils.logger import logger


@dataclass
class PageText:
    """Extraction result for one page (1-based ``page``)."""

    page: int
    height: float
    runs: List[RawTextRun] = field(default_factory=list)
    links: List[Dict[str, object]] = field(default_factory=list)


def _import_fitz():
    try:
        import fitz  # type: ignore[import]
    except ImportError as exc:
        raise ExtractionError(
            "PyMuPDF (pymupdf) is required to extract text from PDF files."
        ) from exc
    return fitz


def runs_from_pymupdf_page(page) -> List[RawTextRun]:
    """Read text spans from a PyMuPDF page in reading order.

    Each span becomes one run positioned at its baseline origin. The line
    direction vector is turned into the skew pair so rotated text is
    filtered out by the segmenter.
    """
    payload = page.get_text("dict") or {}
    runs: List[RawTextRun] = []
    for block in payload.get("blocks", []):
        if block.get("type", 0) != 0:
            continue
        for line in block.get("lines", []):
            cos_, sin_ = (float(v) for v in line.get("dir", (1.0, 0.0)))
            # Upside-down lines have no shear but still are not upright.
            skew = (sin_, -sin_) if cos_ > 0 else (1.0, -1.0)
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text:
                    continue
                x0, _, x1, _ = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
                origin = span.get("origin", (x0, 0.0))
                runs.append(
                    RawTextRun(
                        text=text,
                        x=float(origin[0]),
                        baseline_y=float(origin[1]),
                        glyph_height=float(span.get("size", 0.0)),
                        width=float(x1) - float(x0),
                        skew=skew,
                    )
                )
    return runs


def resolve_page_links(page) -> List[Dict[str, object]]:
    """Collect link targets on a page; failures never block text parsing."""
    links: List[Dict[str, object]] = []
    try:
        for link in page.get_links() or []:
            rect = link.get("from")
            target_page: Optional[int] = None
            if link.get("page") is not None and int(link["page"]) >= 0:
                target_page = int(link["page"]) + 1
            links.append(
                {
                    "rect": tuple(float(v) for v in rect) if rect is not None else None,
                    "page": target_page,
                    "uri": link.get("uri"),
                }
            )
    except Exception as exc:
        logger.debug("Could not resolve links on page: %s", exc)
    return links


def load_document_runs(path) -> Iterator[PageText]:
    """Yield extracted text for every page of a PDF file."""
    fitz = _import_fitz()
    path = Path(path)
    if not path.is_file():
        raise ExtractionError(f"PDF file not found: {path}")
    with fitz.open(str(path)) as doc:
        logger.info("Extracting text from %s (%d pages)", path.name, doc.page_count)
        for number, page in enumerate(doc, start=1):
            yield PageText(
                page=number,
                height=float(page.rect.height),
                runs=runs_from_pymupdf_page(page),
                links=resolve_page_links(page),
            )
