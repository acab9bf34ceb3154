import argparse

from readmark.core.errors import ReadingError
from readmark.io.pdf_text import load_document_runs
from readmark.reading.session import ReaderSession
from readmark.utils.config import load_reader_settings, settings_from_yaml
from readmark.utils.logger import logger
from readmark.version import get_version


def parse_args(argv=None):
    arg_builder = argparse.ArgumentParser(
        description="Segment a PDF into reading sections and sentences"
    )
    arg_builder.add_argument("--pdf", type=str, required=True,
                             help="path to the PDF file to segment"
                             )
    arg_builder.add_argument("--page", type=int, default=None,
                             help="only report this page (1-based)"
                             )
    arg_builder.add_argument("--sections", action="store_true",
                             help="print the text of every section"
                             )
    arg_builder.add_argument("--config", type=str, default=None,
                             help="YAML file with a 'reader' settings block"
                             )
    arg_builder.add_argument("--version", action="version",
                             version=f"readmark {get_version()}"
                             )
    args = vars(arg_builder.parse_args(argv))
    return args


def main(argv=None):
    args = parse_args(argv)
    if args["config"]:
        settings = settings_from_yaml(args["config"])
    else:
        settings = load_reader_settings()
    session = ReaderSession(settings=settings)

    try:
        for page_text in load_document_runs(args["pdf"]):
            if args["page"] is not None and page_text.page != args["page"]:
                continue
            words = session.load_page_runs(
                page_text.page, page_text.runs, page_height=page_text.height
            )
            sections = session.document.index(page_text.page).section_order
            sentences = {w.sentence_index for w in words}
            print(
                f"page {page_text.page}: {len(words)} words, "
                f"{len(sections)} sections, {len(sentences)} sentences, "
                f"{len(page_text.links)} links"
            )
            if args["sections"]:
                for section in sections:
                    text = " ".join(
                        w.text for w in words if w.section_index == section
                    )
                    print(f"  [{section}] {text}")
    except ReadingError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
