"""PDF text extraction backed by PyMuPDF."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

import fitz  # PyMuPDF

from assigncheck.errors import DocumentParseError
from assigncheck.extraction.base import PDF_MEDIA_TYPE, TextExtractor


def join_page_items(pages: Iterable[Sequence[str]]) -> str:
    """Join text items with single spaces per page; pages are concatenated unmarked."""
    return "".join(" ".join(items) for items in pages)


def page_text_items(page: "fitz.Page") -> list[str]:
    """Return the text spans of a page in reading order."""
    items: list[str] = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                items.append(span.get("text", ""))
    return items


class PdfTextExtractor(TextExtractor):
    name = "pdf"
    media_types = (PDF_MEDIA_TYPE,)

    def extract(self, content: bytes) -> str:
        try:
            with fitz.open(stream=content, filetype="pdf") as doc:
                if doc.needs_pass:
                    raise DocumentParseError("Could not read the PDF: the document is password protected.")
                return join_page_items(self._iter_pages(doc))
        except DocumentParseError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise DocumentParseError(f"Could not read the PDF: {exc}") from exc

    def _iter_pages(self, doc: "fitz.Document") -> Iterator[list[str]]:
        for page_number in range(1, doc.page_count + 1):
            yield page_text_items(doc.load_page(page_number - 1))
