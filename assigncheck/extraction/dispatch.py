"""Text extractor factory/dispatcher."""

from __future__ import annotations

import logging
import time

from assigncheck.errors import UnsupportedFileTypeError
from assigncheck.extraction.base import TextExtractor, UploadedDocument, normalize_media_type
from assigncheck.extraction.pdf import PdfTextExtractor
from assigncheck.extraction.word import DocxTextExtractor

logger = logging.getLogger(__name__)

_EXTRACTORS: tuple[TextExtractor, ...] = (DocxTextExtractor(), PdfTextExtractor())

UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type. Please upload a .docx or .pdf file."


def get_text_extractor(media_type: str | None) -> TextExtractor:
    normalized = normalize_media_type(media_type)
    for extractor in _EXTRACTORS:
        if normalized in extractor.media_types:
            return extractor
    raise UnsupportedFileTypeError(UNSUPPORTED_TYPE_MESSAGE)


def extract_text(document: UploadedDocument) -> str:
    extractor = get_text_extractor(document.media_type)
    started = time.perf_counter()
    text = extractor.extract(document.content)
    logger.info(
        "document text extracted",
        extra={
            "stage": "extract_text",
            "extractor": extractor.name,
            "document_name": document.filename,
            "size_bytes": document.size,
            "text_chars": len(text),
            "extract_ms": int((time.perf_counter() - started) * 1000),
        },
    )
    return text
