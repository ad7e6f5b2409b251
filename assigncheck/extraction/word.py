"""Word (.docx) text extraction backed by mammoth."""

from __future__ import annotations

import io

import mammoth

from assigncheck.errors import DocumentParseError
from assigncheck.extraction.base import DOCX_MEDIA_TYPE, TextExtractor


class DocxTextExtractor(TextExtractor):
    name = "docx"
    media_types = (DOCX_MEDIA_TYPE,)

    def extract(self, content: bytes) -> str:
        try:
            result = mammoth.extract_raw_text(io.BytesIO(content))
        except Exception as exc:  # noqa: BLE001
            raise DocumentParseError(f"Could not read the Word document: {exc}") from exc
        return result.value
