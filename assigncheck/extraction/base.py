"""Text extractor interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class UploadedDocument:
    content: bytes = field(repr=False)
    media_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


class TextExtractor(Protocol):
    """Plain-text extractor for one document format."""

    name: str
    media_types: tuple[str, ...]

    def extract(self, content: bytes) -> str:
        """Return the plain text of a document buffer."""


def normalize_media_type(media_type: str | None) -> str:
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()
