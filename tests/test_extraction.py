from __future__ import annotations

import io

import mammoth
import pytest

from assigncheck.errors import DocumentParseError, UnsupportedFileTypeError
from assigncheck.extraction.base import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE, UploadedDocument
from assigncheck.extraction.dispatch import extract_text, get_text_extractor
from assigncheck.extraction.pdf import PdfTextExtractor, join_page_items
from assigncheck.extraction.word import DocxTextExtractor


@pytest.mark.parametrize("media_type", ["text/plain", "application/msword", "image/png", "", None])
def test_unsupported_type_fails_before_any_parser_runs(monkeypatch, media_type) -> None:
    def _fail(self, content: bytes) -> str:
        raise AssertionError("parser must not be called")

    monkeypatch.setattr(DocxTextExtractor, "extract", _fail)
    monkeypatch.setattr(PdfTextExtractor, "extract", _fail)

    with pytest.raises(UnsupportedFileTypeError) as excinfo:
        extract_text(UploadedDocument(content=b"hello", media_type=media_type, filename="notes.txt"))

    assert ".docx" in str(excinfo.value)
    assert ".pdf" in str(excinfo.value)


def test_dispatch_ignores_media_type_parameters_and_case() -> None:
    assert isinstance(get_text_extractor("Application/PDF; charset=binary"), PdfTextExtractor)
    assert isinstance(get_text_extractor(DOCX_MEDIA_TYPE.upper()), DocxTextExtractor)


def test_join_page_items_spaces_items_and_concatenates_pages() -> None:
    assert join_page_items([["Intro", "text."], ["Body", "text."]]) == "Intro text.Body text."
    assert join_page_items([]) == ""
    assert join_page_items([[], ["only"]]) == "only"


def test_pdf_pages_are_concatenated_in_order(pdf_bytes) -> None:
    data = pdf_bytes([["Intro text."], ["Body text."]])

    text = extract_text(UploadedDocument(content=data, media_type=PDF_MEDIA_TYPE, filename="two-pages.pdf"))

    assert text == "Intro text.Body text."


def test_pdf_items_within_a_page_are_space_joined(pdf_bytes) -> None:
    data = pdf_bytes([["P1 Describe the network", "P2 Explain protocols"]])

    text = PdfTextExtractor().extract(data)

    assert text == "P1 Describe the network P2 Explain protocols"


def test_corrupt_pdf_raises_parse_error() -> None:
    with pytest.raises(DocumentParseError) as excinfo:
        PdfTextExtractor().extract(b"definitely not a pdf")

    assert str(excinfo.value).startswith("Could not read the PDF")


def test_encrypted_pdf_raises_parse_error(pdf_bytes) -> None:
    import fitz

    data = pdf_bytes(
        [["secret"]],
        encryption=fitz.PDF_ENCRYPT_AES_256,
        owner_pw="owner",
        user_pw="user",
    )

    with pytest.raises(DocumentParseError) as excinfo:
        PdfTextExtractor().extract(data)

    assert "password" in str(excinfo.value)


def test_docx_text_is_exactly_mammoth_raw_text(docx_bytes) -> None:
    data = docx_bytes(["P1 Describe the network layout.", "M1 Compare two topologies."])

    text = extract_text(UploadedDocument(content=data, media_type=DOCX_MEDIA_TYPE, filename="criteria.docx"))

    assert text == mammoth.extract_raw_text(io.BytesIO(data)).value
    assert "P1 Describe the network layout." in text
    assert "M1 Compare two topologies." in text


def test_corrupt_docx_preserves_library_message() -> None:
    with pytest.raises(DocumentParseError) as excinfo:
        DocxTextExtractor().extract(b"not a zip archive")

    assert str(excinfo.value).startswith("Could not read the Word document: ")
    assert excinfo.value.__cause__ is not None
    assert str(excinfo.value.__cause__) in str(excinfo.value)


def test_uploaded_document_reports_size() -> None:
    document = UploadedDocument(content=b"12345", media_type=PDF_MEDIA_TYPE, filename="a.pdf")

    assert document.size == 5
    assert "12345" not in repr(document)
