from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _reset_flow_store() -> None:
    from assigncheck.flow import reset_flow_store

    reset_flow_store()
    yield
    reset_flow_store()


def make_pdf_bytes(pages: list[list[str]], **save_options) -> bytes:
    import fitz

    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        y = 72
        for line in lines:
            page.insert_text((72, y), line)
            y += 24
    data = doc.tobytes(**save_options)
    doc.close()
    return data


def make_docx_bytes(paragraphs: list[str]) -> bytes:
    from docx import Document

    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def pdf_bytes():
    return make_pdf_bytes


@pytest.fixture
def docx_bytes():
    return make_docx_bytes
