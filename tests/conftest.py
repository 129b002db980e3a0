import io

import pytest
from pypdf import PdfReader, PdfWriter
from reportlab.pdfgen import canvas


# ----------------------------
# In-memory PDF builders
# ----------------------------

def make_blank_pdf(*sizes, metadata=None) -> bytes:
    """Builds a PDF with one blank page per (width, height) pair."""
    writer = PdfWriter()
    for width, height in sizes:
        writer.add_blank_page(width=width, height=height)
    if metadata:
        writer.add_metadata(metadata)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def make_text_pdf(width=612, height=792, text="Lecture notes") -> bytes:
    """Builds a one-page PDF with ordinary body text on it."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(width, height), invariant=1)
    c.setFont("Helvetica", 12)
    c.drawString(72, height - 72, text)
    c.save()
    return buf.getvalue()


def content_bytes(pdf_bytes: bytes, page_index: int = 0) -> bytes:
    """Decoded content stream of one page."""
    page = PdfReader(io.BytesIO(pdf_bytes)).pages[page_index]
    return page.get_contents().get_data()


def stamp_occurrences(pdf_bytes: bytes, text: str, page_index: int = 0) -> int:
    return content_bytes(pdf_bytes, page_index).count(f"({text})".encode("latin-1"))


# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture
def letter_pdf():
    return make_blank_pdf((612, 792))


@pytest.fixture
def mixed_size_pdf():
    # Page 2 is twice the size of pages 1 and 3
    return make_blank_pdf((612, 792), (1224, 1584), (612, 792))


@pytest.fixture
def text_pdf():
    return make_text_pdf()
