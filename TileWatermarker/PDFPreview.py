"""
Page previews for watermarked documents.

Rasterizes a page with PyMuPDF so callers can show what a watermarked
page looks like without a PDF viewer. The watermark itself always comes
from `PDFProcessor`; this module only renders.
"""

# Check for required libraries at import time
try:
    import fitz  # PyMuPDF
except ImportError as e:
    raise ImportError(f"Missing required dependency: {e}. Please install 'pymupdf'.")

from .PDFProcessor import PdfBytes, add_watermark_to_pdf
from .WatermarkConfig import InvalidInputError, ParseError


def render_page_png(pdf_bytes: PdfBytes, page_index: int = 0, zoom: float = 1.0) -> bytes:
    """Renders one page of `pdf_bytes` to PNG bytes at `zoom` x 72 dpi."""
    if zoom <= 0:
        raise InvalidInputError(f"Zoom must be positive, got {zoom}")

    try:
        doc = fitz.open(stream=bytes(pdf_bytes), filetype="pdf")
    except Exception as e:
        raise ParseError(f"Failed to open PDF for preview: {e}") from e

    with doc:
        total_pages = doc.page_count
        if not (0 <= page_index < total_pages):
            raise InvalidInputError(f"Page index {page_index} out of range for {total_pages} pages")

        page = doc.load_page(page_index)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        return pix.tobytes("png")


def preview_watermark(pdf_bytes: PdfBytes, watermark_text: str,
                      page_index: int = 0, zoom: float = 1.0) -> bytes:
    """Watermarks the document and renders one page of the result."""
    return render_page_png(add_watermark_to_pdf(pdf_bytes, watermark_text), page_index, zoom)
