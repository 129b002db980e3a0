import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

# Check for required libraries at import time
try:
    from pypdf import PageObject, PasswordType, PdfReader, PdfWriter, Transformation
except ImportError as e:
    raise ImportError(f"Missing required dependency: {e}. Please install 'pypdf'.")

from .TileGrid import TileGrid
from .WatermarkConfig import (
    HEADER_SEARCH_WINDOW,
    EmptyDocumentError,
    InvalidInputError,
    ParseError,
    PDFProcessingError,
    WatermarkError,
    WatermarkSpec,
)
from .WatermarkRenderer import WatermarkRenderer

logger = logging.getLogger(__name__)

PdfBytes = Union[bytes, bytearray, memoryview]

# ==========================================
# Results
# ==========================================

@dataclass(frozen=True)
class PageReport:
    """What was stamped on one page."""
    index: int
    width: float
    height: float
    grid: TileGrid
    stamp_count: int


@dataclass(frozen=True)
class WatermarkResult:
    """Watermarked document bytes plus the geometry used to produce them."""
    pdf_bytes: bytes
    spec: WatermarkSpec
    pages: Tuple[PageReport, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def stamp_count(self) -> int:
        return sum(p.stamp_count for p in self.pages)

# ==========================================
# PDF Processor
# ==========================================

class PDFProcessor:
    """
    Manages the workflow of loading, stamping, and serializing one PDF.

    Responsibilities:
    1. Parsing the input bytes (rejecting anything that is not a PDF).
    2. Handling PDF Encryption (empty user password only).
    3. Deriving the document-wide WatermarkSpec from the first page.
    4. Iterating pages and merging the tiled overlay via WatermarkRenderer.

    A processor is single-use: it owns its reader, writer and overlay cache,
    and nothing is shared with other calls.
    """

    def __init__(self, pdf_bytes: PdfBytes, watermark_text: str):
        if not isinstance(pdf_bytes, (bytes, bytearray, memoryview)):
            raise InvalidInputError(f"PDF input must be bytes, got {type(pdf_bytes).__name__}")
        if not isinstance(watermark_text, str):
            raise InvalidInputError(f"Watermark text must be a string, got {type(watermark_text).__name__}")

        # Private copy; the caller's buffer is never touched again.
        self.data = bytes(pdf_bytes)
        self.text = watermark_text
        self.reader: Optional[PdfReader] = None
        self.writer: Optional[PdfWriter] = None
        self.renderer: Optional[WatermarkRenderer] = None

    def load_pdf(self):
        """
        Parses the PDF and handles decryption if necessary.

        Only the empty user password is tried. A file that opens with it
        (owner-password restrictions only) is written back unencrypted, so
        its permission restrictions are removed from the output.

        The writer is cloned from the whole document, so outlines, page
        labels, forms and named destinations are carried over.
        """
        if b"%PDF-" not in self.data[:HEADER_SEARCH_WINDOW]:
            raise ParseError("Input is not a PDF document (missing %PDF- header).")

        try:
            self.reader = PdfReader(io.BytesIO(self.data))

            # Handle Encryption
            if self.reader.is_encrypted:
                # Attempt empty password (common for some restricted PDFs)
                if self.reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                    raise ParseError("PDF is encrypted with a user password.")
                logger.warning("PDF opened with empty password; output drops its permission restrictions")

            # Walks the page tree, so broken trees fail here rather than mid-loop
            page_count = len(self.reader.pages)

            self.writer = PdfWriter(clone_from=self.reader)

        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"Failed to load PDF: {e}") from e

        logger.debug("Loaded PDF with %d pages (%d bytes)", page_count, len(self.data))

    def process(self) -> WatermarkResult:
        """
        Main execution loop.

        Returns the watermarked bytes together with the per-page geometry.
        Any failure aborts the whole document; no partial output is produced.
        """
        if self.reader is None:
            self.load_pdf()

        pages = self.writer.pages
        total_pages = len(pages)
        if total_pages == 0:
            raise EmptyDocumentError("PDF has no pages; cannot derive the watermark font size.")

        first_width, first_height = self._page_size(pages[0])
        self.renderer = WatermarkRenderer.for_document(self.text, first_width, first_height)

        reports: List[PageReport] = []
        try:
            for i, page in enumerate(pages):
                reports.append(self._apply_watermark_to_page(i, page))

        except WatermarkError:
            raise
        except Exception as e:
            raise PDFProcessingError(f"Error during processing loop: {e}") from e

        result = WatermarkResult(
            pdf_bytes=self.save_pdf(),
            spec=self.renderer.spec,
            pages=tuple(reports),
        )
        logger.info(
            "Watermarked %d pages with %d stamps (font size %.2f)",
            result.page_count, result.stamp_count, result.spec.font_size,
        )
        return result

    def _apply_watermark_to_page(self, index: int, page: PageObject) -> PageReport:
        """Merges the tiled overlay onto a single PDF page."""
        width, height = self._page_size(page)
        overlay = self.renderer.get_overlay(width, height)

        if overlay.page is not None:
            left = float(page.mediabox.left)
            bottom = float(page.mediabox.bottom)
            if left or bottom:
                # Overlay is drawn from (0, 0); shift it onto the MediaBox origin
                page.merge_transformed_page(overlay.page, Transformation().translate(left, bottom))
            else:
                page.merge_page(overlay.page)

        return PageReport(
            index=index,
            width=width,
            height=height,
            grid=overlay.grid,
            stamp_count=overlay.stamp_count,
        )

    def save_pdf(self) -> bytes:
        """Serializes the result."""
        out = io.BytesIO()
        try:
            self.writer.write(out)
        except Exception as e:
            raise PDFProcessingError(f"Failed to serialize output PDF: {e}") from e
        return out.getvalue()

    @staticmethod
    def _page_size(page: PageObject) -> Tuple[float, float]:
        # float() cast ensures compatibility with reportlab
        return float(page.mediabox.width), float(page.mediabox.height)


def add_watermark_to_pdf(pdf_bytes: PdfBytes, watermark_text: str) -> bytes:
    """
    Covers every page of `pdf_bytes` with a tiling of `watermark_text`.

    `watermark_text` must already be resolved (see `resolve_watermark_text`);
    an empty string is accepted and produces empty stamps.

    Raises:
        ParseError: the bytes are not a readable PDF.
        EmptyDocumentError: the document has no pages.
        FontEmbedError: the watermark font is unavailable.
    """
    return PDFProcessor(pdf_bytes, watermark_text).process().pdf_bytes
