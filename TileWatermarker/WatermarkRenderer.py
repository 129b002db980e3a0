import io
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Check for required libraries at import time
try:
    from reportlab.pdfbase import pdfmetrics
    from reportlab.pdfgen import canvas
    from pypdf import PdfReader, PageObject
except ImportError as e:
    raise ImportError(f"Missing required dependency: {e}. Please install 'reportlab' and 'pypdf'.")

from .TileGrid import TileGrid
from .WatermarkConfig import FONT_NAME, FontEmbedError, InvalidInputError, WatermarkSpec

logger = logging.getLogger(__name__)

# ==========================================
# Font Resolution
# ==========================================

def load_font(font_name: str = FONT_NAME):
    """
    Resolves the ReportLab font face used for measuring and drawing stamps.

    There is no fallback face: a missing font aborts the whole document.
    """
    try:
        return pdfmetrics.getFont(font_name)
    except Exception as e:
        raise FontEmbedError(f"Cannot embed watermark font '{font_name}': {e}") from e


def check_encodable(text: str) -> None:
    """
    Rejects text the standard Type-1 face cannot draw.

    Helvetica-Bold is a WinAnsi font; characters outside that encoding
    would be dropped or drawn as the wrong glyphs.
    """
    try:
        text.encode("cp1252")
    except UnicodeEncodeError as e:
        raise InvalidInputError(
            f"Watermark text has characters {FONT_NAME} cannot encode: {text[e.start:e.end]!r}"
        ) from e

# ==========================================
# Watermark Renderer
# ==========================================

@dataclass(frozen=True)
class Overlay:
    """A rendered stamp layer for one page size."""
    grid: TileGrid
    stamp_count: int
    page: Optional[PageObject]


class WatermarkRenderer:
    """
    Handles the generation of tiled watermark overlay pages using ReportLab.

    One renderer serves exactly one document:
    1. The font is resolved once, in `for_document`.
    2. The WatermarkSpec (font size, text metrics) is derived from the first page.
    3. Each distinct page size gets its own TileGrid and overlay, cached so
       that pages sharing a size are not re-tiled.
    """

    def __init__(self, spec: WatermarkSpec, font=None):
        self.spec = spec
        self.font = font if font is not None else load_font(spec.font_name)
        # Cache key: (width, height), Value: Overlay
        self._cache: Dict[Tuple[float, float], Overlay] = {}

    @classmethod
    def for_document(cls, text: str, first_width: float, first_height: float) -> "WatermarkRenderer":
        """Builds the renderer from the first page's dimensions."""
        check_encodable(text)
        font = load_font(FONT_NAME)
        font_size = WatermarkSpec.font_size_for_page(first_width, first_height)
        text_width = font.stringWidth(text, font_size)
        spec = WatermarkSpec(text=text, font_size=font_size, text_width=text_width, font_name=FONT_NAME)
        logger.debug("Watermark font size %.2f, text width %.2f", font_size, text_width)
        return cls(spec, font=font)

    def get_overlay(self, page_width: float, page_height: float) -> Overlay:
        """
        Retrieves the overlay for the specified dimensions.
        Returns a cached object if available, otherwise renders a new one.
        """
        # Round dimensions to avoid cache misses on negligible float differences
        key = (round(page_width, 2), round(page_height, 2))

        if key in self._cache:
            logger.debug("Reusing overlay for page size %s", key)
        else:
            self._cache[key] = self._build_overlay(page_width, page_height)

        return self._cache[key]

    def _build_overlay(self, width: float, height: float) -> Overlay:
        grid = TileGrid.for_page(width, height, self.spec.text_width, self.spec.text_height)
        anchors = grid.anchor_list()

        if grid.is_degenerate:
            logger.warning("Font size is zero for %.2fx%.2f page; no stamps drawn", width, height)
            return Overlay(grid=grid, stamp_count=0, page=None)

        logger.debug(
            "Tiling %.2fx%.2f page: %d cols x %d rows, %d visible stamps",
            width, height, grid.cols, grid.rows, len(anchors),
        )
        page = self._render_overlay_page(width, height, anchors)
        return Overlay(grid=grid, stamp_count=len(anchors), page=page)

    def _render_overlay_page(self, width: float, height: float, anchors) -> PageObject:
        """Internal method to draw every stamp on a fresh PDF page."""
        packet = io.BytesIO()

        # invariant=1 drops the creation date and random ID so output is reproducible
        c = canvas.Canvas(packet, pagesize=(width, height), invariant=1)

        c.setFont(self.spec.font_name, self.spec.font_size)
        c.setFillColorRGB(*self.spec.color)
        c.setFillAlpha(self.spec.opacity)

        for x, y in anchors:
            # Rotate about the stamp's own origin
            c.saveState()
            c.translate(x, y)
            c.rotate(self.spec.rotation_degrees)
            c.drawString(0, 0, self.spec.text)
            c.restoreState()

        c.save()
        packet.seek(0)

        # Create a pypdf PageObject from the generated stream
        reader = PdfReader(packet)
        return reader.pages[0]
