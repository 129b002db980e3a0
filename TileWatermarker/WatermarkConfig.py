"""
Tiled PDF Watermark - Configuration & Infrastructure

This module holds everything the compositor treats as fixed policy:
the exception taxonomy, the geometry and appearance constants, and the
WatermarkSpec data class that is derived once per document.

Architecture:
1. Configuration: Constants, exceptions and the WatermarkSpec data class.
2. Geometry: TileGrid computes the per-page stamp lattice.
3. Rendering: ReportLab generation of tiled overlay pages (in-memory).
4. Processing: pypdf integration to merge overlays with the source PDF.
5. Preview: PyMuPDF rasterization of a watermarked page.
6. CLI: Command-line interface for standalone usage.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

# ==========================================
# Custom Exceptions
# ==========================================

class WatermarkError(Exception):
    """Base exception for all watermarking operations."""
    pass

class InvalidInputError(WatermarkError):
    """Raised when input parameters or files are invalid."""
    pass

class PDFProcessingError(WatermarkError):
    """Raised when the PDF processing/merging fails."""
    pass

class ParseError(PDFProcessingError):
    """Raised when the input bytes are not a readable PDF document."""
    pass

class EmptyDocumentError(WatermarkError):
    """Raised when the document has no pages to derive the font size from."""
    pass

class ResourceError(WatermarkError):
    """Raised when external resources (fonts, images) cannot be loaded."""
    pass

class FontEmbedError(ResourceError):
    """Raised when the watermark font cannot be resolved for the document."""
    pass

# ==========================================
# Policy Constants
# ==========================================

DEFAULT_WATERMARK_TEXT = "StudyBoards - Confidential"
WATERMARK_TEXT_ENV = "WATERMARK_TEXT"

FONT_NAME = "Helvetica-Bold"
FONT_SIZE_RATIO = 0.06          # Fraction of the first page's shorter side

ROTATION_DEGREES = -45.0
WATERMARK_COLOR: Tuple[float, float, float] = (0.7, 0.7, 0.7)
WATERMARK_OPACITY = 0.3

SPACING_MULTIPLIER = 0.7        # < 1.0 so neighbouring stamps overlap
LATTICE_ANGLE_DEGREES = 45.0
PADDING_RATIO = 0.1             # Fraction of the page's longer side

# A PDF header may be preceded by junk bytes; readers tolerate up to 1 KiB.
HEADER_SEARCH_WINDOW = 1024

# ==========================================
# Watermark Spec
# ==========================================

@dataclass(frozen=True)
class WatermarkSpec:
    """
    Appearance of every stamp in one document.

    Only `font_size` and the text metrics vary between documents; they are
    derived from the first page and then applied unchanged to all pages.
    """

    text: str
    font_size: float
    text_width: float
    color: Tuple[float, float, float] = WATERMARK_COLOR
    opacity: float = WATERMARK_OPACITY
    rotation_degrees: float = ROTATION_DEGREES
    font_name: str = FONT_NAME

    def __post_init__(self):
        """Validates configuration after initialization."""
        self._validate_opacity()
        self._validate_color()
        self._validate_metrics()

    def _validate_opacity(self):
        """Ensures opacity is within 0.0 to 1.0 range."""
        if not (0.0 <= self.opacity <= 1.0):
            raise InvalidInputError(f"Opacity must be between 0.0 and 1.0, got {self.opacity}")

    def _validate_color(self):
        if len(self.color) != 3 or not all(0.0 <= c <= 1.0 for c in self.color):
            raise InvalidInputError(f"Color must be three channels in [0.0, 1.0], got {self.color}")

    def _validate_metrics(self):
        if self.font_size < 0 or self.text_width < 0:
            raise InvalidInputError(
                f"Font size and text width must be non-negative, got {self.font_size} / {self.text_width}"
            )

    @property
    def text_height(self) -> float:
        # Single line of text, no wrapping.
        return self.font_size

    @staticmethod
    def font_size_for_page(width: float, height: float) -> float:
        return min(width, height) * FONT_SIZE_RATIO

# ==========================================
# Boundary Helpers
# ==========================================

def resolve_watermark_text(text: Optional[str] = None) -> str:
    """
    Resolves the watermark string at the caller boundary.

    Order: explicit non-empty text, then the WATERMARK_TEXT environment
    variable, then DEFAULT_WATERMARK_TEXT. The compositor itself never
    falls back; it always receives the resolved string.
    """
    if text:
        return text
    return os.getenv(WATERMARK_TEXT_ENV) or DEFAULT_WATERMARK_TEXT
