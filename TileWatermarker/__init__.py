from .PDFProcessor import PageReport, PDFProcessor, WatermarkResult, add_watermark_to_pdf
from .TileGrid import TileGrid
from .WatermarkConfig import (
    DEFAULT_WATERMARK_TEXT,
    EmptyDocumentError,
    FontEmbedError,
    InvalidInputError,
    ParseError,
    PDFProcessingError,
    ResourceError,
    WatermarkError,
    WatermarkSpec,
    resolve_watermark_text,
)

__all__ = [
    "DEFAULT_WATERMARK_TEXT",
    "EmptyDocumentError",
    "FontEmbedError",
    "InvalidInputError",
    "PageReport",
    "ParseError",
    "PDFProcessingError",
    "PDFProcessor",
    "ResourceError",
    "TileGrid",
    "WatermarkError",
    "WatermarkResult",
    "WatermarkSpec",
    "add_watermark_to_pdf",
    "resolve_watermark_text",
]
