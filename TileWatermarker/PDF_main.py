import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .PDFPreview import render_page_png
from .PDFProcessor import PDFProcessor, WatermarkResult
from .WatermarkConfig import InvalidInputError, WatermarkError, resolve_watermark_text

# ==========================================
# CLI & Execution
# ==========================================

def setup_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def run_watermark_service(
    input_pdf: str,
    output_pdf: str,
    watermark_text: Optional[str] = None,
    preview_png: Optional[str] = None,
    preview_page: int = 0,
) -> WatermarkResult:
    """
    High-level entry point: reads a PDF file, tiles the watermark over every
    page and writes the result (plus an optional PNG preview of one page).
    """
    input_path = Path(input_pdf)
    output_path = Path(output_pdf)

    # 1. Load source
    if not input_path.is_file():
        raise InvalidInputError(f"Input file not found: {input_path}")
    pdf_bytes = input_path.read_bytes()

    # 2. Resolve the text once, here at the boundary
    text = resolve_watermark_text(watermark_text)

    # 3. Process
    result = PDFProcessor(pdf_bytes, text).process()

    # 4. Save
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.pdf_bytes)

    if preview_png:
        preview_path = Path(preview_png)
        preview_path.parent.mkdir(parents=True, exist_ok=True)
        preview_path.write_bytes(render_page_png(result.pdf_bytes, preview_page))

    return result


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Tile a diagonal text watermark over every page of a PDF",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Files
    parser.add_argument("-i", "--input", required=True, help="Path to source PDF")
    parser.add_argument("-o", "--output", required=True, help="Path to save watermarked PDF")

    # Watermark Content
    parser.add_argument("-t", "--text", help="Watermark text (defaults to $WATERMARK_TEXT, then the built-in text)")

    # Preview
    parser.add_argument("--preview", help="Also write a PNG preview of one watermarked page")
    parser.add_argument("--preview-page", type=int, default=0, help="0-based page index for --preview")

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        result = run_watermark_service(
            input_pdf=args.input,
            output_pdf=args.output,
            watermark_text=args.text,
            preview_png=args.preview,
            preview_page=args.preview_page,
        )
    except WatermarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Watermarked {result.page_count} pages ({result.stamp_count} stamps).")
    print(f"Successfully saved to: {args.output}")


if __name__ == "__main__":
    main()
