import math
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .WatermarkConfig import LATTICE_ANGLE_DEGREES, PADDING_RATIO, SPACING_MULTIPLIER

# ==========================================
# Tile Grid
# ==========================================

@dataclass(frozen=True)
class TileGrid:
    """
    Repetition lattice of stamp anchors for one page.

    Built by `TileGrid.for_page` from the page's own dimensions and the
    document-wide text metrics. The lattice extends `padding` past every
    page edge, and iteration starts one row/column early and ends one late,
    so rotated stamps leave no blank corners.
    """

    cols: int
    rows: int
    horizontal_spacing: float
    vertical_spacing: float
    padding: float
    page_width: float
    page_height: float
    text_width: float
    text_height: float

    @classmethod
    def for_page(cls, page_width: float, page_height: float,
                 text_width: float, text_height: float) -> "TileGrid":
        diagonal_spacing = math.hypot(text_width, text_height) * SPACING_MULTIPLIER

        # Independent axis projections of the 45 degree lattice.
        angle = math.radians(LATTICE_ANGLE_DEGREES)
        horizontal_spacing = diagonal_spacing * math.cos(angle)
        vertical_spacing = diagonal_spacing * math.sin(angle)

        padding = max(page_width, page_height) * PADDING_RATIO

        if horizontal_spacing <= 0 or vertical_spacing <= 0:
            cols = rows = 0
        else:
            cols = math.ceil((page_width + padding * 2) / horizontal_spacing) + 1
            rows = math.ceil((page_height + padding * 2) / vertical_spacing) + 1

        return cls(
            cols=cols,
            rows=rows,
            horizontal_spacing=horizontal_spacing,
            vertical_spacing=vertical_spacing,
            padding=padding,
            page_width=page_width,
            page_height=page_height,
            text_width=text_width,
            text_height=text_height,
        )

    @property
    def is_degenerate(self) -> bool:
        """True when the spacing collapsed to zero (zero font size)."""
        return self.horizontal_spacing <= 0 or self.vertical_spacing <= 0

    def lattice_points(self) -> Iterator[Tuple[float, float]]:
        """Yields every lattice point (x, y), visible or not."""
        if self.is_degenerate:
            return
        for row in range(-1, self.rows + 1):
            for col in range(-1, self.cols + 1):
                x = col * self.horizontal_spacing - self.padding
                y = row * self.vertical_spacing - self.padding
                yield x, y

    def is_visible(self, x: float, y: float) -> bool:
        """
        Conservative axis-aligned test against the padded page rectangle.

        Uses the unrotated text box, so it may accept a stamp whose rotated
        footprint misses the page, but never rejects one that could show.
        """
        p = self.padding
        return (
            x + self.text_width > -p
            and x < self.page_width + p
            and y + self.text_height > -p
            and y < self.page_height + p
        )

    def anchors(self) -> Iterator[Tuple[float, float]]:
        """
        Yields the drawing origin of every visible stamp.

        The origin is the lattice point shifted back by half the text box,
        and it is also the point the stamp is rotated about.
        """
        half_w = self.text_width / 2
        half_h = self.text_height / 2
        for x, y in self.lattice_points():
            if self.is_visible(x, y):
                yield x - half_w, y - half_h

    def anchor_list(self) -> List[Tuple[float, float]]:
        return list(self.anchors())
