"""
Geometry tests for TileGrid.

These run without any PDF: the grid is pure arithmetic over page size
and text metrics.
"""

import math

import pytest

from TileWatermarker.TileGrid import TileGrid

LETTER = (612.0, 792.0)
FONT_SIZE = 36.72
TEXT_WIDTH = 250.0


def _grid(width=LETTER[0], height=LETTER[1], text_width=TEXT_WIDTH, text_height=FONT_SIZE):
    return TileGrid.for_page(width, height, text_width, text_height)


def test_spacing_is_overlapping_diagonal_projected_on_both_axes():
    grid = _grid()
    diagonal = math.sqrt(TEXT_WIDTH ** 2 + FONT_SIZE ** 2) * 0.7
    assert grid.horizontal_spacing == pytest.approx(diagonal * math.cos(math.pi / 4))
    assert grid.vertical_spacing == pytest.approx(diagonal * math.sin(math.pi / 4))


def test_padding_and_extents_follow_page_size():
    grid = _grid()
    assert grid.padding == pytest.approx(79.2)
    assert grid.cols == math.ceil((612 + 2 * 79.2) / grid.horizontal_spacing) + 1
    assert grid.rows == math.ceil((792 + 2 * 79.2) / grid.vertical_spacing) + 1


def test_lattice_starts_one_step_before_padding_and_ends_one_past():
    grid = _grid()
    points = list(grid.lattice_points())
    assert len(points) == (grid.cols + 2) * (grid.rows + 2)
    first_x, first_y = points[0]
    assert first_x == pytest.approx(-grid.horizontal_spacing - grid.padding)
    assert first_y == pytest.approx(-grid.vertical_spacing - grid.padding)
    last_x, last_y = points[-1]
    assert last_x == pytest.approx(grid.cols * grid.horizontal_spacing - grid.padding)
    assert last_y == pytest.approx(grid.rows * grid.vertical_spacing - grid.padding)


def test_visibility_rejects_points_beyond_padded_page():
    grid = _grid()
    p = grid.padding
    assert grid.is_visible(0, 0)
    assert not grid.is_visible(612 + p + 1, 0)
    assert not grid.is_visible(0, 792 + p + 1)
    assert not grid.is_visible(-p - TEXT_WIDTH - 1, 0)
    assert not grid.is_visible(0, -p - FONT_SIZE - 1)


def test_anchors_are_shifted_back_by_half_the_text_box():
    grid = _grid()
    visible = [pt for pt in grid.lattice_points() if grid.is_visible(*pt)]
    anchors = grid.anchor_list()
    assert len(anchors) == len(visible) > 0
    for (x, y), (ax, ay) in zip(visible, anchors):
        assert ax == pytest.approx(x - TEXT_WIDTH / 2)
        assert ay == pytest.approx(y - FONT_SIZE / 2)


@pytest.mark.parametrize("size", [(612, 792), (792, 612), (200, 1200), (1500, 120), (10, 10)])
def test_no_gap_rectangle_inside_page(size):
    width, height = size
    text_height = min(width, height) * 0.06
    grid = _grid(width, height, text_width=text_height * 6, text_height=text_height)
    hs, vs = grid.horizontal_spacing, grid.vertical_spacing
    points = [
        (ax + grid.text_width / 2, ay + grid.text_height / 2)
        for ax, ay in grid.anchors()
    ]
    assert points

    steps_x = max(1, int(width // hs))
    steps_y = max(1, int(height // vs))
    for i in range(steps_x):
        for j in range(steps_y):
            left = min(i * hs, width - hs) if width >= hs else 0
            bottom = min(j * vs, height - vs) if height >= vs else 0

            def distance(px, py):
                dx = max(left - px, 0, px - (left + hs))
                dy = max(bottom - py, 0, py - (bottom + vs))
                return math.hypot(dx, dy)

            assert any(distance(px, py) <= grid.padding for px, py in points)


def test_larger_page_gets_more_stamps():
    small = _grid(612, 792)
    large = _grid(1224, 1584)
    assert large.cols > small.cols
    assert large.rows > small.rows
    assert len(large.anchor_list()) > len(small.anchor_list())


def test_empty_text_packs_anchors_at_text_height():
    grid = _grid(text_width=0.0)
    assert grid.horizontal_spacing == pytest.approx(FONT_SIZE * 0.7 * math.cos(math.pi / 4))
    assert not grid.is_degenerate
    assert len(grid.anchor_list()) > len(_grid().anchor_list())


def test_zero_font_size_yields_empty_grid():
    grid = _grid(text_width=0.0, text_height=0.0)
    assert grid.is_degenerate
    assert grid.cols == grid.rows == 0
    assert grid.anchor_list() == []


def test_every_positive_page_gets_at_least_one_stamp():
    for width, height in [(1, 1), (20, 700), (5000, 5000)]:
        text_height = min(width, height) * 0.06
        grid = _grid(width, height, text_width=text_height * 3, text_height=text_height)
        assert len(grid.anchor_list()) >= 1
