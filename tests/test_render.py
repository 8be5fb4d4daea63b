"""Tests for lifeclock_render: rectangle batching and seven-segment glyphs."""

from __future__ import annotations

import numpy as np
import pytest

from lifeclock import Grid
from lifeclock_render import (
    DIGITS,
    RenderCommand,
    batch,
    batch_grid,
    border_rectangles,
    digit_segments,
    draw_clock,
    draw_digit,
    segment_rectangle,
)


class TestBatch:
    def test_one_rectangle_per_live_cell(self) -> None:
        grid = Grid.new(20, 30, 0.3, np.random.default_rng(4))
        rects = batch(grid.live_cells(), 10, 0, 0)
        assert len(rects) == grid.population()

    def test_positions_use_col_for_x_and_row_for_y(self) -> None:
        rects = batch([(2, 5)], 10, 100, 200)
        assert rects == [RenderCommand(150, 220, 10, 10)]

    def test_empty(self) -> None:
        assert batch([], 10) == []

    def test_border_frames_field_from_outside(self) -> None:
        top, right, bottom, left = border_rectangles(3, 4, 10, 130, 200)
        assert top == RenderCommand(120, 190, 60, 10)
        assert right == RenderCommand(170, 190, 10, 50)
        assert bottom == RenderCommand(120, 230, 60, 10)
        assert left == RenderCommand(120, 190, 10, 50)

    def test_batch_grid_border_first(self) -> None:
        grid = Grid.from_cells([[1, 0], [0, 1]])
        rects = batch_grid(grid, 10, 50, 60, border=True)
        assert len(rects) == 6
        assert rects[:4] == border_rectangles(2, 2, 10, 50, 60)
        assert rects[4:] == [RenderCommand(50, 60, 10, 10), RenderCommand(60, 70, 10, 10)]

    def test_batch_grid_without_border(self) -> None:
        grid = Grid.from_cells([[1, 1]])
        assert len(batch_grid(grid, 4)) == 2


def lit(digit: int) -> set[int]:
    return {i for i, on in enumerate(digit_segments(digit)) if on}


class TestDigits:
    def test_table_shape(self) -> None:
        assert len(DIGITS) == 10
        assert all(len(row) == 7 for row in DIGITS)

    def test_eight_lights_everything(self) -> None:
        assert lit(8) == set(range(7))
        assert len(draw_digit(8, 0, 0, 10)) == 7

    def test_one_is_right_verticals(self) -> None:
        assert lit(1) == {1, 2}
        assert draw_digit(1, 0, 0, 10) == [
            RenderCommand(40, 0, 10, 50),
            RenderCommand(40, 40, 10, 50),
        ]

    def test_zero_has_no_middle_bar(self) -> None:
        assert 6 not in lit(0)
        assert len(lit(0)) == 6

    @pytest.mark.parametrize("digit", [-1, 10])
    def test_out_of_range(self, digit: int) -> None:
        with pytest.raises(ValueError):
            digit_segments(digit)

    def test_segment_geometry(self) -> None:
        u = 10
        assert segment_rectangle(0, 0, 0, u) == RenderCommand(0, 0, 50, 10)
        assert segment_rectangle(1, 0, 0, u) == RenderCommand(40, 0, 10, 50)
        assert segment_rectangle(2, 0, 0, u) == RenderCommand(40, 40, 10, 50)
        assert segment_rectangle(3, 0, 0, u) == RenderCommand(0, 80, 50, 10)
        assert segment_rectangle(4, 0, 0, u) == RenderCommand(0, 40, 10, 50)
        assert segment_rectangle(5, 0, 0, u) == RenderCommand(0, 0, 10, 50)
        assert segment_rectangle(6, 0, 0, u) == RenderCommand(0, 40, 50, 10)

    def test_digit_is_offset_by_origin(self) -> None:
        at_origin = draw_digit(7, 0, 0, 3)
        moved = draw_digit(7, 11, 22, 3)
        assert [(r.x + 11, r.y + 22) for r in at_origin] == [(r.x, r.y) for r in moved]


class TestClock:
    def test_23_59_layout(self) -> None:
        u = 10
        x, y = 100, 50
        rects = draw_clock(23, 59, x, y, u)
        h1 = draw_digit(2, x, y, u)
        h2 = draw_digit(3, x + 60, y, u)
        colon = [RenderCommand(x + 120, y + 20, u, u), RenderCommand(x + 120, y + 60, u, u)]
        m1 = draw_digit(5, x + 140, y, u)
        m2 = draw_digit(9, x + 200, y, u)
        assert rects == h1 + h2 + colon + m1 + m2
        assert len(rects) == 5 + 5 + 2 + 5 + 6

    def test_digits_left_to_right(self) -> None:
        rects = draw_clock(12, 34, 0, 0, 1)
        colon = [RenderCommand(12, 2, 1, 1), RenderCommand(12, 6, 1, 1)]
        assert rects == (
            draw_digit(1, 0, 0, 1)
            + draw_digit(2, 6, 0, 1)
            + colon
            + draw_digit(3, 14, 0, 1)
            + draw_digit(4, 20, 0, 1)
        )
        assert max(r.x + r.width for r in rects) == 25

    def test_leftmost_segment_touches_origin(self) -> None:
        rects = draw_clock(23, 59, 0, 0, 1)
        assert min(r.x for r in rects) == 0

    def test_midnight(self) -> None:
        rects = draw_clock(0, 0, 0, 0, 2)
        assert len(rects) == 6 * 4 + 2

    def test_pure(self) -> None:
        assert draw_clock(7, 5, 3, 4, 2) == draw_clock(7, 5, 3, 4, 2)
