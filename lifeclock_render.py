"""
Rectangle batching and seven-segment clock glyphs for lifeclock.

Everything the screensaver puts on screen is an axis-aligned filled
rectangle in one foreground color: one square per live cell, four strips
framing the field in clock mode, and the segments of an HH:MM readout.
The functions here are pure; the host draws the result in a single batch.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lifeclock import Grid


@dataclass(frozen=True)
class RenderCommand:
    """One filled rectangle in pixel space."""

    x: int
    y: int
    width: int
    height: int


# ═══════════════════════════════════════════════════════════════════════
#  Field batching
# ═══════════════════════════════════════════════════════════════════════

def batch(
    live_cells: Iterable[tuple[int, int]],
    cell_size: int,
    origin_x: int = 0,
    origin_y: int = 0,
) -> list[RenderCommand]:
    """One ``cell_size`` square per live ``(row, col)``, offset by the origin."""
    return [
        RenderCommand(origin_x + col * cell_size, origin_y + row * cell_size,
                      cell_size, cell_size)
        for row, col in live_cells
    ]


def border_rectangles(
    rows: int, cols: int, cell_size: int, origin_x: int, origin_y: int
) -> list[RenderCommand]:
    """Top, right, bottom and left strips hugging the field from outside."""
    s = cell_size
    x0, y0 = origin_x - s, origin_y - s
    full_w = (cols + 2) * s
    full_h = (rows + 2) * s
    return [
        RenderCommand(x0, y0, full_w, s),
        RenderCommand(origin_x + cols * s, y0, s, full_h),
        RenderCommand(x0, origin_y + rows * s, full_w, s),
        RenderCommand(x0, y0, s, full_h),
    ]


def batch_grid(
    grid: Grid,
    cell_size: int,
    origin_x: int = 0,
    origin_y: int = 0,
    border: bool = False,
) -> list[RenderCommand]:
    rects: list[RenderCommand] = []
    if border:
        rects.extend(border_rectangles(grid.rows, grid.cols, cell_size, origin_x, origin_y))
    rects.extend(batch(grid.live_cells(), cell_size, origin_x, origin_y))
    return rects


# ═══════════════════════════════════════════════════════════════════════
#  Seven-segment glyphs
# ═══════════════════════════════════════════════════════════════════════

# Segment order: 0 top, 1 upper-right, 2 lower-right, 3 bottom,
# 4 lower-left, 5 upper-left, 6 middle.
SEGMENT_COUNT: int = 7

DIGITS: tuple[tuple[bool, ...], ...] = tuple(
    tuple(bit == "1" for bit in pattern)
    for pattern in (
        "1111110",  # 0
        "0110000",  # 1
        "1101101",  # 2
        "1111001",  # 3
        "0110011",  # 4
        "1011011",  # 5
        "1011111",  # 6
        "1110000",  # 7
        "1111111",  # 8
        "1111011",  # 9
    )
)

# Glyph geometry in units of the base cell size
SEGMENT_LENGTH: int = 5
DIGIT_WIDTH: int = SEGMENT_LENGTH
DIGIT_HEIGHT: int = 2 * SEGMENT_LENGTH - 1
CLOCK_WIDTH: int = 25  # four digits, three gaps, colon spacing


def digit_segments(digit: int) -> tuple[bool, ...]:
    if not 0 <= digit <= 9:
        raise ValueError(f"digit must be in 0..9, got {digit}")
    return DIGITS[digit]


def segment_rectangle(segment: int, x: int, y: int, unit: int) -> RenderCommand:
    """Geometry of one segment for a glyph whose top-left corner is (x, y)."""
    w = unit
    h = unit * SEGMENT_LENGTH
    if segment == 0:
        return RenderCommand(x, y, h, w)
    if segment == 1:
        return RenderCommand(x + h - w, y, w, h)
    if segment == 2:
        return RenderCommand(x + h - w, y + h - w, w, h)
    if segment == 3:
        return RenderCommand(x, y + (h - w) * 2, h, w)
    if segment == 4:
        return RenderCommand(x, y + h - w, w, h)
    if segment == 5:
        return RenderCommand(x, y, w, h)
    if segment == 6:
        return RenderCommand(x, y + h - w, h, w)
    raise ValueError(f"segment must be in 0..{SEGMENT_COUNT - 1}, got {segment}")


def draw_digit(digit: int, x: int, y: int, unit: int) -> list[RenderCommand]:
    return [
        segment_rectangle(i, x, y, unit)
        for i, lit in enumerate(digit_segments(digit))
        if lit
    ]


def draw_clock(hours: int, minutes: int, x: int, y: int, unit: int) -> list[RenderCommand]:
    """
    Lay out HH:MM left to right starting at (x, y).

    Digits sit on a pitch of one digit width plus a one-unit margin; the
    colon is two unit squares in the gap after the hour pair, and the
    minute pair is pushed right by two extra margins to make room for it.
    """
    digit_width = DIGIT_WIDTH * unit
    margin = unit
    pitch = digit_width + margin
    colon_x = x + pitch * 2

    rects: list[RenderCommand] = []
    rects += draw_digit(hours // 10, x, y, unit)
    rects += draw_digit(hours % 10, x + pitch, y, unit)
    rects.append(RenderCommand(colon_x, y + 2 * unit, unit, unit))
    rects.append(RenderCommand(colon_x, y + 6 * unit, unit, unit))
    rects += draw_digit(minutes // 10, x + pitch * 2 + margin * 2, y, unit)
    rects += draw_digit(minutes % 10, x + pitch * 3 + margin * 2, y, unit)
    return rects
