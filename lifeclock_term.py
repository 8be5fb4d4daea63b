#!/usr/bin/env python3
"""
Terminal front end for lifeclock.

Plays the role of the screensaver host: measures the viewport, asks the
LifeHack for a frame, rasterises its rectangles onto half-block characters
and sleeps for the frame's delay.

One terminal column is ``cell_size`` pixels wide and every terminal row
holds two pixel rows, each ``cell_size`` tall, so one field cell lands on
exactly one half-block. The last row is a status bar.

  Controls:
    q         quit
    SPACE     pause / resume
    r         reseed the field
"""

from __future__ import annotations

import argparse
import curses
import sys
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from lifeclock import (
    DEFAULT_CELL_SIZE,
    DEFAULT_DELAY,
    DEFAULT_LIVE_PROBABILITY,
    ConfigurationError,
    LifeConfig,
    LifeHack,
    StatsLogger,
)
from lifeclock_render import RenderCommand

# ── Half-block characters ───────────────────────────────────────────────
UPPER_HALF = "\u2580"  # ▀  top pixel lit
LOWER_HALF = "\u2584"  # ▄  bottom pixel lit
FULL_BLOCK = "\u2588"  # █  both lit

COLORS: dict[str, int] = {
    "default": -1,
    "black": curses.COLOR_BLACK,
    "red": curses.COLOR_RED,
    "green": curses.COLOR_GREEN,
    "yellow": curses.COLOR_YELLOW,
    "blue": curses.COLOR_BLUE,
    "magenta": curses.COLOR_MAGENTA,
    "cyan": curses.COLOR_CYAN,
    "white": curses.COLOR_WHITE,
}

USEC: float = 1_000_000.0


# ═══════════════════════════════════════════════════════════════════════
#  Geometry
# ═══════════════════════════════════════════════════════════════════════

def viewport_size(term_rows: int, term_cols: int, cell_size: int) -> tuple[int, int]:
    """Pixel (width, height) of the drawable area, status bar excluded."""
    return term_cols * cell_size, max(term_rows - 1, 0) * 2 * cell_size


def rasterize(
    rects: Iterable[RenderCommand],
    pixel_rows: int,
    pixel_cols: int,
    cell_size: int,
) -> NDArray[np.bool_]:
    """
    Fill every rectangle into a half-block pixel mask.

    Both edges are floored onto the cell grid, so a rectangle keeps its
    width even when its origin falls mid-cell (the centred clock does that
    on odd-width terminals). Anything off-screen is clipped.
    """
    mask = np.zeros((pixel_rows, pixel_cols), dtype=np.bool_)
    for r in rects:
        x0 = r.x // cell_size
        y0 = r.y // cell_size
        x1 = max((r.x + r.width) // cell_size, x0 + 1)
        y1 = max((r.y + r.height) // cell_size, y0 + 1)
        if x1 <= 0 or y1 <= 0:
            continue
        mask[max(y0, 0):y1, max(x0, 0):x1] = True
    return mask


# ═══════════════════════════════════════════════════════════════════════
#  Colour
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class ColorScheme:
    """The single foreground-on-background pair everything is drawn with."""

    foreground: str = "green"
    background: str = "black"
    pair: int = 0

    def setup(self) -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, COLORS[self.foreground], COLORS[self.background])
        self.pair = 1

    def attr(self) -> int:
        return curses.color_pair(self.pair)


# ═══════════════════════════════════════════════════════════════════════
#  Drawing
# ═══════════════════════════════════════════════════════════════════════

def render(stdscr: curses.window, mask: NDArray[np.bool_], attr: int = 0) -> int:
    """Draw the mask as half-blocks; returns the number of characters written."""
    max_y, max_x = stdscr.getmaxyx()
    draw_rows = min(mask.shape[0] // 2, max_y - 1)
    draw_cols = min(mask.shape[1], max_x)
    row_end = draw_rows * 2

    top = mask[0:row_end:2, :draw_cols]    # even pixel rows → top half
    bot = mask[1:row_end:2, :draw_cols]    # odd pixel rows  → bottom half

    ys, xs = np.nonzero(top | bot)
    ys_l = ys.tolist()
    xs_l = xs.tolist()
    ta = top[ys, xs].tolist()
    ba = bot[ys, xs].tolist()

    _addstr = stdscr.addstr
    for y, x, t, b in zip(ys_l, xs_l, ta, ba):
        if t and b:
            ch = FULL_BLOCK
        elif t:
            ch = UPPER_HALF
        else:
            ch = LOWER_HALF
        try:
            _addstr(y, x, ch, attr)
        except curses.error:
            # Writing the bottom-right cell moves the cursor off-screen
            pass
    return len(ys_l)


def draw_status(stdscr: curses.window, hack: LifeHack) -> None:
    max_y, max_x = stdscr.getmaxyx()
    grid = hack.grid
    if grid is None:
        return
    state = "paused" if hack.paused else "running"
    mode = "clock" if hack.config.clock else "plain"
    left = f"  gen {grid.generation:,}  pop {grid.population():,}  {grid.rows}x{grid.cols}  {mode}  {state}"
    right = "q r spc  "
    gap = max_x - len(left) - len(right) - 1
    status = left + " " * max(gap, 1) + right
    try:
        stdscr.addstr(max_y - 1, 0, status[: max_x - 1], curses.A_DIM)
    except curses.error:
        pass


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def run(stdscr: curses.window, config: LifeConfig, stats_path: Path | None = None) -> None:
    curses.curs_set(0)
    stdscr.nodelay(True)
    stdscr.timeout(0)

    scheme = ColorScheme(config.foreground, config.background)
    scheme.setup()
    attr = scheme.attr()
    stdscr.bkgd(" ", attr)

    max_y, max_x = stdscr.getmaxyx()
    width, height = viewport_size(max_y, max_x, config.cell_size)
    pixel_rows = (max_y - 1) * 2

    stats: StatsLogger | None = None
    if stats_path is not None:
        stats = StatsLogger(stats_path)
        stats.open()

    with LifeHack(width, height, config, stats) as hack:
        while True:
            # ── Input ──────────────────────────────────────────────
            try:
                key = stdscr.getch()
            except curses.error:
                key = -1

            if key in (ord("q"), ord("Q")):
                break
            elif key == ord(" "):
                hack.paused = not hack.paused
            elif key in (ord("r"), ord("R")):
                hack.reseed()

            # ── Frame ──────────────────────────────────────────────
            frame = hack.draw()
            mask = rasterize(frame.rects, pixel_rows, max_x, config.cell_size)

            stdscr.erase()
            render(stdscr, mask, attr | curses.A_BOLD)
            draw_status(stdscr, hack)
            stdscr.refresh()

            time.sleep(frame.delay / USEC)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lifeclock",
        description="Conway's Game of Life on a torus, with an optional clock",
    )
    parser.add_argument("--delay", type=int, default=DEFAULT_DELAY,
                        help=f"Microseconds between generations (default: {DEFAULT_DELAY})")
    parser.add_argument("--cell-size", type=int, default=DEFAULT_CELL_SIZE,
                        help=f"Pixel size of one cell (default: {DEFAULT_CELL_SIZE})")
    parser.add_argument("--clock", action="store_true",
                        help="Show an HH:MM clock above a framed, smaller field")
    parser.add_argument("--density", type=float, default=DEFAULT_LIVE_PROBABILITY,
                        help="Probability each cell starts alive "
                             f"(default: {DEFAULT_LIVE_PROBABILITY})")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed (default: fresh every run)")
    parser.add_argument("--foreground", choices=sorted(COLORS), default="green",
                        help="Cell colour (default: green)")
    parser.add_argument("--background", choices=sorted(COLORS), default="black",
                        help="Background colour (default: black)")
    parser.add_argument("--stats-log", type=Path, default=None,
                        help="Write per-generation stats CSV to this path")
    return parser


def parse_config(argv: Sequence[str] | None = None) -> tuple[LifeConfig, Path | None]:
    args = build_parser().parse_args(argv)
    config = LifeConfig(
        delay=args.delay,
        cell_size=args.cell_size,
        clock=args.clock,
        live_probability=args.density,
        seed=args.seed,
        foreground=args.foreground,
        background=args.background,
    )
    return config, args.stats_log


def cli(argv: Sequence[str] | None = None) -> int:
    try:
        config, stats_path = parse_config(argv)
        curses.wrapper(run, config, stats_path)
    except ConfigurationError as exc:
        print(f"lifeclock: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(cli())
