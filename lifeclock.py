"""
  L I F E  ·  C L O C K
  Conway's Game of Life on a wrap-around field, with an optional
  seven-segment wall clock floating above it.

  The core never touches a screen. Each frame the host asks a LifeHack for
  a batch of filled rectangles, draws them in one colour on a cleared
  background, and sleeps for the delay the frame hands back. Then the
  field advances one generation under the classic B3/S23 rule.

  Two layouts share one engine:
    plain    the field covers the whole viewport
    clock    the field shrinks by 26 columns and 28 rows, gets a
             one-cell frame, and an HH:MM readout sits centred above it
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, ClassVar

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.ndimage import convolve

from lifeclock_render import (
    CLOCK_WIDTH,
    RenderCommand,
    batch_grid,
    draw_clock,
)

# ── Convolution kernel (the eight neighbours, never the cell itself) ────
NEIGHBOR_KERNEL: NDArray[np.int16] = np.array(
    [[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int16
)

# ── Defaults (match the screensaver's X resources) ───────────────────────
DEFAULT_DELAY: int = 100_000      # µs between generations
DEFAULT_CELL_SIZE: int = 10       # pixels per cell edge
DEFAULT_LIVE_PROBABILITY: float = 0.5
SPARSE_LIVE_PROBABILITY: float = 0.1

# ── Clock layout, in cells ──────────────────────────────────────────────
CLOCK_MARGIN_COLS: int = 26
CLOCK_MARGIN_ROWS: int = 28
CLOCK_TOP: int = 5
FIELD_LEFT: int = 13
FIELD_TOP: int = 20

STATS_EVERY: int = 10


class ConfigurationError(ValueError):
    """The requested configuration cannot produce a usable field."""


# ═══════════════════════════════════════════════════════════════════════
#  Configuration
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LifeConfig:
    """Everything the host can tune. Colours are only read by the host."""

    delay: int = DEFAULT_DELAY
    cell_size: int = DEFAULT_CELL_SIZE
    clock: bool = False
    live_probability: float = DEFAULT_LIVE_PROBABILITY
    seed: int | None = None
    foreground: str = "green"
    background: str = "black"

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ConfigurationError("delay must be >= 0")
        if self.cell_size < 1:
            raise ConfigurationError("cell_size must be >= 1")
        if not 0.0 <= self.live_probability <= 1.0:
            raise ConfigurationError("live_probability must be in [0.0, 1.0]")


# ═══════════════════════════════════════════════════════════════════════
#  The field
# ═══════════════════════════════════════════════════════════════════════

class Grid:
    """
    A rows × cols torus of boolean cells.

    Cells live in one C-ordered numpy array (flat row-major storage), plus a
    second array of the same shape that holds the previous generation while
    the next one is written.
    """

    def __init__(self, cells: NDArray[np.bool_]) -> None:
        if cells.ndim != 2:
            raise ConfigurationError(f"grid must be 2-D, got shape {cells.shape}")
        rows, cols = cells.shape
        if rows < 1 or cols < 1:
            raise ConfigurationError(f"grid needs at least 1x1 cells, got {rows}x{cols}")
        self.rows: int = rows
        self.cols: int = cols
        self.cells: NDArray[np.bool_] = np.array(cells, dtype=np.bool_, order="C")
        self.generation: int = 0
        # Generation buffer, reused by every step
        self._snapshot: NDArray[np.bool_] = np.empty_like(self.cells)

    @classmethod
    def new(
        cls,
        rows: int,
        cols: int,
        live_probability: float = DEFAULT_LIVE_PROBABILITY,
        rng: np.random.Generator | None = None,
    ) -> Grid:
        """Each cell independently alive with probability ``live_probability``."""
        if rows < 1 or cols < 1:
            raise ConfigurationError(f"grid needs at least 1x1 cells, got {rows}x{cols}")
        if not 0.0 <= live_probability <= 1.0:
            raise ConfigurationError("live_probability must be in [0.0, 1.0]")
        if rng is None:
            rng = np.random.default_rng()
        return cls(rng.random((rows, cols)) < live_probability)

    @classmethod
    def from_cells(cls, cells: ArrayLike) -> Grid:
        return cls(np.asarray(cells, dtype=np.bool_))

    def wrap(self, row: int, col: int) -> tuple[int, int]:
        return row % self.rows, col % self.cols

    def live_cells(self) -> list[tuple[int, int]]:
        """(row, col) of every live cell, row-major."""
        rs, cs = np.nonzero(self.cells)
        return list(zip(rs.tolist(), cs.tolist()))

    def population(self) -> int:
        return int(np.count_nonzero(self.cells))

    def __repr__(self) -> str:
        return f"Grid({self.rows}x{self.cols}, gen={self.generation}, pop={self.population()})"


def neighbor_count(snapshot: NDArray[np.bool_], row: int, col: int) -> int:
    """Live cells among the eight toroidal neighbours of (row, col)."""
    rows, cols = snapshot.shape
    total = 0
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            total += int(snapshot[(row + dr + rows) % rows, (col + dc + cols) % cols])
    return total


def neighbor_counts(snapshot: NDArray[np.bool_]) -> NDArray[np.int16]:
    """
    ``neighbor_count`` for every cell at once.

    The snapshot is wrap-padded by one cell on each side, so every interior
    window of the convolution already sees its toroidal neighbours; the
    padding ring is then cropped away. Works down to a 1×1 field, where all
    eight neighbours are the cell itself.
    """
    padded = np.pad(snapshot.astype(np.int16), 1, mode="wrap")
    counts = convolve(padded, NEIGHBOR_KERNEL, mode="constant", cval=0)
    return counts[1:-1, 1:-1]


# ═══════════════════════════════════════════════════════════════════════
#  Stepper
# ═══════════════════════════════════════════════════════════════════════

def step(grid: Grid) -> None:
    """Advance ``grid`` one generation in place (B3/S23)."""
    snap = grid._snapshot
    np.copyto(snap, grid.cells)
    n = neighbor_counts(snap)
    # Every count above comes from the snapshot; only now is the field written
    np.logical_or(n == 3, snap & (n == 2), out=grid.cells)
    grid.generation += 1


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes per-generation telemetry to CSV."""

    HEADER: ClassVar[str] = "gen,time_s,population,rects,event\n"

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    @property
    def active(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    def log(self, gen: int, pop: int, rects: int, event: str = "") -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.1f},{pop},{rects},{event}\n")
            # Flush on events or periodically
            if event or gen % 50 == 0:
                self._fh.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Per-session handle
# ═══════════════════════════════════════════════════════════════════════

@dataclass
class Frame:
    """One frame's output: rectangles to fill, then the wait before the next."""

    rects: list[RenderCommand]
    delay: int


class LifeHack:
    """
    Init / draw / free lifecycle for one screensaver session.

    The host creates one per window with the viewport size in pixels, calls
    ``draw()`` once per frame and ``free()`` (or leaves the ``with`` block)
    at teardown. Nothing is shared between instances.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: LifeConfig | None = None,
        stats: StatsLogger | None = None,
    ) -> None:
        self.config: LifeConfig = config if config is not None else LifeConfig()
        self.width: int = width
        self.height: int = height
        self.stats: StatsLogger | None = stats
        self.paused: bool = False

        self.rows, self.cols = field_shape(width, height, self.config)
        self.rng: np.random.Generator = np.random.default_rng(self.config.seed)
        self.grid: Grid | None = Grid.new(
            self.rows, self.cols, self.config.live_probability, self.rng
        )

    # ── Layout ──────────────────────────────────────────────────────

    @property
    def field_origin(self) -> tuple[int, int]:
        if not self.config.clock:
            return 0, 0
        s = self.config.cell_size
        return FIELD_LEFT * s, FIELD_TOP * s

    @property
    def clock_origin(self) -> tuple[int, int]:
        s = self.config.cell_size
        return (self.width - CLOCK_WIDTH * s) // 2, CLOCK_TOP * s

    # ── Frame ───────────────────────────────────────────────────────

    def render(self, now: datetime | None = None) -> list[RenderCommand]:
        """Rectangles for the current, fully settled generation."""
        grid = self.live_grid()
        s = self.config.cell_size
        fx, fy = self.field_origin

        rects: list[RenderCommand] = []
        if self.config.clock:
            if now is None:
                now = datetime.now()
            cx, cy = self.clock_origin
            rects += draw_clock(now.hour, now.minute, cx, cy, s)
        rects += batch_grid(grid, s, fx, fy, border=self.config.clock)
        return rects

    def draw(self, now: datetime | None = None) -> Frame:
        """Render this generation, then step to the next one."""
        grid = self.live_grid()
        rects = self.render(now)
        if not self.paused:
            step(grid)
            if self.stats is not None and grid.generation % STATS_EVERY == 0:
                self.stats.log(grid.generation, grid.population(), len(rects))
        return Frame(rects=rects, delay=self.config.delay)

    def reseed(self) -> None:
        """Throw the field away and start again with fresh random cells."""
        self.live_grid()
        self.grid = Grid.new(self.rows, self.cols, self.config.live_probability, self.rng)
        if self.stats is not None:
            self.stats.log(0, self.grid.population(), 0, event="reseed")

    # ── Teardown ────────────────────────────────────────────────────

    def free(self) -> None:
        self.grid = None
        if self.stats is not None:
            self.stats.close()

    def __enter__(self) -> LifeHack:
        return self

    def __exit__(self, *exc: object) -> None:
        self.free()

    def live_grid(self) -> Grid:
        """The current field; raises once the session has been freed."""
        if self.grid is None:
            raise RuntimeError("LifeHack used after free()")
        return self.grid


def field_shape(width: int, height: int, config: LifeConfig) -> tuple[int, int]:
    """(rows, cols) of the field for a viewport of ``width`` × ``height`` pixels."""
    cols = width // config.cell_size
    rows = height // config.cell_size
    if config.clock:
        cols -= CLOCK_MARGIN_COLS
        rows -= CLOCK_MARGIN_ROWS
    if rows < 1 or cols < 1:
        need = ""
        if config.clock:
            need = f" (clock needs more than {CLOCK_MARGIN_COLS}x{CLOCK_MARGIN_ROWS} cells)"
        raise ConfigurationError(
            f"viewport {width}x{height}px leaves a {cols}x{rows} field "
            f"at cell size {config.cell_size}{need}"
        )
    return rows, cols
