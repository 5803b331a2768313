"""
Lyapunov fractal fields.

LyapunovField bundles everything one picture needs: the map function,
the color map, the sampling window (three corners of a parallelogram in
the (A, B) plane), the A/B sequence, iteration counts, x0 and the grid of
exponents. compute() fills the grid; render() turns it into RGB.

Grid row 0 is the lower edge of the window (the LL-LR side), so the RGB
array returned by render() is bottom-up, like a BMP.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

import maps
import affine
import field_color


class Point(NamedTuple):
    x: float
    y: float


@dataclass
class Tile:
    index: int          # 1-based
    column: int
    row: int
    domain: np.ndarray  # [llx, lly, ulx, uly, lrx, lry]
    grid: np.ndarray


def _even(n: int) -> int:
    return (int(n) >> 1) << 1


def _multiple_of_4(n: int) -> int:
    return (int(n) >> 2) << 2


class LyapunovField:

    def __init__(
        self,
        function: maps.MapFunction | None = None,
        colors: field_color.IntervalColorMap | None = None,
        width: int = maps.DEFAULT_WIDTH,
        height: int = maps.DEFAULT_HEIGHT,
        settling: int = maps.DEFAULT_SETTLING,
        measuring: int = maps.DEFAULT_MEASURING,
        x0: float = maps.DEFAULT_X0,
        sequence: str = maps.DEFAULT_SEQ,
        lowerleft=maps.DEFAULT_LOWERLEFT,
        lowerright=maps.DEFAULT_LOWERRIGHT,
        upperleft=maps.DEFAULT_UPPERLEFT,
    ):
        self.function = function
        self.colors = colors
        self.x0 = float(x0)
        self.grid = np.zeros((0, 0), dtype=np.float64)
        self.set_size(width, height)
        self.set_iterations(settling, measuring)
        self.set_sequence(sequence)
        self.set_position(lowerleft, lowerright, upperleft)

    # -- size / iterations / sequence ----------------------------------------

    @property
    def width(self) -> int:
        return self.grid.shape[1]

    @property
    def height(self) -> int:
        return self.grid.shape[0]

    def set_size(self, width: int, height: int) -> None:
        """Round each side down to a multiple of 4 and allocate a fresh grid."""
        w = _multiple_of_4(width)
        h = _multiple_of_4(height)
        if w < 4 or h < 4:
            raise ValueError(f"field size must be at least 4x4, got {width}x{height}")
        self.grid = np.zeros((h, w), dtype=np.float64)

    def set_iterations(self, settling: int, measuring: int) -> None:
        """Truncate both counts to even; iterations always run in pairs."""
        s = _even(settling)
        m = _even(measuring)
        if s < 0:
            raise ValueError(f"settling iterations must be >= 0, got {settling}")
        if m < 2:
            raise ValueError(f"measuring iterations must be >= 2, got {measuring}")
        self.settling = s
        self.measuring = m

    def set_sequence(self, seq: str) -> None:
        """Accepts plain (ABBA) or compressed (A2B2, (AB)4) sequences."""
        self.sequence = maps.normalize_sequence(maps.decode_sequence_token(seq))

    # -- window --------------------------------------------------------------

    def set_position(self, lowerleft, lowerright, upperleft) -> None:
        self.lowerleft = Point(float(lowerleft[0]), float(lowerleft[1]))
        self.lowerright = Point(float(lowerright[0]), float(lowerright[1]))
        self.upperleft = Point(float(upperleft[0]), float(upperleft[1]))

    @property
    def domain(self) -> np.ndarray:
        return affine.make_domain(self.lowerleft, self.lowerright, self.upperleft)

    @domain.setter
    def domain(self, domain: np.ndarray) -> None:
        self.set_position(*affine.domain_corners(domain))

    def pixel_to_param(self, col: int, row: int) -> tuple[float, float]:
        """(A, B) sampled at grid cell (col, row)."""
        A, B = maps.pixel_to_param(self.domain, self.width, self.height, int(row), int(col))
        return float(A), float(B)

    def center(self) -> Point:
        return Point(*affine.domain_center(self.domain))

    def rotate(self, degrees: float) -> None:
        self.domain = affine.rotate_domain(self.domain, degrees)

    def stretch(self, fx: float, fy: float | None = None) -> None:
        self.domain = affine.stretch_domain(self.domain, fx, fx if fy is None else fy)

    def crop(self, left: int, bottom: int, right: int, top: int) -> None:
        self.domain = affine.crop_domain(
            self.domain, self.width, self.height, left, bottom, right, top
        )

    def recenter_on_pixel(self, px: int, py: int) -> None:
        self.domain = affine.recenter_domain(self.domain, self.width, self.height, px, py)

    # -- function slot -------------------------------------------------------

    def swap_function(self, function: maps.MapFunction) -> maps.MapFunction | None:
        """Install `function`, hand back the previous one."""
        old = self.function
        self.function = function
        return old

    @contextmanager
    def borrowed_function(self, function: maps.MapFunction):
        """Run a block with `function` installed; the original comes back afterwards."""
        old = self.swap_function(function)
        try:
            yield function
        finally:
            self.function = old

    # -- sampling ------------------------------------------------------------

    def _clamp_row(self, row: int) -> int:
        return min(max(int(row), 0), self.height - 1)

    def compute(self, start: int = 0, end: int | None = None, verbose: bool = False) -> np.ndarray:
        """
        Fill grid rows [start, end] (inclusive, clamped to the grid).

        Rows outside the range keep their previous values.
        """
        if self.function is None:
            raise ValueError("no map function installed")
        start = self._clamp_row(start)
        end = self._clamp_row(self.height - 1 if end is None else end)

        compiled = self.function.compile()
        seq = maps.seq_to_array(self.sequence)
        domain = self.domain

        def run(r0, r1):
            maps.lyapunov_rows(
                compiled.value,
                compiled.value_deriv,
                seq,
                domain,
                self.grid,
                r0,
                r1,
                self.x0,
                self.settling // 2,
                self.measuring // 2,
                maps.LOG_FLOOR,
                compiled.params,
            )

        if not verbose:
            run(start, end)
            return self.grid

        t0 = time.perf_counter()
        for r0 in range(start, end + 1, maps.PROGRESS_ROWS):
            r1 = min(r0 + maps.PROGRESS_ROWS - 1, end)
            run(r0, r1)
            done = r1 - start + 1
            left = (time.perf_counter() - t0) / done * (end - r1)
            print(f"row {r1} --- {left:.0f} sec to go ---")
        return self.grid

    def tile(self, nx: int, ny: int, verbose: bool = False):
        """
        Split the window into nx x ny sub-windows and compute each in turn.

        Yields a Tile per sub-window while its corners are installed, so the
        caller can save the field as it stands. The original corners come
        back when the generator is exhausted or closed.
        """
        saved = self.domain
        total = nx * ny
        try:
            for index, (i, j, sub) in enumerate(affine.tile_domains(saved, nx, ny), start=1):
                if verbose:
                    print(f"tile {index}/{total} ...")
                self.domain = sub
                self.compute()
                yield Tile(index, i, j, sub, self.grid.copy())
        finally:
            self.domain = saved

    # -- output --------------------------------------------------------------

    def render(self, gap=(0, 0, 0)) -> np.ndarray:
        """Grid -> (height, width, 3) uint8 RGB, bottom row first."""
        if self.colors is None:
            raise ValueError("no color map installed")
        return self.colors.colorize(self.grid, gap)

    def load_grid(self, grid: np.ndarray) -> None:
        """Replace the exponents; the shape must match the field."""
        grid = np.asarray(grid, dtype=np.float64)
        if grid.shape != self.grid.shape:
            raise maps.GridShapeError(
                f"grid is {grid.shape[1]}x{grid.shape[0]}, field is {self.width}x{self.height}"
            )
        self.grid[...] = grid

    def describe(self) -> list[str]:
        fn = self.function
        cx, cy = self.center()
        lines = [
            f"x0={self.x0:f}, {self.settling} initial and {self.measuring} computing iterations",
            f"Trajectory function f(x)={fn.formula() if fn else 'undefined'}",
            f"Computing function g(x)={fn.deriv_formula() if fn else 'undefined'}",
            f"Sequence {self.sequence}. Center ({cx:.2f}/{cy:.2f}) "
            f"size={affine.domain_size(self.domain):.10f}",
        ]
        if self.colors is not None:
            lines.extend(self.colors.describe())
        return lines

    def __repr__(self) -> str:
        return (
            f"<LyapunovField {self.width}x{self.height} seq={self.sequence} "
            f"iter=({self.settling}|{self.measuring}) {self.function!r}>"
        )
