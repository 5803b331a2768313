"""
Color mapping: Lyapunov exponent -> RGB through color intervals.

An interval [lo, hi) carries a left and a right RGB color; a value inside
it gets the linear blend of the two (truncated per channel). A color map
holds up to MAX_INTERVALS intervals, queried in insertion order, plus a
"below" color for values under every interval and an "above" color for
values over every interval.

Record layout (inside a parameter record, after the COLORING key):

    ID
    2
    BELOW
    255
    255
    0
    ABOVE
    0
    0
    0
    COUNT
    1
    LO
    -2.0
    HI
    0.0
    LEFT
    ...
"""

import numpy as np
from numba import njit, prange

from maps import MAX_INTERVALS, RecordError, CapacityError, RecordReader, fmt_float

COLORING_ID = 2

RGB = tuple[int, int, int]


def _check_rgb(rgb) -> RGB:
    r, g, b = (int(c) for c in rgb)
    for c in (r, g, b):
        if c < 0 or c > 255:
            raise ValueError(f"color channel out of range 0..255: {rgb}")
    return (r, g, b)


class ColorInterval:

    def __init__(self, lo: float, hi: float, left: RGB, right: RGB):
        lo = float(lo)
        hi = float(hi)
        if not lo < hi:
            raise ValueError(f"color interval needs lo < hi, got [{lo}, {hi})")
        self.lo = lo
        self.hi = hi
        self.set_left(left)
        self.set_right(right)

    def set_left(self, rgb) -> None:
        self.left = _check_rgb(rgb)

    def set_right(self, rgb) -> None:
        self.right = _check_rgb(rgb)

    def contains(self, w: float) -> bool:
        return self.lo <= w < self.hi

    def interpolate(self, w: float) -> RGB:
        """Blend of left/right at w, without the range check."""
        t = (w - self.lo) / (self.hi - self.lo)
        return tuple(
            lc + int(t * (rc - lc)) for lc, rc in zip(self.left, self.right)
        )

    def color_at(self, w: float) -> RGB | None:
        if not self.contains(w):
            return None
        return self.interpolate(w)

    def to_lines(self) -> list[str]:
        return [
            "LO", fmt_float(self.lo),
            "HI", fmt_float(self.hi),
            "LEFT", *(str(c) for c in self.left),
            "RIGHT", *(str(c) for c in self.right),
        ]

    @classmethod
    def read(cls, reader: RecordReader) -> "ColorInterval":
        got = {}

        def put(name, fn):
            def read():
                got[name] = fn()
            return read

        reader.read_keyed(
            {
                "LO": put("lo", reader.read_float),
                "HI": put("hi", reader.read_float),
                "LEFT": put("left", reader.read_rgb),
                "RIGHT": put("right", reader.read_rgb),
            },
            "interval",
        )
        try:
            return cls(got["lo"], got["hi"], got["left"], got["right"])
        except ValueError as e:
            raise RecordError(f"{reader.source}: {e}") from None

    def __repr__(self) -> str:
        return f"ColorInterval([{self.lo:g}, {self.hi:g}) {self.left}..{self.right})"


class IntervalColorMap:

    def __init__(self, below: RGB = (0, 0, 0), above: RGB = (0, 0, 0)):
        self.below = _check_rgb(below)
        self.above = _check_rgb(above)
        self.intervals: list[ColorInterval] = []
        self.min_value = 0.0
        self.max_value = 0.0

    def __len__(self) -> int:
        return len(self.intervals)

    def add_interval(self, interval: ColorInterval) -> None:
        if len(self.intervals) >= MAX_INTERVALS:
            raise CapacityError(f"color map already holds {MAX_INTERVALS} intervals")
        self.intervals.append(interval)
        if len(self.intervals) == 1:
            self.min_value = interval.lo
            self.max_value = interval.hi
        else:
            self.min_value = min(self.min_value, interval.lo)
            self.max_value = max(self.max_value, interval.hi)

    def add(self, lo: float, hi: float, left: RGB, right: RGB) -> ColorInterval:
        interval = ColorInterval(lo, hi, left, right)
        self.add_interval(interval)
        return interval

    def color_at(self, w: float) -> RGB | None:
        """
        Color for one exponent.

        None means w sits in a gap between intervals (or the map is
        empty); what to paint there is up to the caller.
        """
        if self.intervals and w < self.min_value:
            return self.below
        if self.intervals and w > self.max_value:
            return self.above
        for interval in self.intervals:
            rgb = interval.color_at(w)
            if rgb is not None:
                return rgb
        return None

    def arrays(self):
        n = len(self.intervals)
        lo = np.empty(n, dtype=np.float64)
        hi = np.empty(n, dtype=np.float64)
        left = np.empty((n, 3), dtype=np.int64)
        right = np.empty((n, 3), dtype=np.int64)
        for i, interval in enumerate(self.intervals):
            lo[i] = interval.lo
            hi[i] = interval.hi
            left[i] = interval.left
            right[i] = interval.right
        return lo, hi, left, right

    def colorize(self, grid: np.ndarray, gap: RGB = (0, 0, 0)) -> np.ndarray:
        """(h, w) exponents -> (h, w, 3) uint8 RGB, same row order."""
        if not self.intervals:
            raise ValueError("color map has no intervals")
        lo, hi, left, right = self.arrays()
        return colorize_grid(
            np.ascontiguousarray(grid, dtype=np.float64),
            lo, hi, left, right,
            self.min_value, self.max_value,
            np.asarray(self.below, dtype=np.int64),
            np.asarray(self.above, dtype=np.int64),
            np.asarray(_check_rgb(gap), dtype=np.int64),
        )

    def copy(self) -> "IntervalColorMap":
        out = IntervalColorMap(self.below, self.above)
        for interval in self.intervals:
            out.add(interval.lo, interval.hi, interval.left, interval.right)
        return out

    # -- records -----------------------------------------------------------

    def to_lines(self) -> list[str]:
        lines = [
            "ID", str(COLORING_ID),
            "BELOW", *(str(c) for c in self.below),
            "ABOVE", *(str(c) for c in self.above),
            "COUNT", str(len(self.intervals)),
        ]
        for interval in self.intervals:
            lines.extend(interval.to_lines())
        return lines

    @classmethod
    def read(cls, reader: RecordReader) -> "IntervalColorMap":
        reader.expect_key("ID")
        ident = reader.read_int()
        if ident != COLORING_ID:
            raise RecordError(f"{reader.source}: unknown coloring id {ident}")
        got = {}

        def put(name, fn):
            def read():
                got[name] = fn()
            return read

        reader.read_keyed(
            {
                "BELOW": put("below", reader.read_rgb),
                "ABOVE": put("above", reader.read_rgb),
                "COUNT": put("count", reader.read_int),
            },
            "coloring",
        )
        count = got["count"]
        if count < 0 or count > MAX_INTERVALS:
            raise RecordError(f"{reader.source}: interval count {count} not in 0..{MAX_INTERVALS}")
        try:
            cmap = cls(got["below"], got["above"])
        except ValueError as e:
            raise RecordError(f"{reader.source}: {e}") from None
        for _ in range(count):
            cmap.add_interval(ColorInterval.read(reader))
        return cmap

    def describe(self) -> list[str]:
        if not self.intervals:
            return ["No color intervals"]
        lines = [
            "Coloring with linear RGB value interpolation in several intervals",
            f"Lyapunov exponents less than {self.min_value:f}: RGB{self.below}",
        ]
        for interval in self.intervals:
            lines.append(
                f"in [{interval.lo:.2f}..{interval.hi:.2f}] {interval.left}..{interval.right}"
            )
        lines.append(f"greater than {self.max_value:.2f}: {self.above}")
        return lines


def default_color_map() -> IntervalColorMap:
    """Markus style: yellow for order, black at zero, blue-ish chaos."""
    cmap = IntervalColorMap(below=(255, 255, 0), above=(0, 0, 0))
    cmap.add(-2.0, -0.5, (255, 255, 0), (255, 160, 0))
    cmap.add(-0.5, 0.0, (255, 160, 0), (0, 0, 0))
    cmap.add(0.0, 2.0, (0, 0, 0), (40, 80, 255))
    return cmap


# ---------------------------------------------------------------------------
# numba kernel
# ---------------------------------------------------------------------------

@njit(cache=False, fastmath=False, parallel=True)
def colorize_grid(grid, lo, hi, left, right, vmin, vmax, below, above, gap):
    h, w = grid.shape
    n = lo.size
    out = np.empty((h, w, 3), dtype=np.uint8)
    for j in prange(h):
        for i in range(w):
            v = grid[j, i]
            if v < vmin:
                for c in range(3):
                    out[j, i, c] = below[c]
                continue
            if v > vmax:
                for c in range(3):
                    out[j, i, c] = above[c]
                continue
            found = False
            for k in range(n):
                if v >= lo[k] and v < hi[k]:
                    t = (v - lo[k]) / (hi[k] - lo[k])
                    for c in range(3):
                        out[j, i, c] = left[k, c] + int(t * (right[k, c] - left[k, c]))
                    found = True
                    break
            if not found:
                for c in range(3):
                    out[j, i, c] = gap[c]
    return out
