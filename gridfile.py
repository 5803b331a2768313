"""
Exponent grid files (.ljd).

Layout, little-endian:

    int32   width
    int32   height
    float64 width*height exponents, row-major, row 0 = lower edge
"""

from pathlib import Path

import numpy as np

from maps import GridShapeError

HEADER = np.dtype("<i4")
VALUES = np.dtype("<f8")


def save_grid(path, grid: np.ndarray) -> None:
    grid = np.asarray(grid, dtype=np.float64)
    h, w = grid.shape
    with open(path, "wb") as f:
        np.asarray([w, h], dtype=HEADER).tofile(f)
        np.ascontiguousarray(grid, dtype=VALUES).tofile(f)


def read_grid_size(path) -> tuple[int, int]:
    header = np.fromfile(path, dtype=HEADER, count=2)
    if header.size != 2:
        raise GridShapeError(f"{path}: truncated header")
    return int(header[0]), int(header[1])


def load_grid(path, expected: tuple[int, int] | None = None) -> np.ndarray:
    """
    Read a grid; with `expected` = (width, height) the declared size must
    match or GridShapeError is raised before any values are read.
    """
    w, h = read_grid_size(path)
    if expected is not None and (w, h) != tuple(expected):
        raise GridShapeError(f"{path}: grid is {w}x{h}, expected {expected[0]}x{expected[1]}")
    if w < 0 or h < 0:
        raise GridShapeError(f"{path}: bad size {w}x{h}")
    with open(path, "rb") as f:
        f.seek(2 * HEADER.itemsize)
        data = np.fromfile(f, dtype=VALUES, count=w * h)
    if data.size != w * h:
        raise GridShapeError(f"{path}: expected {w * h} values, found {data.size}")
    return data.astype(np.float64).reshape(h, w)


def load_grid_into(field, path) -> bool:
    """
    Load `path` into `field`; False if the file is missing. The field is
    left untouched when the sizes disagree.
    """
    if not Path(path).exists():
        return False
    grid = load_grid(path, expected=(field.width, field.height))
    field.load_grid(grid)
    return True
