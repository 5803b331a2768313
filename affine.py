"""
Domain / affine window helpers.

The sampling window is a parallelogram in the (A, B) parameter plane
given by three corners, stored as a 6-float array

    [llx, lly, ulx, uly, lrx, lry]

    LL = lower-left   (pixel col 0, row 0)
    UL = upper-left   (pixel col 0, row height)
    LR = lower-right  (pixel col width, row 0)

All helpers return a new array and leave their input alone. Pixel
arguments of crop/recenter are image coordinates: x to the right, y down
from the top edge of the rendered picture, so grid row = height - y.
"""

import math
import numpy as np


def make_domain(lowerleft, lowerright, upperleft) -> np.ndarray:
    llx, lly = lowerleft
    lrx, lry = lowerright
    ulx, uly = upperleft
    return np.asarray([llx, lly, ulx, uly, lrx, lry], dtype=np.float64)


def domain_corners(domain: np.ndarray):
    """-> (lowerleft, lowerright, upperleft) as (x, y) tuples."""
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    return (llx, lly), (lrx, lry), (ulx, uly)


def domain_center(domain: np.ndarray) -> tuple[float, float]:
    """Parallelogram center C = 0.5*(UL + LR)."""
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    return 0.5 * (ulx + lrx), 0.5 * (uly + lry)


def domain_size(domain: np.ndarray) -> float:
    """Length of the longer of the two edges leaving LL."""
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    return math.sqrt(max(
        (lrx - llx) ** 2 + (lry - lly) ** 2,
        (ulx - llx) ** 2 + (uly - lly) ** 2,
    ))


def is_degenerate(domain: np.ndarray) -> bool:
    """True if LL, UL, LR are colinear."""
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    vx0 = lrx - llx
    vy0 = lry - lly
    vx1 = ulx - llx
    vy1 = uly - lly
    return abs(vx0 * vy1 - vx1 * vy0) == 0.0


def pixel_point(domain: np.ndarray, width: int, height: int, col: float, row: float):
    """(A, B) = LL + row * vy + col * vx with vx = (LR-LL)/width, vy = (UL-LL)/height."""
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    A = llx + col * (lrx - llx) / width + row * (ulx - llx) / height
    B = lly + col * (lry - lly) / width + row * (uly - lly) / height
    return A, B


# ---------------------------------------------------------------------------
# rotate / stretch about the center
# ---------------------------------------------------------------------------

def _rotate_point_xy(x: float, y: float, cx: float, cy: float, c: float, s: float):
    dx = x - cx
    dy = y - cy
    xr = cx + c * dx - s * dy
    yr = cy + s * dx + c * dy
    return float(xr), float(yr)


def rotate_domain(domain: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate LL, UL, LR by `degrees` (counter-clockwise) about the center."""
    if degrees == 0.0:
        return domain.copy()

    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    cx, cy = domain_center(domain)

    theta = math.radians(float(degrees))
    c = math.cos(theta)
    s = math.sin(theta)

    llx, lly = _rotate_point_xy(llx, lly, cx, cy, c, s)
    ulx, uly = _rotate_point_xy(ulx, uly, cx, cy, c, s)
    lrx, lry = _rotate_point_xy(lrx, lry, cx, cy, c, s)

    return np.asarray([llx, lly, ulx, uly, lrx, lry], dtype=np.float64)


def stretch_domain(domain: np.ndarray, fx: float, fy: float) -> np.ndarray:
    """Scale each corner's offset from the center by (fx, fy)."""
    cx, cy = domain_center(domain)
    out = domain.astype(np.float64, copy=True)
    out[0::2] = cx + (out[0::2] - cx) * float(fx)
    out[1::2] = cy + (out[1::2] - cy) * float(fy)
    return out


# ---------------------------------------------------------------------------
# pixel addressed: crop / recenter
# ---------------------------------------------------------------------------

def crop_domain(
    domain: np.ndarray,
    width: int,
    height: int,
    left: int,
    bottom: int,
    right: int,
    top: int,
) -> np.ndarray:
    """
    Zoom into the pixel rectangle (left, bottom)-(right, top).

    The new corners are the parameter points currently sampled at those
    pixels; nothing is resampled.
    """
    ll = pixel_point(domain, width, height, left, height - bottom)
    lr = pixel_point(domain, width, height, right, height - bottom)
    ul = pixel_point(domain, width, height, left, height - top)
    return make_domain(ll, lr, ul)


def recenter_domain(domain: np.ndarray, width: int, height: int, px: int, py: int) -> np.ndarray:
    """Translate the window so the point sampled at pixel (px, py) becomes its center."""
    cx, cy = domain_center(domain)
    tx, ty = pixel_point(domain, width, height, px, height - py)
    out = domain.astype(np.float64, copy=True)
    out[0::2] += tx - cx
    out[1::2] += ty - cy
    return out


# ---------------------------------------------------------------------------
# tiling
# ---------------------------------------------------------------------------

def tile_domains(domain: np.ndarray, nx: int, ny: int):
    """
    Yield (col, row, sub_domain) for an nx x ny split of the window,
    columns outer, rows inner.
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"tile counts must be >= 1, got {nx}x{ny}")
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    vxx = (lrx - llx) / nx
    vxy = (lry - lly) / nx
    vyx = (ulx - llx) / ny
    vyy = (uly - lly) / ny
    for i in range(nx):
        for j in range(ny):
            ll = (llx + i * vxx + j * vyx, lly + i * vxy + j * vyy)
            lr = (llx + (i + 1) * vxx + j * vyx, lly + (i + 1) * vxy + j * vyy)
            ul = (llx + i * vxx + (j + 1) * vyx, lly + i * vxy + (j + 1) * vyy)
            yield i, j, make_domain(ll, lr, ul)


def describe_domain(domain: np.ndarray) -> list[str]:
    llx, lly, ulx, uly, lrx, lry = map(float, domain.tolist())
    lines = [
        f"upper left ({ulx:e}|{uly:e})",
        f"lower left ({llx:e}|{lly:e})",
        f"lower right ({lrx:e}|{lry:e})",
    ]
    if is_degenerate(domain):
        lines.append("WARNING: affine domain is degenerate (LL, UL, LR colinear)")
    return lines
