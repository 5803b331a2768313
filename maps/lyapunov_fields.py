"""
Lyapunov exponent field computation kernel.

Computes the Lyapunov exponent of a forced 1-D map over a 2-D parameter
window. The window is a parallelogram given by three corners; pixel
(row, col) samples

    (A, B) = LL + row * vy + col * vx
    vx = (LR - LL) / width
    vy = (UL - LL) / height

and the map is iterated with r = A or r = B as the A/B sequence dictates.
"""

import math
import numpy as np
from numba import njit, prange


@njit(cache=False, fastmath=False)
def basis_vectors(domain, width, height):
    llx, lly, ulx, uly, lrx, lry = domain
    vxx = (lrx - llx) / width
    vxy = (lry - lly) / width
    vyx = (ulx - llx) / height
    vyy = (uly - lly) / height
    return vxx, vxy, vyx, vyy


@njit(cache=False, fastmath=False)
def pixel_to_param(domain, width, height, row, col):
    vxx, vxy, vyx, vyy = basis_vectors(domain, width, height)
    A = domain[0] + row * vyx + col * vxx
    B = domain[1] + row * vyy + col * vxy
    return A, B


@njit(cache=False, fastmath=False, parallel=True)
def lyapunov_rows(
    value,
    value_deriv,
    seq,            # int32 array, 0 -> A, 1 -> B
    domain,         # 1D float64 array: [llx, lly, ulx, uly, lrx, lry]
    out,            # (height, width) float64, written in place
    row_start,
    row_end,        # inclusive
    x0,
    settle_pairs,
    measure_pairs,
    log_floor,
    params,
):
    """
    Fill rows [row_start, row_end] of ``out``.

    Every iteration is a pair of micro-steps. Settling pairs only move x;
    measuring pairs also collect the two derivatives and add
    log|d1 * d2| when the product is above ``log_floor``. The sequence
    position restarts at 0 for every pixel and wraps at its length.
    """
    height, width = out.shape
    seq_len = seq.size
    vxx, vxy, vyx, vyy = basis_vectors(domain, width, height)
    n_measure = 2.0 * measure_pairs

    for row in prange(row_start, row_end + 1):
        ab = np.empty(2, dtype=np.float64)
        for col in range(width):
            ab[0] = domain[0] + row * vyx + col * vxx
            ab[1] = domain[1] + row * vyy + col * vxy

            x = x0
            pos = 0

            for _ in range(settle_pairs):
                t = value(x, ab[seq[pos]], params)
                pos += 1
                if pos == seq_len:
                    pos = 0
                x = value(t, ab[seq[pos]], params)
                pos += 1
                if pos == seq_len:
                    pos = 0

            acc = 0.0
            for _ in range(measure_pairs):
                t, d1 = value_deriv(x, ab[seq[pos]], params)
                pos += 1
                if pos == seq_len:
                    pos = 0
                x, d2 = value_deriv(t, ab[seq[pos]], params)
                pos += 1
                if pos == seq_len:
                    pos = 0
                p = abs(d1 * d2)
                if p > log_floor:
                    acc += math.log(p)

            out[row, col] = acc / n_measure

    return out
