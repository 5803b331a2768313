"""
Image output.

Rendered fields are bottom-up RGB arrays (row 0 = lower edge of the
window). BMP files are written directly: 24-bit, uncompressed, BGR,
bottom-up rows, which matches the grid layout one to one. Any other
suffix (.png, .jpg, ...) goes through pyvips after flipping to top-down.
"""

import struct
from pathlib import Path

import numpy as np

BMP_HEADER_SIZE = 14 + 40
PIXELS_PER_METER = 3780  # 96 dpi


def bmp_bytes(rgb: np.ndarray) -> bytes:
    """(h, w, 3) uint8 RGB, bottom row first -> BMP file contents."""
    rgb = np.asarray(rgb, dtype=np.uint8)
    h, w, bands = rgb.shape
    if bands != 3:
        raise ValueError(f"need 3 bands, got {bands}")
    row_bytes = 3 * w
    pad = (-row_bytes) % 4
    bgr = rgb[:, :, ::-1]
    if pad:
        bgr = np.concatenate([bgr.reshape(h, row_bytes), np.zeros((h, pad), dtype=np.uint8)], axis=1)
    data = np.ascontiguousarray(bgr).tobytes()
    header = struct.pack(
        "<2sIHHI",
        b"BM",
        BMP_HEADER_SIZE + len(data),
        0,
        0,
        BMP_HEADER_SIZE,
    )
    info = struct.pack(
        "<IiiHHIIiiII",
        40,             # info header size
        w,
        h,              # positive: bottom-up
        1,              # planes
        24,             # bits per pixel
        0,              # BI_RGB
        len(data),
        PIXELS_PER_METER,
        PIXELS_PER_METER,
        0,
        0,
    )
    return header + info + data


def save_bmp(path, rgb: np.ndarray) -> None:
    Path(path).write_bytes(bmp_bytes(rgb))


def save_image(path, rgb: np.ndarray) -> None:
    """Write a bottom-up RGB array; format from the file suffix."""
    path = Path(path)
    if path.suffix.lower() == ".bmp":
        save_bmp(path, rgb)
        return
    try:
        import pyvips
    except ImportError:
        raise ImportError("pyvips required for non-BMP output. Install with: pip install pyvips")

    top_down = np.ascontiguousarray(np.flipud(np.asarray(rgb, dtype=np.uint8)))
    h, w, _ = top_down.shape
    img = pyvips.Image.new_from_memory(top_down.tobytes(), w, h, 3, "uchar")
    img.write_to_file(str(path))
