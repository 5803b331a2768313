"""
Batch walks: render a field repeatedly while one input varies.

Every walk writes <out_dir>/<stem>.{par,bmp[,ljd]} per step and returns
the list of stems it wrote. Walks that temporarily change the field
(sequence, function, colors, window) put the original back when done.
"""

from pathlib import Path

import numpy as np

import maps
import config
from lyapunov import LyapunovField

MAX_WALK_SEQ_LEN = 64


def _stem(out_dir, name: str) -> Path:
    return Path(out_dir) / name


def _render_sweep(field: LyapunovField, out_dir, name_fn, verbose: bool) -> list[Path]:
    """Compute/save once per sweep value; once without sweeping if the function cannot sweep."""
    stems = []
    fn = field.function
    swept = fn.sweep_start()
    while True:
        value = fn.sweep.value if swept else None
        if verbose and swept:
            print(f"b={value:.10f}")
        field.compute()
        stems.append(config.save_outputs(field, _stem(out_dir, name_fn(len(stems) + 1, value))))
        if not swept or not fn.sweep_next():
            break
    return stems


def walk_b(field: LyapunovField, lo: float, hi: float, n: int, out_dir=".", verbose: bool = False) -> list[Path]:
    """Sweep the shape parameter b of the field's function from lo to hi in n steps."""
    fn = field.function
    if fn is None or not fn.has_parameter:
        print("function has no parameter b, nothing to walk")
        return []
    fn.bind_sweep(maps.ParameterSweep(lo, hi, n))
    try:
        return _render_sweep(
            field, out_dir, lambda k, b: f"walkb_{k:04d}_b_{b:+.10f}", verbose
        )
    finally:
        fn.bind_sweep(None)


def random_sequence(rng: np.random.Generator, length: int) -> str:
    return "".join(rng.choice(["A", "B"], size=length))


def walk_sequences(
    field: LyapunovField,
    count: int,
    length: int,
    seed: int | None = None,
    out_dir=".",
    verbose: bool = False,
) -> list[Path]:
    """Render `count` random A/B sequences of `length` (at most 64) symbols."""
    length = min(max(int(length), 1), MAX_WALK_SEQ_LEN)
    rng = np.random.default_rng(seed)
    saved = field.sequence
    stems = []
    try:
        for k in range(1, count + 1):
            seq = random_sequence(rng, length)
            if verbose:
                print(seq)
            field.set_sequence(seq)
            field.compute()
            stems.append(config.save_outputs(field, _stem(out_dir, f"walkseq_{k:04d}_{seq}")))
    finally:
        field.set_sequence(saved)
    return stems


def walk_composed(
    field: LyapunovField,
    kind: str,
    deriv_kinds,
    lo: float,
    hi: float,
    n: int,
    out_dir=".",
    verbose: bool = False,
) -> list[Path]:
    """
    Probe a composed function: value from `kind`, derivative from each of
    `deriv_kinds`, for all four value/derivative role combinations, each
    swept over b in [lo, hi]. The field's own function is restored after.
    """
    composed = maps.ComposedFunction(maps.new_function(kind), None)
    stems = []
    with field.borrowed_function(composed):
        for dk in deriv_kinds:
            if dk in (maps.ComposedFunction.kind, maps.PiecewiseFunction.kind):
                continue
            composed.deriv_fn = maps.new_function(dk)
            if verbose:
                print(f"derivative {dk}")
            composed.bind_sweep(maps.ParameterSweep(lo, hi, n))
            for value_role in (maps.ROLE_VALUE, maps.ROLE_DERIV):
                for deriv_role in (maps.ROLE_VALUE, maps.ROLE_DERIV):
                    composed.value_role = value_role
                    composed.deriv_role = deriv_role
                    prefix = f"walkdet_{kind}_{dk}_{value_role}{deriv_role}"
                    stems.extend(_render_sweep(
                        field,
                        out_dir,
                        lambda k, b, prefix=prefix: (
                            f"{prefix}_{k:04d}" if b is None else f"{prefix}_{k:04d}_b_{b:+.10f}"
                        ),
                        verbose,
                    ))
    return stems


def section_bands(start: float = -1.0, stop: float = 1.0, delta: float = 0.5):
    """All (vmin, vmax, dmin, dmax) with start <= min < max < stop on a delta grid."""
    def grid_from(v0):
        v = v0
        while v < stop:
            yield v
            v += delta

    for vmin in grid_from(start):
        for vmax in grid_from(vmin + delta):
            for dmin in grid_from(start):
                for dmax in grid_from(dmin + delta):
                    yield vmin, vmax, dmin, dmax


def walk_sections(
    field: LyapunovField,
    start: float = -1.0,
    stop: float = 1.0,
    delta: float = 0.5,
    out_dir=".",
    verbose: bool = False,
) -> list[Path]:
    """Enumerate interior bands of a piecewise function."""
    fn = field.function
    if not isinstance(fn, maps.PiecewiseFunction):
        print("function is not piecewise, nothing to walk")
        return []
    saved = (fn.value_min, fn.value_max, fn.deriv_min, fn.deriv_max)
    stems = []
    try:
        for k, bands in enumerate(section_bands(start, stop, delta), start=1):
            if verbose:
                print("value band [{:g}, {:g}] derivative band [{:g}, {:g}]".format(*bands))
            fn.set_bands(*bands)
            field.compute()
            stems.append(config.save_outputs(field, _stem(out_dir, f"walksection_{k:04d}"), grid=False))
    finally:
        fn.set_bands(*saved)
    return stems


def walk_tiles(field: LyapunovField, nx: int, ny: int, prefix: str = "0001", out_dir=".", verbose: bool = False) -> list[Path]:
    stems = []
    for tile in field.tile(nx, ny, verbose=verbose):
        stems.append(config.save_outputs(
            field, _stem(out_dir, f"walktile_{prefix}_{tile.index:06d}"), grid=False
        ))
    return stems


def walk_colors(field: LyapunovField, directory, out_dir=".", verbose: bool = False) -> list[Path]:
    """Re-skin the current grid with every color record found in `directory`."""
    saved = field.colors
    stems = []
    try:
        for path in config.iter_color_files(directory):
            try:
                field.colors = config.load_colors(path)
            except maps.RecordError as e:
                print(f"skipping {path}: {e}")
                continue
            if verbose:
                print(f"colors from {path}")
            stems.append(config.save_outputs(
                field, _stem(out_dir, f"walkcolordir_{len(stems) + 1:04d}"), grid=False
            ))
    finally:
        field.colors = saved
    return stems


def walk_rgb(field: LyapunovField, count: int = 64, seed: int | None = None, out_dir=".", verbose: bool = False) -> list[Path]:
    """Each step paints one random interval with random end colors (kept afterwards)."""
    if field.colors is None or not len(field.colors):
        print("no color intervals, nothing to walk")
        return []
    rng = np.random.default_rng(seed)
    stems = []
    for k in range(1, count + 1):
        interval = field.colors.intervals[int(rng.integers(len(field.colors)))]
        interval.set_left(rng.integers(0, 256, size=3))
        interval.set_right(rng.integers(0, 256, size=3))
        if verbose:
            print(interval)
        stems.append(config.save_outputs(field, _stem(out_dir, f"walkrgb_{k:04d}"), grid=False))
    return stems
