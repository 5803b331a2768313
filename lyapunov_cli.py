#!/usr/bin/env python
"""
lyapunov_cli.py

Markus-Lyapunov renderer for forced 1-D maps.

A picture is fully described by a parameter record (.par): the map
function, the color intervals, the window in the (A, B) plane, the A/B
sequence and the iteration counts. Every run writes

    <stem>.par    the parameters actually used
    <stem>.bmp    the picture (or .png/.jpg with --format)
    <stem>.ljd    the raw exponent grid

so a picture can be re-colored or zoomed later without guessing.

    lyapunov_cli.py new start.par --map sine_squared --b 2.9
    lyapunov_cli.py render start.par --size 1200 1200 --out big
    lyapunov_cli.py render big.par --crop 300 900 700 500 --out zoom
    lyapunov_cli.py recolor big.par colors.par --out big_blue
    lyapunov_cli.py walk-b start.par 2.0 3.0 20 --out-dir frames
"""

import argparse
import time
from pathlib import Path

import maps
import config
import gridfile
import raster
import walks


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

def _load(path):
    field = config.load_params(path)
    print(f"loaded {path}")
    return field


def _save(field, stem, fmt: str, descr: bool) -> None:
    stem = config.save_outputs(field, stem, image=(fmt == "bmp"), descr=descr)
    if fmt != "bmp":
        fn = stem.with_name(f"{stem.name}.{fmt}")
        raster.save_image(fn, field.render())
        print(f"saved: {fn}")
    else:
        print(f"saved: {stem}.bmp")


def _compute(field, rows=None, verbose=True) -> None:
    start, end = (0, field.height - 1) if rows is None else rows
    t0 = time.perf_counter()
    field.compute(start, end, verbose=verbose)
    print(f"field time: {time.perf_counter() - t0:.3f}s")


def _print_field(field) -> None:
    print(f"function {field.function.formula()}")
    for line in config.describe_window(field):
        print(line)
    print(f"Image size ({field.width}|{field.height})")
    print(f"sequence {field.sequence}")
    print(f"iterations ({field.settling}|{field.measuring})")
    print("================================")


def _apply_overrides(field, args) -> None:
    if args.size is not None:
        field.set_size(*args.size)
    if args.iter is not None:
        field.set_iterations(*args.iter)
    if args.seq is not None:
        field.set_sequence(args.seq)
    if args.x0 is not None:
        field.x0 = args.x0
    if args.b is not None:
        if not field.function.set_parameter(args.b):
            print("WARNING: function has no parameter b")
    if args.position is not None:
        a = args.position
        field.set_position((a[0], a[1]), (a[2], a[3]), (a[4], a[5]))
    if args.rotate is not None:
        field.rotate(args.rotate)
    if args.stretch is not None:
        field.stretch(*args.stretch)
    if args.crop is not None:
        field.crop(*args.crop)
    if args.center is not None:
        field.recenter_on_pixel(*args.center)


# ---------------------------------------------------------------------------
# commands
# ---------------------------------------------------------------------------

def cmd_maps(args) -> None:
    for kind, ident in sorted(maps.KIND_IDS.items(), key=lambda kv: kv[1]):
        if kind in maps.MAP_TEMPLATES:
            fn = maps.new_function(kind)
            tag = "exact" if fn.exact_derivative else "detached"
            print(f"{ident:3d} {kind:20s} {tag:8s} f(x)={fn.formula()}   g(x)={fn.deriv_formula()}")
        else:
            print(f"{ident:3d} {kind}")


def cmd_new(args) -> None:
    fn = maps.new_function(args.map)
    if args.b is not None:
        fn.set_parameter(args.b)
    field = config.default_field(function=fn)
    if args.size is not None:
        field.set_size(*args.size)
    config.save_params(field, args.path)
    print(f"saved: {args.path}")


# options that change what the grid holds
GRID_OPTIONS = ("size", "iter", "seq", "x0", "b", "position", "rotate", "stretch", "crop", "center", "rows")


def cmd_render(args) -> None:
    if args.reuse_grid:
        given = [name for name in GRID_OPTIONS if getattr(args, name) is not None]
        if given:
            raise SystemExit(f"--reuse-grid cannot be combined with --{given[0]}")
    field = _load(args.path)
    if args.reuse_grid:
        ljd = Path(args.path).with_suffix(".ljd")
        if not gridfile.load_grid_into(field, ljd):
            raise SystemExit(f"{ljd} not found")
        print(f"Lyapunov values loaded from {ljd}")
        _print_field(field)
    else:
        _apply_overrides(field, args)
        _print_field(field)
        rows = None if args.rows is None else tuple(args.rows)
        _compute(field, rows, verbose=not args.quiet)
    _save(field, args.out or Path(args.path).with_suffix(""), args.format, args.descr)


def cmd_recolor(args) -> None:
    field = _load(args.path)
    ljd = Path(args.path).with_suffix(".ljd")
    if not gridfile.load_grid_into(field, ljd):
        raise SystemExit(f"{ljd} not found")
    field.colors = config.load_colors(args.colors)
    print(f"colors from {args.colors}")
    _save(field, args.out, args.format, False)


def cmd_describe(args) -> None:
    field = _load(args.path)
    for line in field.describe():
        print(line)
    for line in config.describe_window(field):
        print(line)


def cmd_walk_b(args) -> None:
    field = _load(args.path)
    stems = walks.walk_b(field, args.lo, args.hi, args.n, args.out_dir, verbose=True)
    print(f"{len(stems)} pictures")


def cmd_walk_seq(args) -> None:
    field = _load(args.path)
    stems = walks.walk_sequences(field, args.count, args.length, args.seed, args.out_dir, verbose=True)
    print(f"{len(stems)} pictures")


def cmd_walk_det(args) -> None:
    field = _load(args.path)
    lo, hi = args.range
    stems = walks.walk_composed(
        field, args.kind, args.deriv, lo, hi, args.n, args.out_dir, verbose=True
    )
    print(f"{len(stems)} pictures")


def cmd_walk_section(args) -> None:
    field = _load(args.path)
    stems = walks.walk_sections(field, args.start, args.stop, args.delta, args.out_dir, verbose=True)
    print(f"{len(stems)} pictures")


def cmd_walk_tile(args) -> None:
    field = _load(args.path)
    stems = walks.walk_tiles(field, args.nx, args.ny, args.prefix, args.out_dir, verbose=True)
    print(f"{len(stems)} pictures")


def cmd_walk_colors(args) -> None:
    field = _load(args.path)
    ljd = Path(args.path).with_suffix(".ljd")
    if not gridfile.load_grid_into(field, ljd):
        _compute(field)
    stems = walks.walk_colors(field, args.directory, args.out_dir, verbose=True)
    print(f"{len(stems)} pictures")


def cmd_walk_rgb(args) -> None:
    field = _load(args.path)
    ljd = Path(args.path).with_suffix(".ljd")
    if not gridfile.load_grid_into(field, ljd):
        _compute(field)
    stems = walks.walk_rgb(field, args.count, args.seed, args.out_dir)
    print(f"{len(stems)} pictures")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        "lyapunov-cli",
        description=(
            "Markus-Lyapunov renderer for forced 1D maps.\n"
            "Parameters live in .par records; every run writes .par/.bmp/.ljd."
        ),
    )
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("maps", help="List map functions.")
    s.set_defaults(func=cmd_maps)

    s = sub.add_parser("new", help="Write a default parameter record.")
    s.add_argument("path", help="Output .par path.")
    s.add_argument(
        "--map",
        default=maps.DEFAULT_MAP_NAME,
        choices=sorted(maps.MAP_TEMPLATES),
        help="Map function.",
    )
    s.add_argument("--b", type=float, default=None, help="Shape parameter b.")
    s.add_argument("--size", type=int, nargs=2, metavar=("W", "H"), default=None)
    s.set_defaults(func=cmd_new)

    s = sub.add_parser("render", help="Load a record, apply overrides, compute and save.")
    s.add_argument("path", help="Parameter record (.par).")
    s.add_argument("--out", default=None, help="Output stem (default: next to the record).")
    s.add_argument("--format", default="bmp", choices=["bmp", "png", "jpg", "tif"])
    s.add_argument("--size", type=int, nargs=2, metavar=("W", "H"), default=None)
    s.add_argument(
        "--iter",
        type=int,
        nargs=2,
        metavar=("SETTLING", "MEASURING"),
        default=None,
        help="Iteration counts (truncated to even).",
    )
    s.add_argument("--seq", default=None, help="A/B sequence, e.g. AB, A5B5, (AB)4BA.")
    s.add_argument("--x0", type=float, default=None)
    s.add_argument("--b", type=float, default=None, help="Shape parameter b.")
    s.add_argument(
        "--position",
        type=float,
        nargs=6,
        metavar=("LLX", "LLY", "LRX", "LRY", "ULX", "ULY"),
        default=None,
        help="Window corners.",
    )
    s.add_argument("--rotate", type=float, default=None, help="Rotate the window by degrees.")
    s.add_argument("--stretch", type=float, nargs="+", default=None, help="FX [FY] about the center.")
    s.add_argument(
        "--crop",
        type=int,
        nargs=4,
        metavar=("LEFT", "BOTTOM", "RIGHT", "TOP"),
        default=None,
        help="Zoom into a pixel rectangle (image coordinates, y down).",
    )
    s.add_argument("--center", type=int, nargs=2, metavar=("PX", "PY"), default=None)
    s.add_argument("--rows", type=int, nargs=2, metavar=("START", "END"), default=None)
    s.add_argument("--reuse-grid", action="store_true", help="Load <record>.ljd instead of computing; no window or field options.")
    s.add_argument("--descr", action="store_true", help="Also write a .descr text.")
    s.add_argument("--quiet", action="store_true", help="No progress output.")
    s.set_defaults(func=cmd_render)

    s = sub.add_parser("recolor", help="Re-skin an existing grid with another color record.")
    s.add_argument("path", help="Parameter record; its .ljd must exist.")
    s.add_argument("colors", help="Color-only or full parameter record.")
    s.add_argument("--out", required=True, help="Output stem.")
    s.add_argument("--format", default="bmp", choices=["bmp", "png", "jpg", "tif"])
    s.set_defaults(func=cmd_recolor)

    s = sub.add_parser("describe", help="Print a description of a record.")
    s.add_argument("path")
    s.set_defaults(func=cmd_describe)

    s = sub.add_parser("walk-b", help="Sweep the shape parameter b.")
    s.add_argument("path")
    s.add_argument("lo", type=float)
    s.add_argument("hi", type=float)
    s.add_argument("n", type=int)
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_b)

    s = sub.add_parser("walk-seq", help="Random A/B sequences.")
    s.add_argument("path")
    s.add_argument("count", type=int)
    s.add_argument("length", type=int)
    s.add_argument("--seed", type=int, default=None)
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_seq)

    s = sub.add_parser("walk-det", help="Composed value/derivative probes.")
    s.add_argument("path")
    s.add_argument("--kind", required=True, choices=sorted(maps.MAP_TEMPLATES))
    s.add_argument("--deriv", nargs="+", required=True, choices=sorted(maps.MAP_TEMPLATES))
    s.add_argument("--range", type=float, nargs=2, metavar=("LO", "HI"), default=(2.0, 3.0))
    s.add_argument("--n", type=int, default=5)
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_det)

    s = sub.add_parser("walk-section", help="Enumerate piecewise bands.")
    s.add_argument("path")
    s.add_argument("--start", type=float, default=-1.0)
    s.add_argument("--stop", type=float, default=1.0)
    s.add_argument("--delta", type=float, default=0.5)
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_section)

    s = sub.add_parser("walk-tile", help="Split the window into tiles.")
    s.add_argument("path")
    s.add_argument("nx", type=int)
    s.add_argument("ny", type=int)
    s.add_argument("--prefix", default="0001")
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_tile)

    s = sub.add_parser("walk-colors", help="Apply every color record in a directory.")
    s.add_argument("path")
    s.add_argument("directory")
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_colors)

    s = sub.add_parser("walk-rgb", help="Randomise interval colors.")
    s.add_argument("path")
    s.add_argument("--count", type=int, default=64)
    s.add_argument("--seed", type=int, default=None)
    s.add_argument("--out-dir", default=".")
    s.set_defaults(func=cmd_walk_rgb)

    return p


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (ValueError, FileNotFoundError) as e:
        # RecordError, GridShapeError and CapacityError are ValueErrors
        raise SystemExit(f"error: {e}")


if __name__ == "__main__":
    main()
