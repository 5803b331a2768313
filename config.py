"""
Parameter record <-> LyapunovField.

A parameter record (.par) is a line-oriented key/value text file. Keys are
case-insensitive, each followed by its value lines; lines starting with
'#' or '.' between keys are comments. Every key is mandatory and appears
once:

    FUNCTION     tagged function record (recursive for composed/piecewise)
    COLORING     tagged color map record
    WIDTH        int, rounded down to a multiple of 4
    HEIGHT       int, rounded down to a multiple of 4
    SETTLING     int, truncated to even
    MEASURING    int, truncated to even
    X0           float
    SEQUENCE     A/B string
    UPPERLEFT    two floats
    LOWERLEFT    two floats
    LOWERRIGHT   two floats

A color-only record holds just the COLORING key.
"""

from pathlib import Path

import maps
import affine
import field_color
import gridfile
import raster
from lyapunov import LyapunovField

PARAM_KEYS = (
    "FUNCTION",
    "COLORING",
    "WIDTH",
    "HEIGHT",
    "SETTLING",
    "MEASURING",
    "X0",
    "SEQUENCE",
    "UPPERLEFT",
    "LOWERLEFT",
    "LOWERRIGHT",
)


# ---------------------------------------------------------------------------
# field -> record
# ---------------------------------------------------------------------------

def field_to_lines(field: LyapunovField) -> list[str]:
    if field.function is None or field.colors is None:
        raise ValueError("field needs a function and a color map to be saved")
    lines = ["FUNCTION"]
    lines.extend(field.function.to_lines())
    lines.append("COLORING")
    lines.extend(field.colors.to_lines())
    lines.extend([
        "WIDTH", str(field.width),
        "HEIGHT", str(field.height),
        "SETTLING", str(field.settling),
        "MEASURING", str(field.measuring),
        "X0", maps.fmt_float(field.x0),
        "SEQUENCE", field.sequence,
        "UPPERLEFT", maps.fmt_float(field.upperleft.x), maps.fmt_float(field.upperleft.y),
        "LOWERLEFT", maps.fmt_float(field.lowerleft.x), maps.fmt_float(field.lowerleft.y),
        "LOWERRIGHT", maps.fmt_float(field.lowerright.x), maps.fmt_float(field.lowerright.y),
    ])
    return lines


def field_to_text(field: LyapunovField) -> str:
    return "\n".join(field_to_lines(field)) + "\n"


def save_params(field: LyapunovField, path) -> None:
    maps.write_text(path, field_to_lines(field))


def save_colors(cmap: field_color.IntervalColorMap, path) -> None:
    maps.write_text(path, ["COLORING", *cmap.to_lines()])


# ---------------------------------------------------------------------------
# record -> field
# ---------------------------------------------------------------------------

def read_params(reader: maps.RecordReader) -> LyapunovField:
    """
    Build a new field from a parameter record.

    Raises RecordError on any malformed input; nothing half-built escapes.
    """
    got = {}

    def put(name, fn):
        def read():
            got[name] = fn()
        return read

    reader.read_keyed(
        {
            "FUNCTION": put("function", lambda: maps.read_function(reader)),
            "COLORING": put("colors", lambda: field_color.IntervalColorMap.read(reader)),
            "WIDTH": put("width", reader.read_int),
            "HEIGHT": put("height", reader.read_int),
            "SETTLING": put("settling", reader.read_int),
            "MEASURING": put("measuring", reader.read_int),
            "X0": put("x0", reader.read_float),
            "SEQUENCE": put("sequence", reader.read_text),
            "UPPERLEFT": put("upperleft", reader.read_point),
            "LOWERLEFT": put("lowerleft", reader.read_point),
            "LOWERRIGHT": put("lowerright", reader.read_point),
        },
        "parameter",
    )
    if not reader.at_end():
        raise maps.RecordError(f"{reader.source}: unexpected key {reader.peek_key()} after parameters")

    try:
        return LyapunovField(
            function=got["function"],
            colors=got["colors"],
            width=got["width"],
            height=got["height"],
            settling=got["settling"],
            measuring=got["measuring"],
            x0=got["x0"],
            sequence=got["sequence"],
            lowerleft=got["lowerleft"],
            lowerright=got["lowerright"],
            upperleft=got["upperleft"],
        )
    except ValueError as e:
        if isinstance(e, maps.RecordError):
            raise
        raise maps.RecordError(f"{reader.source}: {e}") from None


def params_from_text(text: str, source: str = "<record>") -> LyapunovField:
    return read_params(maps.RecordReader.from_text(text, source))


def load_params(path) -> LyapunovField:
    return read_params(maps.RecordReader.from_path(path))


def load_colors(path) -> field_color.IntervalColorMap:
    """
    Color map from a color-only record, or the COLORING section of a
    full parameter record.
    """
    reader = maps.RecordReader.from_path(path)
    if reader.peek_key() != "COLORING":
        return read_params(reader).colors
    reader.next_key()
    cmap = field_color.IntervalColorMap.read(reader)
    if not reader.at_end():
        raise maps.RecordError(f"{reader.source}: unexpected key {reader.peek_key()} after coloring")
    return cmap


def iter_color_files(directory):
    """Lazily yield the *.par files of `directory` in name order."""
    for path in sorted(Path(directory).glob("*.par")):
        if path.is_file():
            yield path


# ---------------------------------------------------------------------------
# defaults / outputs
# ---------------------------------------------------------------------------

def default_field(**kwargs) -> LyapunovField:
    """Logistic map over [2, 4]^2 with the default color map."""
    kwargs.setdefault("function", maps.PlainFunction(maps.DEFAULT_MAP_NAME))
    kwargs.setdefault("colors", field_color.default_color_map())
    return LyapunovField(**kwargs)


def save_outputs(field: LyapunovField, stem, image: bool = True, grid: bool = True, descr: bool = False) -> Path:
    """
    Write <stem>.par and, as asked, <stem>.bmp, <stem>.ljd, <stem>.descr.
    Returns the stem as a Path.
    """
    stem = Path(stem)
    stem.parent.mkdir(parents=True, exist_ok=True)
    save_params(field, stem.with_name(stem.name + ".par"))
    if image:
        raster.save_bmp(stem.with_name(stem.name + ".bmp"), field.render())
    if grid:
        gridfile.save_grid(stem.with_name(stem.name + ".ljd"), field.grid)
    if descr:
        maps.write_text(stem.with_name(stem.name + ".descr"), field.describe())
    return stem


def load_outputs(stem) -> tuple[LyapunovField, bool]:
    """Load <stem>.par and, if present, <stem>.ljd. Returns (field, grid_loaded)."""
    stem = Path(stem)
    field = load_params(stem.with_name(stem.name + ".par"))
    loaded = gridfile.load_grid_into(field, stem.with_name(stem.name + ".ljd"))
    return field, loaded


def describe_window(field: LyapunovField) -> list[str]:
    return affine.describe_domain(field.domain)
