"""
Map function variants.

A map function is a small tree:

    PlainFunction        value/derivative from a template (normal or detached)
    ComposedFunction     value from child A, derivative from child B; each
                         child contributes either its value or its derivative
    PiecewiseFunction    interior child inside a band of x, exterior outside;
                         the value path and the derivative path have their
                         own bands

Every node compiles to three numba functions with the signature
``f(x, r, params)``: value, derivative and value+derivative. Numeric
settings (shape parameter b, band bounds) are not baked into the code but
read from a flat ``params`` array in which every node owns a slot range,
so sweeping b or moving a band never triggers a recompile.
"""

from typing import NamedTuple

import numpy as np

from . import map_functions as mf
from .defaults import DEFAULT_MAP_NAME
from .errors import RecordError
from .maps_plain import MAPS_NORMAL, MAPS_DETACHED
from .records import RecordReader, fmt_float

FAMILY_NORMAL = "normal"
FAMILY_DETACHED = "detached"
FAMILY_COMPOSED = "composed"
FAMILY_PIECEWISE = "piecewise"

# composed child roles
ROLE_VALUE = 1
ROLE_DERIV = 2

COMPOSED_ID = 16
PIECEWISE_ID = 17

MAP_TEMPLATES: dict[str, dict] = {}
MAP_TEMPLATES.update(MAPS_NORMAL)
MAP_TEMPLATES.update(MAPS_DETACHED)


class CompiledMap(NamedTuple):
    value: object
    deriv: object
    value_deriv: object
    params: np.ndarray


# structural key -> (value, deriv, value_deriv) dispatchers
_JIT_CACHE: dict[tuple, tuple] = {}


class MapFunction:
    kind = ""
    ident = 0
    family = ""

    def __init__(self):
        self.sweep = None
        self._offset = 0

    # -- shape parameter ---------------------------------------------------

    @property
    def has_parameter(self) -> bool:
        return False

    def set_parameter(self, b: float) -> bool:
        return False

    # -- parameter sweeps --------------------------------------------------

    def bind_sweep(self, sweep) -> None:
        self.sweep = sweep

    def sweep_start(self) -> bool:
        if self.sweep is None or not self.has_parameter:
            return False
        if not self.sweep.start():
            return False
        self.set_parameter(self.sweep.value)
        return True

    def sweep_next(self) -> bool:
        if self.sweep is None or not self.has_parameter:
            return False
        if not self.sweep.next():
            return False
        self.set_parameter(self.sweep.value)
        return True

    # -- compilation -------------------------------------------------------

    def layout(self, offset: int = 0) -> int:
        """Assign params slots depth-first; returns the next free slot."""
        self._offset = offset
        return offset

    def pack(self, params: np.ndarray) -> None:
        pass

    def jit_key(self) -> tuple:
        raise NotImplementedError

    def build(self) -> tuple:
        raise NotImplementedError

    def jitted(self) -> tuple:
        key = self.jit_key()
        fns = _JIT_CACHE.get(key)
        if fns is None:
            fns = self.build()
            _JIT_CACHE[key] = fns
        return fns

    def compile(self) -> CompiledMap:
        size = self.layout(0)
        params = np.zeros(size, dtype=np.float64)
        self.pack(params)
        value, deriv, value_deriv = self.jitted()
        return CompiledMap(value, deriv, value_deriv, params)

    # -- evaluation --------------------------------------------------------

    def value(self, x: float, r: float) -> float:
        c = self.compile()
        return c.value(float(x), float(r), c.params)

    def deriv(self, x: float, r: float) -> float:
        c = self.compile()
        return c.deriv(float(x), float(r), c.params)

    def value_deriv(self, x: float, r: float) -> tuple[float, float]:
        c = self.compile()
        return c.value_deriv(float(x), float(r), c.params)

    # -- text --------------------------------------------------------------

    def formula(self) -> str:
        raise NotImplementedError

    def deriv_formula(self) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.kind}: {self.formula()}>"

    # -- records -----------------------------------------------------------

    def to_lines(self) -> list[str]:
        lines = ["ID", str(self.ident), f"#{self.family.upper()} {self.kind}"]
        self.write_fields(lines)
        return lines

    def write_fields(self, lines: list[str]) -> None:
        pass

    def read_fields(self, reader: RecordReader) -> None:
        pass


class PlainFunction(MapFunction):
    """A template map: value expression plus hand-written derivative."""

    def __init__(self, kind: str = DEFAULT_MAP_NAME, b: float | None = None):
        super().__init__()
        if kind not in MAP_TEMPLATES:
            raise KeyError(f"Unknown map '{kind}'")
        self.kind = kind
        self.template = MAP_TEMPLATES[kind]
        self.ident = self.template["ident"]
        self.family = FAMILY_DETACHED if kind in MAPS_DETACHED else FAMILY_NORMAL
        self.b = self.template["b"]
        if b is not None and self.has_parameter:
            self.b = float(b)

    @property
    def has_parameter(self) -> bool:
        return self.template["b"] is not None

    @property
    def exact_derivative(self) -> bool:
        return self.family == FAMILY_NORMAL

    def set_parameter(self, b: float) -> bool:
        if not self.has_parameter:
            return False
        self.b = float(b)
        return True

    def layout(self, offset: int = 0) -> int:
        self._offset = offset
        return offset + (1 if self.has_parameter else 0)

    def pack(self, params: np.ndarray) -> None:
        if self.has_parameter:
            params[self._offset] = self.b

    def jit_key(self) -> tuple:
        return ("plain", self.kind, self._offset if self.has_parameter else None)

    def local_exprs(self) -> dict:
        local_exprs = {}
        if self.has_parameter:
            local_exprs["b"] = f"params[{self._offset}]"
        local_exprs.update(self.template.get("common", {}))
        return local_exprs

    def build(self) -> tuple:
        t = self.template
        local_exprs = self.local_exprs()
        value = mf.funjit(
            mf.funtext_value("impl", t["expr"], local_exprs),
            "impl", mf.VALUE_SIG,
        )
        deriv = mf.funjit(
            mf.funtext_deriv("impl_deriv", t["deriv_expr"], local_exprs),
            "impl_deriv", mf.DERIV_SIG,
        )
        value_deriv = mf.funjit(
            mf.funtext_value_deriv("impl_value_deriv", t["expr"], t["deriv_expr"], local_exprs),
            "impl_value_deriv", mf.VALUE_DERIV_SIG,
        )
        return value, deriv, value_deriv

    def _fmt(self, text: str) -> str:
        b = self.b if self.has_parameter else 0.0
        return text.format(b=b, b2=b + b)

    def formula(self) -> str:
        return self._fmt(self.template["text"])

    def deriv_formula(self) -> str:
        return self._fmt(self.template["deriv_text"])

    def write_fields(self, lines: list[str]) -> None:
        if self.has_parameter:
            lines.extend(["B", fmt_float(self.b)])

    def read_fields(self, reader: RecordReader) -> None:
        if not self.has_parameter:
            return

        def read_b():
            self.b = reader.read_float()

        reader.read_keyed({"B": read_b}, self.kind)


class ComposedFunction(MapFunction):
    """
    Value from one child, derivative from another.

    Each child contributes its own value (ROLE_VALUE) or its own derivative
    (ROLE_DERIV), so one pair of children gives four f/g combinations.
    """

    kind = "composed"
    ident = COMPOSED_ID
    family = FAMILY_COMPOSED

    def __init__(
        self,
        value_fn: MapFunction | None = None,
        deriv_fn: MapFunction | None = None,
        value_role: int = ROLE_VALUE,
        deriv_role: int = ROLE_DERIV,
    ):
        super().__init__()
        self.value_fn = value_fn
        self.deriv_fn = deriv_fn
        self.value_role = _check_role(value_role)
        self.deriv_role = _check_role(deriv_role)

    def _children(self) -> list[MapFunction]:
        if self.value_fn is None or self.deriv_fn is None:
            raise ValueError("composed function needs both a value and a derivative child")
        return [self.value_fn, self.deriv_fn]

    @property
    def has_parameter(self) -> bool:
        return any(c.has_parameter for c in self._children())

    def set_parameter(self, b: float) -> bool:
        done = [c.set_parameter(b) for c in self._children()]
        return any(done)

    def layout(self, offset: int = 0) -> int:
        self._offset = offset
        for c in self._children():
            offset = c.layout(offset)
        return offset

    def pack(self, params: np.ndarray) -> None:
        for c in self._children():
            c.pack(params)

    def jit_key(self) -> tuple:
        fa, fb = self._children()
        return ("composed", fa.jit_key(), fb.jit_key(), self.value_role, self.deriv_role)

    def build(self) -> tuple:
        fa, fb = self._children()
        fa_value, fa_deriv, _ = fa.jitted()
        fb_value, fb_deriv, _ = fb.jitted()
        extra = dict(fa_value=fa_value, fa_deriv=fa_deriv, fb_value=fb_value, fb_deriv=fb_deriv)
        f_src = "fa_value" if self.value_role == ROLE_VALUE else "fa_deriv"
        g_src = "fb_value" if self.deriv_role == ROLE_VALUE else "fb_deriv"
        value = mf.funjit(mf.funtext_delegate("impl", f_src), "impl", mf.VALUE_SIG, extra)
        deriv = mf.funjit(mf.funtext_delegate("impl_deriv", g_src), "impl_deriv", mf.DERIV_SIG, extra)
        value_deriv = mf.funjit(
            mf.funtext_pair("impl_value_deriv", f_src, g_src),
            "impl_value_deriv", mf.VALUE_DERIV_SIG, extra,
        )
        return value, deriv, value_deriv

    def formula(self) -> str:
        fa, _ = self._children()
        text = fa.formula() if self.value_role == ROLE_VALUE else fa.deriv_formula()
        return f"f(x)={text}"

    def deriv_formula(self) -> str:
        _, fb = self._children()
        text = fb.formula() if self.deriv_role == ROLE_VALUE else fb.deriv_formula()
        return f"g(x)={text}"

    def write_fields(self, lines: list[str]) -> None:
        fa, fb = self._children()
        lines.extend(["VALUE_ROLE", str(self.value_role)])
        lines.extend(["DERIV_ROLE", str(self.deriv_role)])
        lines.append("VALUE")
        lines.extend(fa.to_lines())
        lines.append("DERIV")
        lines.extend(fb.to_lines())

    def read_fields(self, reader: RecordReader) -> None:
        def value_role():
            self.value_role = _read_role(reader)

        def deriv_role():
            self.deriv_role = _read_role(reader)

        def value_fn():
            self.value_fn = read_function(reader)

        def deriv_fn():
            self.deriv_fn = read_function(reader)

        reader.read_keyed(
            {
                "VALUE_ROLE": value_role,
                "DERIV_ROLE": deriv_role,
                "VALUE": value_fn,
                "DERIV": deriv_fn,
            },
            self.kind,
        )


class PiecewiseFunction(MapFunction):
    """
    Interior child for x inside a closed band, exterior child outside.

    The value path (settling iterations) tests x against
    [value_min, value_max]; the derivative path (measuring iterations)
    tests against [deriv_min, deriv_max]. The two bands are independent
    and nothing checks that they agree.
    """

    kind = "piecewise"
    ident = PIECEWISE_ID
    family = FAMILY_PIECEWISE

    def __init__(
        self,
        interior: MapFunction | None = None,
        exterior: MapFunction | None = None,
        value_band: tuple[float, float] = (-1.0, 1.0),
        deriv_band: tuple[float, float] = (-1.0, 1.0),
    ):
        super().__init__()
        self.interior = interior
        self.exterior = exterior
        self.set_bands(value_band[0], value_band[1], deriv_band[0], deriv_band[1])

    def set_bands(self, value_min: float, value_max: float, deriv_min: float, deriv_max: float) -> None:
        self.value_min = float(value_min)
        self.value_max = float(value_max)
        self.deriv_min = float(deriv_min)
        self.deriv_max = float(deriv_max)

    def _children(self) -> list[MapFunction]:
        if self.interior is None or self.exterior is None:
            raise ValueError("piecewise function needs an interior and an exterior child")
        return [self.interior, self.exterior]

    @property
    def has_parameter(self) -> bool:
        return any(c.has_parameter for c in self._children())

    def set_parameter(self, b: float) -> bool:
        done = [c.set_parameter(b) for c in self._children()]
        return any(done)

    def layout(self, offset: int = 0) -> int:
        self._offset = offset
        offset += 4
        for c in self._children():
            offset = c.layout(offset)
        return offset

    def pack(self, params: np.ndarray) -> None:
        k = self._offset
        params[k:k + 4] = (self.value_min, self.value_max, self.deriv_min, self.deriv_max)
        for c in self._children():
            c.pack(params)

    def jit_key(self) -> tuple:
        fi, fe = self._children()
        return ("piecewise", self._offset, fi.jit_key(), fe.jit_key())

    def build(self) -> tuple:
        fi, fe = self._children()
        fi_value, fi_deriv, fi_value_deriv = fi.jitted()
        fe_value, fe_deriv, fe_value_deriv = fe.jitted()
        extra = dict(
            fi_value=fi_value, fi_deriv=fi_deriv, fi_value_deriv=fi_value_deriv,
            fe_value=fe_value, fe_deriv=fe_deriv, fe_value_deriv=fe_value_deriv,
        )
        k = self._offset
        value = mf.funjit(
            mf.funtext_band("impl", k, k + 1, "fi_value", "fe_value"),
            "impl", mf.VALUE_SIG, extra,
        )
        deriv = mf.funjit(
            mf.funtext_band("impl_deriv", k + 2, k + 3, "fi_deriv", "fe_deriv"),
            "impl_deriv", mf.DERIV_SIG, extra,
        )
        value_deriv = mf.funjit(
            mf.funtext_band("impl_value_deriv", k + 2, k + 3, "fi_value_deriv", "fe_value_deriv"),
            "impl_value_deriv", mf.VALUE_DERIV_SIG, extra,
        )
        return value, deriv, value_deriv

    def formula(self) -> str:
        fi, fe = self._children()
        return (
            f"if {self.value_min:.5f} <= x <= {self.value_max:.5f}: "
            f"f(x)={fi.formula()} else f(x)={fe.formula()}"
        )

    def deriv_formula(self) -> str:
        fi, fe = self._children()
        return (
            f"if {self.deriv_min:.5f} <= x <= {self.deriv_max:.5f}: "
            f"g(x)={fi.deriv_formula()} else g(x)={fe.deriv_formula()}"
        )

    def write_fields(self, lines: list[str]) -> None:
        fi, fe = self._children()
        lines.extend(["VALUE_MIN", fmt_float(self.value_min)])
        lines.extend(["VALUE_MAX", fmt_float(self.value_max)])
        lines.extend(["DERIV_MIN", fmt_float(self.deriv_min)])
        lines.extend(["DERIV_MAX", fmt_float(self.deriv_max)])
        lines.append("INTERIOR")
        lines.extend(fi.to_lines())
        lines.append("EXTERIOR")
        lines.extend(fe.to_lines())

    def read_fields(self, reader: RecordReader) -> None:
        def setter(name):
            def read():
                setattr(self, name, reader.read_float())
            return read

        def interior():
            self.interior = read_function(reader)

        def exterior():
            self.exterior = read_function(reader)

        reader.read_keyed(
            {
                "VALUE_MIN": setter("value_min"),
                "VALUE_MAX": setter("value_max"),
                "DERIV_MIN": setter("deriv_min"),
                "DERIV_MAX": setter("deriv_max"),
                "INTERIOR": interior,
                "EXTERIOR": exterior,
            },
            self.kind,
        )


def _check_role(role: int) -> int:
    if role not in (ROLE_VALUE, ROLE_DERIV):
        raise ValueError(f"role must be {ROLE_VALUE} (value) or {ROLE_DERIV} (derivative), got {role}")
    return role


def _read_role(reader: RecordReader) -> int:
    role = reader.read_int()
    if role not in (ROLE_VALUE, ROLE_DERIV):
        raise RecordError(f"{reader.source}: bad role {role}")
    return role


# ---------------------------------------------------------------------------
# registry
# ---------------------------------------------------------------------------

KIND_IDS: dict[str, int] = {name: t["ident"] for name, t in MAP_TEMPLATES.items()}
KIND_IDS[ComposedFunction.kind] = COMPOSED_ID
KIND_IDS[PiecewiseFunction.kind] = PIECEWISE_ID

ID_KINDS: dict[int, str] = {ident: name for name, ident in KIND_IDS.items()}


def new_function(kind: str) -> MapFunction:
    """Fresh function of the given kind; composed/piecewise come without children."""
    if kind == ComposedFunction.kind:
        return ComposedFunction()
    if kind == PiecewiseFunction.kind:
        return PiecewiseFunction()
    return PlainFunction(kind)


def function_for_ident(ident: int) -> MapFunction:
    if ident not in ID_KINDS:
        raise RecordError(f"unknown function id {ident}")
    return new_function(ID_KINDS[ident])


def read_function(reader: RecordReader) -> MapFunction:
    """Read one tagged function record (recursively for composed/piecewise)."""
    reader.expect_key("ID")
    fn = function_for_ident(reader.read_int())
    fn.read_fields(reader)
    return fn


def function_from_text(text: str) -> MapFunction:
    return read_function(RecordReader.from_text(text))


def function_to_text(fn: MapFunction) -> str:
    return "\n".join(fn.to_lines()) + "\n"
