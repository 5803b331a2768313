"""
Map function code generation and JIT compilation utilities.

This module contains:
- Function text generation for value / derivative / value+derivative
- Python function builders (exec into the helper namespace)
- JIT compilation wrappers with explicit signatures
- Symbolic (sympy) verification of hand-written derivatives

Every generated function has the signature ``f(x, r, params)`` where
``params`` is the flat float64 parameter array of the whole function tree.
"""

import math
import sympy as sp
from numba import njit, types

from . import functions


# ---------------------------------------------------------------------------
# JIT function signatures
# ---------------------------------------------------------------------------

PARAMS_TYPE = types.Array(types.float64, 1, 'C')

VALUE_SIG = types.float64(
    types.float64,   # x, the mapped variable
    types.float64,   # r, the forced parameter (A or B)
    PARAMS_TYPE,     # params
)

DERIV_SIG = types.float64(
    types.float64,
    types.float64,
    PARAMS_TYPE,
)

VALUE_DERIV_SIG = types.UniTuple(types.float64, 2)(
    types.float64,
    types.float64,
    PARAMS_TYPE,
)


# ---------------------------------------------------------------------------
# Build python function text
# ---------------------------------------------------------------------------

def _local_lines(local_exprs: dict) -> list[str]:
    lines = []
    for key, value in local_exprs.items():
        if not isinstance(key, str):
            raise TypeError(f"Only str keys supported, got {type(key)!r}")
        if not key.isidentifier():
            raise ValueError(f"Key {key!r} is not a valid Python identifier")
        lines.append(f"    {key} = {value}")
    return lines


def funtext_value(name: str, expr: str, local_exprs: dict) -> str:
    lines = [f"def {name}(x, r, params):"]
    lines.extend(_local_lines(local_exprs))
    lines.extend([
        f"    x_next = {expr}",
        f"    return x_next",
    ])
    return "\n".join(lines)


def funtext_deriv(name: str, deriv_expr: str, local_exprs: dict) -> str:
    lines = [f"def {name}(x, r, params):"]
    lines.extend(_local_lines(local_exprs))
    lines.extend([
        f"    dx = {deriv_expr}",
        f"    return dx",
    ])
    return "\n".join(lines)


def funtext_value_deriv(name: str, expr: str, deriv_expr: str, local_exprs: dict) -> str:
    # the value line is written exactly as in funtext_value so both paths
    # produce the same bits
    lines = [f"def {name}(x, r, params):"]
    lines.extend(_local_lines(local_exprs))
    lines.extend([
        f"    x_next = {expr}",
        f"    dx = {deriv_expr}",
        f"    return x_next, dx",
    ])
    return "\n".join(lines)


def funtext_delegate(name: str, target: str) -> str:
    return "\n".join([
        f"def {name}(x, r, params):",
        f"    return {target}(x, r, params)",
    ])


def funtext_pair(name: str, value_target: str, deriv_target: str) -> str:
    return "\n".join([
        f"def {name}(x, r, params):",
        f"    x_next = {value_target}(x, r, params)",
        f"    dx = {deriv_target}(x, r, params)",
        f"    return x_next, dx",
    ])


def funtext_band(name: str, lo_slot: int, hi_slot: int, interior: str, exterior: str) -> str:
    return "\n".join([
        f"def {name}(x, r, params):",
        f"    if x < params[{lo_slot}] or x > params[{hi_slot}]:",
        f"        return {exterior}(x, r, params)",
        f"    return {interior}(x, r, params)",
    ])


# ---------------------------------------------------------------------------
# Build python / jit functions from text
# ---------------------------------------------------------------------------

def funpy(src: str, name: str, extra: dict | None = None):
    ns = functions.NS.copy()
    if extra:
        ns.update(extra)
    exec(src, ns, ns)
    return ns[name]


def funjit(src: str, name: str, sig, extra: dict | None = None):
    fun = funpy(src, name, extra)
    jit = njit(sig, cache=False, fastmath=False)(fun)
    return jit


# ---------------------------------------------------------------------------
# Symbolic derivative check (x derivative of map expression)
# ---------------------------------------------------------------------------

x, r, b = sp.symbols("x r b")

locs = {
    "x": x,
    "r": r,
    "b": b,
    "sin": sp.sin,
    "cos": sp.cos,
    "atan": sp.atan,
}

# (x, r, b) probes for the numeric fallback
_PROBES = [
    (0.1, 2.3, 2.7),
    (0.45, 3.1, 1.3),
    (-0.7, 1.9, 0.6),
    (0.9, 3.8, 2.1),
    (1.6, -0.4, 3.3),
]


def sympify_template(expr: str, common: dict | None = None) -> sp.Expr:
    """Parse a template expression, expanding its common sub-expressions."""
    scope = dict(locs)
    for key, value in (common or {}).items():
        scope[key] = sp.sympify(value, locals=scope)
    return sp.sympify(expr, locals=scope)


def sympy_deriv(expr_str: str, common: dict | None = None) -> str:
    expr = sympify_template(expr_str, common)
    return sp.sstr(sp.diff(expr, x))


def derivative_matches(expr: str, deriv_expr: str, common: dict | None = None) -> bool:
    """
    True if ``deriv_expr`` is the analytic x-derivative of ``expr``.

    Tries symbolic simplification first and falls back to comparing the
    two at a handful of probe points.
    """
    f = sympify_template(expr, common)
    g = sympify_template(deriv_expr, common)
    diff = sp.diff(f, x) - g
    if sp.simplify(sp.expand_trig(diff)) == 0:
        return True
    fn = sp.lambdify((x, r, b), diff, modules="math")
    for px, pr, pb in _PROBES:
        v = fn(px, pr, pb)
        if not math.isfinite(v) or abs(v) > 1e-9:
            return False
    return True
