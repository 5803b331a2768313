"""
Plain map templates (family "normal" and "detached").

Each template is a single value expression f(x, r; b) together with a
hand-written derivative expression. For "normal" templates the derivative
is df/dx; "detached" templates pair a value with an unrelated derivative
formula, which is what gives their pictures their character.

Keys:
    ident       integer kind id written to records
    expr        value expression
    deriv_expr  derivative expression
    common      sub-expressions shared by expr and deriv_expr
    b           default shape parameter (None: no parameter)
    text        formula text, formatted with b
    deriv_text  derivative formula text, formatted with b
"""

from .defaults import DEFAULT_B

MAPS_NORMAL: dict[str, dict] = {

    "logistic": dict(  # classic Markus-Hess map
        ident=1,
        expr="rx * (1.0 - x)",
        deriv_expr="r - rx - rx",
        common=dict(rx="r * x"),
        b=None,
        text="r*x*(1-x)",
        deriv_text="r-2rx",
    ),

    "sine_squared": dict(
        ident=2,
        expr="b * si * si",
        deriv_expr="2.0 * b * si * cos(xr)",
        common=dict(xr="x + r", si="sin(xr)"),
        b=DEFAULT_B,
        text="{b:g}*sin^2(x+r)",
        deriv_text="{b2:g}*sin(x+r)*cos(x+r)",
    ),

    "sine_cosine": dict(
        ident=3,
        expr="b * sin(xrc)",
        deriv_expr="b * (1.0 - r * sin(xr)) * cos(xrc)",
        common=dict(xr="x + r", xrc="x + r * cos(xr)"),
        b=DEFAULT_B,
        text="{b:g}*sin(x+r*cos(x+r))",
        deriv_text="{b:g}*(1-r*sin(x+r))*cos(x+r*cos(x+r))",
    ),

    "sine_product": dict(
        ident=7,
        expr="b * sin(x + r) * sin(x - r)",
        deriv_expr="b * sin(x + x)",
        common=dict(),
        b=DEFAULT_B,
        text="{b:g}*sin(x+r)*sin(x-r)",
        deriv_text="{b:g}*sin(2x)",
    ),

    "log_sine": dict(
        ident=18,
        expr="r * sin(x) * (1.0 - b * sin(x + r))",
        deriv_expr="-r * (b * sin(x + x + r) - cos(x))",
        common=dict(),
        b=DEFAULT_B,
        text="r*sin(x)*(1-{b:g}*sin(x+r))",
        deriv_text="-r*({b:g}*sin(2x+r)-cos(x))",
    ),

    "sine_atan": dict(
        ident=22,
        expr="b * atan(xsi)",
        deriv_expr="b * (si + xr * cos(xr)) / (1.0 + xsi * xsi)",
        common=dict(xr="x + r", si="sin(xr)", xsi="xr * si"),
        b=DEFAULT_B,
        text="{b:g}*atan((x+r)*sin(x+r))",
        deriv_text="{b:g}*(sin(x+r)+(x+r)*cos(x+r))/(1+(x+r)^2*sin^2(x+r))",
    ),
}


MAPS_DETACHED: dict[str, dict] = {

    "detached_logistic": dict(
        ident=11,
        expr="b * si * si",
        deriv_expr="r - rx - rx",
        common=dict(si="sin(x + r)", rx="r * x"),
        b=DEFAULT_B,
        text="{b:g}*sin^2(x+r)",
        deriv_text="r-2rx",
    ),

    "detached_sine_mix": dict(
        ident=13,
        expr="b * sin(x + r) + b * si * si",
        deriv_expr="si2 * si2 - r * x",
        common=dict(si="sin(b * x + r)", si2="sin(x + r * b)"),
        b=DEFAULT_B,
        text="{b:g}*sin(x+r)+{b:g}*sin^2({b:g}*x+r)",
        deriv_text="sin^2(x+{b:g}*r)-r*x",
    ),

    "detached_sine_cube": dict(
        ident=14,
        expr="r * si * si + b * si2 * si2 * si2",
        deriv_expr="rx - b * si4 * si4",
        common=dict(
            si="sin(x - r)",
            si2="sin(x + r + r)",
            rx="r * x",
            si3="sin(rx - b)",
            si4="si3 * si3",
        ),
        b=DEFAULT_B,
        text="r*sin^2(x-r)+{b:g}*sin^3(x+2r)",
        deriv_text="rx-{b:g}*sin^4(rx-{b:g})",
    ),
}
