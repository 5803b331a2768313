"""
Maps package - forced 1-D map functions and the Lyapunov kernel.

This package organizes map functions by family:
- maps_plain: template maps ("normal" and "detached" derivatives)
- variants: the function tree (plain, composed, piecewise) and records
- sweep: linear sweeps of the shape parameter b

And provides code generation / compile utilities in map_functions and the
numba sampling kernel in lyapunov_fields.
"""

from .defaults import (
    DEFAULT_MAP_NAME,
    DEFAULT_SEQ,
    DEFAULT_SETTLING,
    DEFAULT_MEASURING,
    DEFAULT_X0,
    DEFAULT_WIDTH,
    DEFAULT_HEIGHT,
    DEFAULT_B,
    DEFAULT_LOWERLEFT,
    DEFAULT_LOWERRIGHT,
    DEFAULT_UPPERLEFT,
    LOG_FLOOR,
    MAX_INTERVALS,
    MAX_SEQ_LEN,
    PROGRESS_ROWS,
)

from .errors import RecordError, GridShapeError, CapacityError

from .maps_plain import MAPS_NORMAL, MAPS_DETACHED

from .map_functions import (
    # Symbolic helpers
    sympy_deriv,
    derivative_matches,
    # Function text generators
    funtext_value,
    funtext_deriv,
    funtext_value_deriv,
    # JIT compilation
    funpy,
    funjit,
    # Type signatures
    VALUE_SIG,
    DERIV_SIG,
    VALUE_DERIV_SIG,
)

from .sequences import (
    decode_sequence_token,
    normalize_sequence,
    seq_to_array,
)

from .sweep import ParameterSweep

from .records import RecordReader, fmt_float, write_text

from .variants import (
    MAP_TEMPLATES,
    KIND_IDS,
    ID_KINDS,
    ROLE_VALUE,
    ROLE_DERIV,
    CompiledMap,
    MapFunction,
    PlainFunction,
    ComposedFunction,
    PiecewiseFunction,
    new_function,
    read_function,
    function_from_text,
    function_to_text,
)

from .lyapunov_fields import basis_vectors, pixel_to_param, lyapunov_rows

__all__ = [
    # Defaults
    "DEFAULT_MAP_NAME",
    "DEFAULT_SEQ",
    "DEFAULT_SETTLING",
    "DEFAULT_MEASURING",
    "DEFAULT_X0",
    "DEFAULT_WIDTH",
    "DEFAULT_HEIGHT",
    "DEFAULT_B",
    "DEFAULT_LOWERLEFT",
    "DEFAULT_LOWERRIGHT",
    "DEFAULT_UPPERLEFT",
    "LOG_FLOOR",
    "MAX_INTERVALS",
    "MAX_SEQ_LEN",
    "PROGRESS_ROWS",
    # Errors
    "RecordError",
    "GridShapeError",
    "CapacityError",
    # Template dicts
    "MAPS_NORMAL",
    "MAPS_DETACHED",
    "MAP_TEMPLATES",
    "KIND_IDS",
    "ID_KINDS",
    # Build functions
    "sympy_deriv",
    "derivative_matches",
    "funtext_value",
    "funtext_deriv",
    "funtext_value_deriv",
    "funpy",
    "funjit",
    "VALUE_SIG",
    "DERIV_SIG",
    "VALUE_DERIV_SIG",
    # Sequences
    "decode_sequence_token",
    "normalize_sequence",
    "seq_to_array",
    # Sweeps
    "ParameterSweep",
    # Records
    "RecordReader",
    "fmt_float",
    "write_text",
    # Function tree
    "ROLE_VALUE",
    "ROLE_DERIV",
    "CompiledMap",
    "MapFunction",
    "PlainFunction",
    "ComposedFunction",
    "PiecewiseFunction",
    "new_function",
    "read_function",
    "function_from_text",
    "function_to_text",
    # Kernel
    "basis_vectors",
    "pixel_to_param",
    "lyapunov_rows",
]
