"""
Exceptions raised by map functions, records and fields.
"""


class RecordError(ValueError):
    """A persisted record is malformed: missing or unknown keys, bad kind id."""


class GridShapeError(ValueError):
    """An exponent grid does not match the dimensions of the active field."""


class CapacityError(ValueError):
    """A bounded collection (color intervals) is full."""
