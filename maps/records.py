"""
Line-oriented key/value records.

A record is a sequence of lines: a key line (case-insensitive) followed by
one or more value lines. Lines starting with '#' or '.' between keys are
comments. Blank lines are ignored.

    ID
    2
    #FUNCTION sine_squared
    B
    2.7
"""

from pathlib import Path

from .errors import RecordError

COMMENT_PREFIXES = ("#", ".")


class RecordReader:
    """Pull-style reader over the lines of a record."""

    def __init__(self, lines, source: str = "<record>"):
        self._lines = [ln.rstrip("\r\n") for ln in lines]
        self._pos = 0
        self.source = source

    @classmethod
    def from_text(cls, text: str, source: str = "<record>") -> "RecordReader":
        return cls(text.splitlines(), source)

    @classmethod
    def from_path(cls, path) -> "RecordReader":
        p = Path(path)
        return cls(p.read_text().splitlines(), str(p))

    def _error(self, msg: str) -> RecordError:
        return RecordError(f"{self.source}:{self._pos}: {msg}")

    def at_end(self) -> bool:
        while self._pos < len(self._lines):
            s = self._lines[self._pos].strip()
            if s and not s.startswith(COMMENT_PREFIXES):
                return False
            self._pos += 1
        return True

    def peek_key(self) -> str | None:
        if self.at_end():
            return None
        return self._lines[self._pos].strip().upper()

    def next_key(self) -> str:
        if self.at_end():
            raise self._error("unexpected end of record")
        key = self._lines[self._pos].strip().upper()
        self._pos += 1
        return key

    def expect_key(self, name: str) -> None:
        key = self.next_key()
        if key != name:
            raise self._error(f"expected {name}, got {key}")

    def read_text(self) -> str:
        while self._pos < len(self._lines):
            s = self._lines[self._pos].strip()
            self._pos += 1
            if s:
                return s
        raise self._error("missing value at end of record")

    def read_float(self) -> float:
        tok = self.read_text()
        try:
            return float(tok)
        except ValueError:
            raise self._error(f"not a number: {tok!r}") from None

    def read_int(self) -> int:
        tok = self.read_text()
        try:
            return int(tok)
        except ValueError:
            raise self._error(f"not an integer: {tok!r}") from None

    def read_rgb(self) -> tuple[int, int, int]:
        return (self.read_int(), self.read_int(), self.read_int())

    def read_point(self) -> tuple[float, float]:
        return (self.read_float(), self.read_float())

    def read_keyed(self, handlers: dict, what: str) -> None:
        """
        Read exactly len(handlers) keyed fields in any order.

        Each handler consumes the value lines of its key. An unknown or
        repeated key means the record is malformed.
        """
        seen = set()
        for _ in range(len(handlers)):
            key = self.next_key()
            if key not in handlers:
                raise self._error(f"unknown key {key} in {what} record")
            if key in seen:
                raise self._error(f"duplicate key {key} in {what} record")
            handlers[key]()
            seen.add(key)


def fmt_float(v: float) -> str:
    # repr round-trips exactly
    return repr(float(v))


def write_text(path, lines: list[str]) -> None:
    Path(path).write_text("\n".join(lines) + "\n")
