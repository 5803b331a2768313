"""
A/B alternation sequences.

Sequences are stored as plain strings over {A, B} and handed to the
field kernel as int32 arrays (A -> 0, B -> 1).
"""

import numpy as np

from .defaults import MAX_SEQ_LEN


def _read_count(s: str, i: int) -> tuple[int, int]:
    j = i
    while j < len(s) and s[j].isdigit():
        j += 1
    if j == i:
        return 1, j
    return int(s[i:j]), j


def decode_sequence_token(tok: str) -> str:
    """
    Decode a compressed sequence token into a string of 'A' and 'B'.

        ABBA        -> ABBA
        A5B5        -> AAAAABBBBB
        AB3A2       -> ABBBAA
        (AB)40      -> AB repeated 40 times
        A2(BA)3B    -> AABABABAB

    Raises ValueError on anything else.
    """
    s = tok.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1]
    if not s:
        raise ValueError("Sequence must be non-empty (e.g. 'AB')")

    out_parts = []
    i = 0
    while i < len(s):
        ch = s[i]
        if ch in "AaBb":
            count, i = _read_count(s, i + 1)
            out_parts.append(ch.upper() * count)
            continue
        if ch == "(":
            j = s.find(")", i + 1)
            if j == -1:
                raise ValueError(f"Unbalanced '(' in sequence {tok!r}")
            group = s[i + 1: j]
            if not group or any(c not in "AaBb" for c in group):
                raise ValueError(f"Bad group ({group}) in sequence {tok!r}")
            count, i = _read_count(s, j + 1)
            out_parts.append(group.upper() * count)
            continue
        raise ValueError(f"Invalid symbol '{ch}' in sequence {tok!r}")

    seq = "".join(out_parts)
    if not seq:
        raise ValueError(f"Sequence {tok!r} expands to nothing")
    return seq


def normalize_sequence(seq_str: str) -> str:
    """Upper-case and validate a plain A/B sequence."""
    s = (seq_str or "").strip().upper()
    if not s:
        raise ValueError("Sequence must be non-empty (e.g. 'AB')")
    if len(s) > MAX_SEQ_LEN:
        raise ValueError(f"Sequence longer than {MAX_SEQ_LEN} symbols")
    for ch in s:
        if ch not in "AB":
            raise ValueError(f"Invalid symbol '{ch}' in sequence; use only A/B.")
    return s


def seq_to_array(seq_str: str) -> np.ndarray:
    s = normalize_sequence(seq_str)
    return np.asarray([0 if ch == "A" else 1 for ch in s], dtype=np.int32)
