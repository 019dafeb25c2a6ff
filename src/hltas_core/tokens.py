"""Primitive readers shared by the line parsers."""
from __future__ import annotations

import math
import re

DIGITS = "0123456789"

_FLOAT_RE = re.compile(r"-?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")
_UINT_RE = re.compile(r"[0-9]+")
_INT_RE = re.compile(r"-?[0-9]+")

UINT32_MAX = 2**32 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def read_number(text: str, pos: int) -> tuple[int, int]:
    """Scan decimal digits starting at ``pos``.

    Returns the value (0 when there are no digits) and the index just past the
    last digit.
    """
    end = pos
    while end < len(text) and text[end] in DIGITS:
        end += 1
    if end == pos:
        return 0, pos
    return int(text[pos:end]), end


def split_first_word(line: str) -> tuple[str, str]:
    """Split a trimmed line at its first whitespace run into ``(word, rest)``."""
    line = line.strip()
    parts = line.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].lstrip()


def strip_comment(line: str, prefix: str = "//") -> str:
    """Drop a trailing ``//`` comment and surrounding whitespace."""
    pos = line.find(prefix)
    if pos != -1:
        line = line[:pos]
    return line.strip()


def parse_float(text: str) -> float:
    """Parse a finite decimal float, rejecting anything ``float()`` alone would accept."""
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError(f"not a number: {text!r}")
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def parse_uint(text: str, maximum: int = UINT32_MAX) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ValueError(f"not an unsigned integer: {text!r}")
    value = int(text)
    if value > maximum:
        raise ValueError(f"{value} exceeds {maximum}")
    return value


def parse_int64(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"not an integer: {text!r}")
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"{value} is out of the 64-bit range")
    return value


def starts_numeric(text: str) -> bool:
    """True when a field starts like a number or the empty marker."""
    return bool(text) and (text[0] in DIGITS or text[0] == "-")
