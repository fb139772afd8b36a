"""
String helpers shared by the scanner, the processors and the importer.
"""

import re
from typing import List

# Plain decimal numbers as written by databases and humans; no inf/nan,
# no hex floats, no digit separators.
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DOUBLE_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def is_integer(text: str) -> bool:
    """Check whether text is an optionally signed run of digits."""
    return _INTEGER_RE.fullmatch(text) is not None


def is_double(text: str) -> bool:
    """Check whether text fully parses as a floating point number."""
    return _DOUBLE_RE.fullmatch(text) is not None


def decimals_of(text: str) -> int:
    """
    Number of decimals needed to show the number in text without loss.

    "12" -> 0, "1.250" -> 3, "1.5e3" -> 0, "2e-3" -> 3
    """
    mantissa, _, exponent = text.lower().partition("e")
    _, _, fraction = mantissa.partition(".")
    return max(0, len(fraction) - int(exponent or 0))


def shorten(text: str, width: int = 80) -> str:
    """Truncate text to width characters, marking the cut with '...'."""
    if len(text) <= width:
        return text
    return text[:width - 3] + "..."


def trim(text: str) -> str:
    return text.strip()


def split_words(text: str) -> List[str]:
    """Split on runs of whitespace, dropping empty words."""
    return text.split()


def split_fields(line: str) -> List[str]:
    """Split on tabs if the line has any, otherwise on single spaces."""
    if "\t" in line:
        return [f for f in line.split("\t") if f != ""]
    return [f for f in line.split(" ") if f != ""]
