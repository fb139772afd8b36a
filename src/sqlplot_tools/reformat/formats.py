"""
Cell and line formats of the REFORMAT engine.

Every field has an "unset" value; ``apply(other)`` copies only the fields
``other`` sets, so a default format can be refined per row and per column.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..exceptions import ReformatSyntaxError
from ..utils import decimals_of

# Internal thousands marker produced by str.format, replaced by the
# configured separator afterwards.
GROUP_MARKER = ","

_DIGITS_THRESHOLDS = {
    2: (1, 10),
    3: (1, 10, 100),
    4: (1, 10, 100, 1000),
}


class Rounding(Enum):
    UNDEF = "undef"
    FLOOR = "floor"
    CEIL = "ceil"
    ROUND = "round"


class Highlight(Enum):
    UNDEF = "undef"
    NONE = "none"
    BOLD = "bold"
    EMPH = "emph"


_HIGHLIGHT_NAMES = {
    "": Highlight.NONE,
    "none": Highlight.NONE,
    "bold": Highlight.BOLD,
    "bf": Highlight.BOLD,
    "emph": Highlight.EMPH,
    "em": Highlight.EMPH,
}

_STYLES = (Highlight.BOLD, Highlight.EMPH)


def _int_value(key: str, value: Optional[str]) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ReformatSyntaxError(f"Invalid integer value '{value}' for key '{key}'") from None


def round_half_away(value: float, digits: int) -> float:
    """Round to digits decimals, halves away from zero."""
    p = 10.0 ** digits
    return math.copysign(math.floor(abs(value) * p + 0.5), value) / p


def digits_precision(value: float, digits: int) -> int:
    """Decimals that keep ``digits`` significant digits for value."""
    precision = digits
    for threshold in _DIGITS_THRESHOLDS[digits]:
        if abs(value) < threshold:
            return precision
        precision -= 1
    return 0


@dataclass
class CellFormat:
    """Number formatting of one cell.

    ::: This is-in-layer Domain-Layer.
    ::: This is a value-object.
    """
    rounding: Rounding = Rounding.UNDEF
    round_digits: int = 0
    precision: Optional[int] = None
    width: Optional[int] = None
    digits: Optional[int] = None
    grouping: Optional[str] = None

    def apply(self, other: "CellFormat") -> None:
        """Override the fields other sets explicitly."""
        if other.rounding != Rounding.UNDEF:
            self.rounding = other.rounding
            self.round_digits = other.round_digits
        if other.precision is not None:
            self.precision = other.precision
        if other.width is not None:
            self.width = other.width
        if other.digits is not None:
            self.digits = other.digits
        if other.grouping is not None:
            self.grouping = other.grouping

    def parse_option(self, key: str, value: Optional[str]) -> bool:
        """
        Set one option from a REFORMAT clause.

        Returns False if key is not a cell-level key.
        """
        if key in ("floor", "ceil") and value is None:
            self.rounding = Rounding(key)
        elif key == "round":
            if value is None or value == "":
                self.rounding, self.round_digits = Rounding.ROUND, 0
            elif value in ("floor", "ceil"):
                self.rounding = Rounding(value)
            else:
                self.rounding, self.round_digits = Rounding.ROUND, _int_value(key, value)
        elif key in ("precision", "width"):
            number = _int_value(key, value)
            if number < 0:
                raise ReformatSyntaxError(f"Negative value '{value}' for key '{key}'")
            setattr(self, key, number)
        elif key == "digits":
            digits = _int_value(key, value)
            if digits not in _DIGITS_THRESHOLDS:
                raise ReformatSyntaxError("Currently only digits={2,3,4} is implemented")
            self.digits = digits
        elif key in ("group", "grouping"):
            if value is None or value == "":
                self.grouping = ","
            else:
                # group==. is accepted as group=.
                self.grouping = value[1:] if value.startswith("=") and len(value) > 1 else value
        else:
            return False
        return True

    @property
    def reformats(self) -> bool:
        return (self.precision is not None or self.width is not None
                or self.digits is not None or self.grouping is not None)

    def format_number(self, text: str, value: float) -> str:
        """Render value (parsed from text) according to this format."""
        precision = self.precision

        if self.rounding == Rounding.FLOOR:
            value = float(math.floor(value))
            precision = 0 if precision is None else precision
        elif self.rounding == Rounding.CEIL:
            value = float(math.ceil(value))
            precision = 0 if precision is None else precision
        elif self.rounding == Rounding.ROUND:
            value = round_half_away(value, self.round_digits)
            precision = max(0, self.round_digits) if precision is None else precision

        if precision is None and not self.reformats:
            return text

        group = GROUP_MARKER if self.grouping is not None else ""

        if self.digits is not None:
            out = f"{value:{group}.{digits_precision(value, self.digits)}f}"
        else:
            if precision is None:
                precision = decimals_of(text)
            width = self.width if self.width is not None else ""
            out = f"{value:>{width}{group}.{precision}f}"

        if group:
            out = out.replace(GROUP_MARKER, self.grouping)
        return out


@dataclass
class LineFormat(CellFormat):
    """Format of a whole row or column, with min/max highlighting.

    The observed extremal values and their original cell texts are
    collected by ``Reformat.prepare``.
    """
    min_format: Highlight = Highlight.UNDEF
    max_format: Highlight = Highlight.UNDEF
    min_value: float = math.inf
    max_value: float = -math.inf
    min_text: Optional[str] = None
    max_text: Optional[str] = None

    def apply(self, other: CellFormat) -> None:
        super().apply(other)
        if not isinstance(other, LineFormat):
            return
        if other.min_format != Highlight.UNDEF:
            self.min_format = other.min_format
            self.min_value, self.min_text = other.min_value, other.min_text
        if other.max_format != Highlight.UNDEF:
            self.max_format = other.max_format
            self.max_value, self.max_text = other.max_value, other.max_text

    def parse_option(self, key: str, value: Optional[str]) -> bool:
        if key in ("min", "minimum", "max", "maximum"):
            name = value or ""
            if name not in _HIGHLIGHT_NAMES:
                raise ReformatSyntaxError(f"Invalid highlight '{name}' for key '{key}', use bold, bf, emph or em")
            if key.startswith("min"):
                self.min_format = _HIGHLIGHT_NAMES[name]
            else:
                self.max_format = _HIGHLIGHT_NAMES[name]
            return True
        return super().parse_option(key, value)

    @property
    def needs_minmax(self) -> bool:
        return self.min_format in _STYLES or self.max_format in _STYLES

    def observe(self, value: float, text: str) -> None:
        """Record value; the first text of an extremal value is kept."""
        if value < self.min_value:
            self.min_value, self.min_text = value, text
        if value > self.max_value:
            self.max_value, self.max_text = value, text

    def highlight_for(self, text: str) -> Highlight:
        """Highlight style for a cell whose original text is text."""
        if self.min_format in _STYLES and text == self.min_text:
            return self.min_format
        if self.max_format in _STYLES and text == self.max_text:
            return self.max_format
        return Highlight.UNDEF

    def copy(self) -> "LineFormat":
        return replace(self)
