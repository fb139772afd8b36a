"""
REFORMAT engine: two-pass number formatting of query results.

    reformat = Reformat()
    query_text = reformat.parse_query("REFORMAT(col 1 (max=bold) digits=3) SELECT ...")
    with db.query(query_text) as q:
        q.read_complete()
        reformat.prepare(q)
        cell = reformat.format(row, col, q.text_at(row, col))

``prepare`` records the minimum and maximum of every highlighted row and
column, keeping the original text of the first extremal cell. ``format``
renders a cell with the default format refined by the row format and then
the column format, and highlights cells whose text equals a recorded
extremal text.
"""

import logging
from typing import Dict, List, Optional, Tuple

from lark import Token, Tree

from ..exceptions import ReformatSyntaxError
from ..sql.base import SqlQuery
from ..utils import is_double
from .formats import Highlight, LineFormat
from .parser import ReformatParser

logger = logging.getLogger(__name__)

KEYWORD = "REFORMAT"

_HIGHLIGHT_MACROS = {
    Highlight.BOLD: "\\textbf{%s}",
    Highlight.EMPH: "\\emph{%s}",
}


def _find_child(tree: Tree, data: str) -> Optional[Tree]:
    """Find first child tree with given data."""
    for child in tree.children:
        if isinstance(child, Tree) and child.data == data:
            return child
    return None


def parse_numbers(ranges: Tree) -> List[int]:
    """Expand a ranges tree like "1,3-5" into [1, 3, 4, 5]."""
    numbers: List[int] = []
    for item in ranges.children:
        bounds = [int(tok) for tok in item.children]
        if len(bounds) == 1:
            numbers.append(bounds[0])
            continue
        low, high = bounds
        if high < low:
            raise ReformatSyntaxError(f"Invalid negative range {low}-{high}")
        numbers.extend(range(low, high + 1))
    return numbers


def split_clause(query: str) -> Optional[Tuple[str, str]]:
    """
    Split "REFORMAT(<fmt>) <rest>" into (fmt, rest).

    Returns None if query has no REFORMAT clause.
    """
    if not query.startswith(KEYWORD):
        return None

    rest = query[len(KEYWORD):].lstrip()
    if not rest.startswith("("):
        raise ReformatSyntaxError("REFORMAT must be followed by a parenthesized format")

    depth = 0
    for pos, ch in enumerate(rest):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return rest[1:pos], rest[pos + 1:].strip()
    raise ReformatSyntaxError(f"Unbalanced parentheses in {query}")


class Reformat:
    """
    Formatting state of one directive invocation.

    ::: This is-in-layer Domain-Layer.
    ::: This is a formatter.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self):
        self.default = LineFormat()
        self.row_formats: Dict[int, LineFormat] = {}
        self.col_formats: Dict[int, LineFormat] = {}

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_query(self, query: str) -> str:
        """Parse and strip a leading REFORMAT(...) clause from query."""
        parts = split_clause(query)
        if parts is None:
            return query
        fmt, rest = parts
        self.parse_format(fmt)
        return rest

    def parse_format(self, text: str) -> None:
        tree = ReformatParser().parse(text)
        for child in tree.children:
            if child.data == "selector":
                self._parse_selector(child)
            else:
                self._parse_option(self.default, child, top_level=True)

    def _parse_selector(self, tree: Tree) -> None:
        selector = tree.children[0]
        numbers = parse_numbers(_find_child(tree, "ranges"))

        fmt = LineFormat()
        for option in tree.children:
            if isinstance(option, Tree) and option.data == "option":
                self._parse_option(fmt, option, top_level=False)

        target = self.row_formats if selector.startswith("row") else self.col_formats
        for index in numbers:
            target.setdefault(index, LineFormat()).apply(fmt)

    def _parse_option(self, fmt: LineFormat, tree: Tree, top_level: bool) -> None:
        tokens = [c for c in tree.children if isinstance(c, Token)]
        key = str(tokens[0])
        value = str(tokens[1]) if len(tokens) > 1 else None

        if top_level and key in ("min", "minimum", "max", "maximum"):
            raise ReformatSyntaxError(f"Key '{key}' is only allowed for rows or columns")
        if not fmt.parse_option(key, value):
            raise ReformatSyntaxError(f"Invalid cell-level key '{key}'")

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @property
    def needs_prepare(self) -> bool:
        formats = list(self.row_formats.values()) + list(self.col_formats.values())
        return any(f.needs_minmax for f in formats)

    def prepare(self, query: SqlQuery) -> None:
        """
        Scan the (cached) result for row and column extrema.

        Only rows and columns with min/max highlighting are scanned.
        """
        if not self.needs_prepare:
            return

        query.read_complete()
        for row in range(query.num_rows()):
            rowfmt = self.row_formats.get(row)
            for col in range(query.num_cols()):
                colfmt = self.col_formats.get(col)
                watchers = [f for f in (rowfmt, colfmt) if f is not None and f.needs_minmax]
                if not watchers:
                    continue

                text = query.text_at(row, col)
                if not is_double(text):
                    continue
                value = float(text)
                for fmt in watchers:
                    fmt.observe(value, text)

    def effective_format(self, row: int, col: int) -> LineFormat:
        fmt = self.default.copy()
        if row in self.row_formats:
            fmt.apply(self.row_formats[row])
        if col in self.col_formats:
            fmt.apply(self.col_formats[col])
        return fmt

    def format(self, row: int, col: int, text: str) -> str:
        """Render one cell; text that is not a number is returned unchanged."""
        if not is_double(text):
            return text

        out = self.effective_format(row, col).format_number(text, float(text))

        for level in (self.col_formats.get(col), self.row_formats.get(row)):
            if level is None:
                continue
            style = level.highlight_for(text)
            if style in _HIGHLIGHT_MACROS:
                return _HIGHLIGHT_MACROS[style] % out
        return out
