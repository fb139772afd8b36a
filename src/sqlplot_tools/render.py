"""
Rendering of complete query results as text tables.

Both renderers need column widths, so they work on cached results.
"""

from typing import List, Optional

from .reformat import Reformat
from .sql.base import SqlQuery
from .utils import is_double


def format_texttable(query: SqlQuery) -> List[str]:
    """
    Render a result as an ASCII box table.

    +-----+--------+
    |   n | algo   |
    +-----+--------+
    |  10 | merge  |
    +-----+--------+

    Columns whose non-NULL cells are all numbers are right-aligned, all
    other columns left-aligned. Headers are right-aligned.
    """
    query.read_complete()
    ncols = query.num_cols()
    nrows = query.num_rows()

    widths = [len(query.col_name(c)) for c in range(ncols)]
    numeric = [True] * ncols

    for r in range(nrows):
        for c in range(ncols):
            text = query.text_at(r, c)
            widths[c] = max(widths[c], len(text))
            if not query.is_null_at(r, c) and not is_double(text):
                numeric[c] = False

    rule = "+-" + "+-".join("-" * (w + 1) for w in widths) + "+"

    def make_row(cells: List[str], right: List[bool]) -> str:
        parts = [cell.rjust(w) if r else cell.ljust(w)
                 for cell, w, r in zip(cells, widths, right)]
        return "| " + "| ".join(p + " " for p in parts) + "|"

    lines = [rule, make_row(query.col_names(), [True] * ncols), rule]
    for r in range(nrows):
        lines.append(make_row([query.text_at(r, c) for c in range(ncols)], numeric))
    lines.append(rule)
    return lines


def format_table_rows(query: SqlQuery, reformat: Optional[Reformat], separator: str,
                      line_end: str = "", pad: bool = True) -> List[str]:
    """
    Render the rows of a result with separator between cells.

    Cells are passed through reformat (if given); with pad every cell is
    right-aligned to the width of the widest formatted cell of its column.
    """
    query.read_complete()
    if reformat is not None:
        reformat.prepare(query)

    ncols = query.num_cols()
    cells = []
    for r in range(query.num_rows()):
        row = []
        for c in range(ncols):
            text = query.text_at(r, c)
            row.append(reformat.format(r, c, text) if reformat is not None else text)
        cells.append(row)

    widths = [max((len(row[c]) for row in cells), default=0) for c in range(ncols)]

    lines = []
    for row in cells:
        if pad:
            row = [cell.rjust(w) for cell, w in zip(row, widths)]
        lines.append(separator.join(row) + line_end)
    return lines
