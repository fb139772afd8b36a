"""
Directive processing shared by the LaTeX and Gnuplot processors.

A processor owns the TextLines of one document. ``process()`` walks the
directives in document order and dispatches each one to its handler. A
handler computes new content and splices it in right after the directive,
replacing the block it generated on a previous run:

- TEXTTABLE, TABULAR and TABTABLE blocks end with an explicit
  "END <KEYWORD> ..." comment line.
- PLOT, MULTIPLOT and MACRO output is recognized by matching the lines
  following the directive; user decoration on those lines is kept.

Handlers raise SqlPlotError subclasses; ``dispatch`` turns them into an
Err result which stops the scan.
"""

import logging
import shlex
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..context import ProcessingContext
from ..directives import Directive, DirectiveScanner
from ..exceptions import DirectiveSyntaxError, SqlPlotError
from ..importdata import ImportData
from ..matchers import MULTIPLOT_ARGUMENT, LineMatcher
from ..reformat import Reformat
from ..render import format_table_rows, format_texttable
from ..results import ProcessResult, process_err, process_ok
from ..sql.base import SqlDatabase, SqlQuery
from ..textlines import TextLines
from ..utils import shorten

logger = logging.getLogger(__name__)

TITLE_MODIFIERS = ("title", "ptitle")


# ============================================================
# MULTIPLOT GROUPS
# ============================================================


@dataclass
class PlotPoint:
    x: str
    y: str
    xerr: Optional[str] = None
    yerr: Optional[str] = None


@dataclass
class PlotGroup:
    """One contiguous run of rows with equal group column values."""
    legend: str
    points: List[PlotPoint] = field(default_factory=list)


@dataclass
class MultiplotSpec:
    """Parsed MULTIPLOT(col1,col2|title) <query> directive."""
    columns: List[str]
    title_column: Optional[str]
    query: str

    @classmethod
    def parse(cls, text: str) -> "MultiplotSpec":
        m = MULTIPLOT_ARGUMENT.match(text)
        if not m:
            raise DirectiveSyntaxError("MULTIPLOT() requires group column list: MULTIPLOT(col,...) SELECT ...")

        columns = [c.strip() for c in m.group(1).split(",")]
        title_column = None
        last, bar, modifier = columns[-1].partition("|")
        if bar:
            modifier = modifier.strip()
            if modifier not in TITLE_MODIFIERS:
                raise DirectiveSyntaxError(f"Unknown MULTIPLOT modifier '|{modifier}', use |title or |ptitle")
            columns[-1] = last.strip()
            title_column = modifier

        if not all(columns):
            raise DirectiveSyntaxError(f"Empty column in MULTIPLOT({m.group(1)})")

        query = m.group(2).replace("MULTIPLOT", ",".join(columns))
        return cls(columns, title_column, query)


def collect_groups(query: SqlQuery, spec: MultiplotSpec) -> List[PlotGroup]:
    """
    Split the result rows into groups of contiguous equal group values.

    The result must contain the columns x and y, optionally xerr and yerr.
    Rows with NULL x or y are skipped.
    """
    query.read_colmap()
    for name in ("x", "y"):
        if not query.exist_col(name):
            raise DirectiveSyntaxError(f"MULTIPLOT failed: result contains no '{name}' column")

    group_cols = []
    for name in spec.columns:
        if not query.exist_col(name):
            raise DirectiveSyntaxError(
                f"MULTIPLOT failed: result contains no '{name}' column, which is a MULTIPLOT group field")
        group_cols.append(query.find_col(name))

    title_col = None
    if spec.title_column is not None:
        if not query.exist_col(spec.title_column):
            raise DirectiveSyntaxError(f"MULTIPLOT failed: result contains no '{spec.title_column}' column")
        title_col = query.find_col(spec.title_column)

    colx, coly = query.find_col("x"), query.find_col("y")
    colxerr = query.find_col("xerr") if query.exist_col("xerr") else None
    colyerr = query.find_col("yerr") if query.exist_col("yerr") else None

    groups: List[PlotGroup] = []
    last_key = None

    while query.step():
        if query.is_null(colx) or query.is_null(coly):
            logger.warning("MULTIPLOT: skipping result row %d with NULL x or y", query.current_row())
            continue

        key = tuple(query.text(c) for c in group_cols)
        if not groups or key != last_key:
            if title_col is not None:
                legend = query.text(title_col)
            else:
                legend = ",".join(f"{name}={value}" for name, value in zip(spec.columns, key))
            groups.append(PlotGroup(legend))
            last_key = key

        groups[-1].points.append(PlotPoint(
            query.text(colx), query.text(coly),
            query.text(colxerr) if colxerr is not None else None,
            query.text(colyerr) if colyerr is not None else None,
        ))

    return groups


# ============================================================
# PROCESSOR
# ============================================================


class DocumentProcessor(ABC):
    """
    Base class of the per-language directive processors.

    ::: This is-in-layer Application-Layer.
    ::: This is a processor.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    language = ""
    comment_char = ""

    # row terminator of TABULAR rows and the matcher for decoration after it
    tabular_line_end = ""
    tabular_row_matcher: Optional[LineMatcher] = None

    # matcher for definition lines generated by MACRO
    macro_matcher: LineMatcher

    def __init__(self, context: ProcessingContext, lines: TextLines, filename: str = "stdin"):
        self.context = context
        self.lines = lines
        self.lines.comment_char = self.comment_char
        self.filename = filename
        # files written next to the document after successful processing
        self.side_files: Dict[str, str] = {}

        self.handlers: Dict[str, Callable[[Directive], None]] = {
            "SQL": self.process_sql,
            "CONNECT": self.process_connect,
            "IMPORT-DATA": self.process_import_data,
            "PLOT": self.process_plot,
            "MULTIPLOT": self.process_multiplot,
            "TEXTTABLE": self.process_texttable,
            "TABULAR": self.process_tabular,
            "TABTABLE": self.process_tabtable,
            "MACRO": self.process_macro,
            "DEFMACRO": self.process_defmacro,
        }

    @property
    def database(self) -> SqlDatabase:
        return self.context.require_database()

    # ------------------------------------------------------------------
    # Scanning and dispatch
    # ------------------------------------------------------------------

    def process(self) -> ProcessResult[TextLines]:
        """Process all directives; stops at the first failing directive."""
        self.context.ranges.reset()
        for directive in DirectiveScanner(self.lines):
            result = self.dispatch(directive)
            if result.is_err():
                return result
        try:
            self.finish()
        except SqlPlotError as e:
            return process_err(self.language, "finishing document failed", None, e)
        return process_ok(self.lines)

    def dispatch(self, directive: Directive) -> ProcessResult[None]:
        keyword = directive.keyword
        try:
            if keyword == "RANGE":
                self.context.ranges.handle(directive)
                return process_ok(None)

            handler = self.handlers.get(keyword)
            if handler is None:
                if directive.is_candidate:
                    logger.warning("Line %d: maybe unknown keyword %s", directive.begin + 1, keyword)
                return process_ok(None)

            if not self.context.ranges.active:
                logger.debug("Line %d: skipping %s outside selected ranges", directive.begin + 1, keyword)
                return process_ok(None)

            logger.info("Line %d: %s", directive.begin + 1, shorten(directive.text))
            handler(directive)
            return process_ok(None)
        except SqlPlotError as e:
            return process_err(keyword, "directive failed", directive.begin, e)

    def finish(self) -> None:
        """Called once after the last directive was processed."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def end_marker(self, keyword: str, argument: str) -> str:
        return f"{self.comment_char} END {keyword} {shorten(argument)}"

    def find_end_marker(self, directive: Directive, keyword: str) -> Optional[int]:
        """Line index of the END marker of a previous run, or None."""
        return self.lines.scan_for_comment(directive.end, f"END {keyword}")

    def replace_marked_block(self, directive: Directive, keyword: str, content: List[str],
                             end: Optional[int] = None) -> None:
        """Insert content after the directive or replace the old block up to its END marker."""
        if end is None:
            end = self.find_end_marker(directive, keyword)
        stop = directive.end if end is None else end + 1
        self.lines.replace(directive.end, stop, directive.indent, content, keyword)

    # ------------------------------------------------------------------
    # Handlers common to all languages
    # ------------------------------------------------------------------

    def process_sql(self, directive: Directive) -> None:
        self.database.execute(directive.argument)

    def process_connect(self, directive: Directive) -> None:
        self.context.connect(directive.argument)

    def process_import_data(self, directive: Directive) -> None:
        importer = ImportData(self.database, temporary=True, verbose=self.context.verbose)
        importer.main(shlex.split(directive.argument))

    def process_texttable(self, directive: Directive) -> None:
        with self.database.query(directive.argument) as query:
            content = format_texttable(query)
        content.append(self.end_marker("TEXTTABLE", directive.argument))
        self.replace_marked_block(directive, "TEXTTABLE", content)

    def _process_table(self, directive: Directive, keyword: str, separator: str,
                       line_end: str, pad: bool, row_matcher: Optional[LineMatcher]) -> None:
        reformat = Reformat()
        sql = reformat.parse_query(directive.argument)

        with self.database.query(sql) as query:
            rows = format_table_rows(query, reformat, separator, line_end, pad)

        end = self.find_end_marker(directive, keyword)
        if end is not None and row_matcher is not None:
            # carry decoration of old rows over to the new rows
            for i, ln in enumerate(range(directive.end, end)):
                if i >= len(rows):
                    break
                m = row_matcher.match(self.lines[ln])
                if not m:
                    break
                rows[i] += m.group(1)

        rows.append(self.end_marker(keyword, directive.argument))
        self.replace_marked_block(directive, keyword, rows, end)

    def process_tabular(self, directive: Directive) -> None:
        self._process_table(directive, "TABULAR", " & ", self.tabular_line_end,
                            True, self.tabular_row_matcher)

    def process_tabtable(self, directive: Directive) -> None:
        self._process_table(directive, "TABTABLE", "\t", "", False, None)

    def _process_macro(self, directive: Directive, exactly_one: bool) -> None:
        reformat = Reformat()
        sql = reformat.parse_query(directive.argument)

        with self.database.query(sql) as query:
            query.read_complete()
            rows = query.num_rows()
            if rows == 0 or (exactly_one and rows != 1):
                raise DirectiveSyntaxError(
                    f"{directive.keyword} query must return exactly one row, got {rows}")
            if rows > 1:
                logger.warning("%s query returned %d rows, using the first", directive.keyword, rows)

            reformat.prepare(query)
            content = [self.format_macro(query.col_name(c), reformat.format(0, c, query.text_at(0, c)))
                       for c in range(query.num_cols())]

        end = directive.end
        while (end < len(self.lines) and self.lines.is_comment_line(end) is None
               and self.macro_matcher.match(self.lines[end])):
            end += 1

        self.lines.replace(directive.end, end, directive.indent, content, directive.keyword)

    def process_macro(self, directive: Directive) -> None:
        self._process_macro(directive, exactly_one=False)

    def process_defmacro(self, directive: Directive) -> None:
        self._process_macro(directive, exactly_one=True)

    # ------------------------------------------------------------------
    # Language specific parts
    # ------------------------------------------------------------------

    @abstractmethod
    def format_macro(self, name: str, value: str) -> str:
        """One macro definition line."""

    @abstractmethod
    def process_plot(self, directive: Directive) -> None:
        pass

    @abstractmethod
    def process_multiplot(self, directive: Directive) -> None:
        pass
