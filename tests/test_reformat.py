"""
Tests for the REFORMAT engine: clause parsing, number formatting and
min/max highlighting.
"""

import pytest

from sqlplot_tools.exceptions import ReformatSyntaxError
from sqlplot_tools.reformat import Highlight, Reformat, Rounding, split_clause
from sqlplot_tools.render import format_table_rows, format_texttable


def _formatted(spec, texts, col=0):
    reformat = Reformat()
    reformat.parse_format(spec)
    return [reformat.format(row, col, text) for row, text in enumerate(texts)]


class TestSplitClause:
    """Test detection and stripping of the REFORMAT clause."""

    def test_without_clause(self):
        assert split_clause("SELECT 1") is None
        assert Reformat().parse_query("SELECT 1") == "SELECT 1"

    def test_nested_parentheses(self):
        fmt, rest = split_clause("REFORMAT(col 1 (precision=2) group) SELECT (1)")

        assert fmt == "col 1 (precision=2) group"
        assert rest == "SELECT (1)"

    def test_parse_query_strips_clause(self):
        assert Reformat().parse_query("REFORMAT(precision=1) SELECT a FROM t") == "SELECT a FROM t"

    def test_unbalanced(self):
        with pytest.raises(ReformatSyntaxError):
            split_clause("REFORMAT(precision=1 SELECT 1")

    def test_missing_parenthesis(self):
        with pytest.raises(ReformatSyntaxError):
            split_clause("REFORMAT precision=1 SELECT 1")


class TestParseFormat:
    """Test parsing of format options and selectors."""

    def test_default_options(self):
        reformat = Reformat()
        reformat.parse_format("round=2 width=8 group")

        assert reformat.default.rounding == Rounding.ROUND
        assert reformat.default.round_digits == 2
        assert reformat.default.width == 8
        assert reformat.default.grouping == ","

    def test_selector_ranges(self):
        """Test that ranges expand to every listed index."""
        reformat = Reformat()
        reformat.parse_format("col 1,3-5 (precision=0) rows 0=(max=bold)")

        assert sorted(reformat.col_formats) == [1, 3, 4, 5]
        assert reformat.col_formats[4].precision == 0
        assert reformat.row_formats[0].max_format == Highlight.BOLD

    def test_highlight_aliases(self):
        reformat = Reformat()
        reformat.parse_format("col 0 (min=em maximum=bf)")

        assert reformat.col_formats[0].min_format == Highlight.EMPH
        assert reformat.col_formats[0].max_format == Highlight.BOLD

    @pytest.mark.parametrize("spec", [
        "foo=1",
        "max=bold",
        "digits=5",
        "precision=-1",
        "precision=abc",
        "col 5-3 (precision=1)",
        "col (precision=1)",
        "col 1 (max=red)",
        "precision=(1",
    ])
    def test_invalid_clauses(self, spec):
        with pytest.raises(ReformatSyntaxError):
            Reformat().parse_format(spec)


class TestFormatNumbers:
    """Test numeric cell rendering."""

    def test_digits_mode(self):
        """Test that digits=3 keeps three significant digits."""
        assert _formatted("digits=3", ["0.5", "5", "50", "500"]) == ["0.500", "5.00", "50.0", "500"]

    def test_digits_two(self):
        assert _formatted("digits=2", ["0.123", "1.234", "12.34"]) == ["0.12", "1.2", "12"]

    def test_grouping(self):
        assert _formatted("group", ["1234567"]) == ["1,234,567"]

    def test_grouping_custom_separator(self):
        assert _formatted("group==.", ["1234567"]) == ["1.234.567"]
        assert _formatted("group=.", ["1234567.5"]) == ["1.234.567.5"]

    def test_precision_and_width(self):
        assert _formatted("precision=2", ["3.14159", "2"]) == ["3.14", "2.00"]
        assert _formatted("width=6 precision=1", ["3.14159"]) == ["   3.1"]

    def test_width_keeps_input_decimals(self):
        assert _formatted("width=6", ["1.25"]) == ["  1.25"]

    def test_rounding(self):
        assert _formatted("round=1", ["2.25"]) == ["2.3"]
        assert _formatted("round", ["-2.5"]) == ["-3"]
        assert _formatted("floor", ["2.7"]) == ["2"]
        assert _formatted("ceil", ["2.1"]) == ["3"]
        assert _formatted("round=ceil", ["2.1"]) == ["3"]

    def test_non_numbers_unchanged(self):
        assert _formatted("precision=2", ["abc", "", "1,5"]) == ["abc", "", "1,5"]

    def test_no_format_keeps_text(self):
        assert _formatted("", ["1.50", "7"]) == ["1.50", "7"]

    def test_column_overrides_default(self):
        reformat = Reformat()
        reformat.parse_format("col 1 (precision=1) precision=3")

        assert reformat.format(0, 1, "2") == "2.0"
        assert reformat.format(0, 0, "2") == "2.000"

    def test_column_overrides_row(self):
        """Test that a column format wins over a row format."""
        reformat = Reformat()
        reformat.parse_format("row 0 (precision=1) col 0 (precision=2)")

        assert reformat.format(0, 0, "1") == "1.00"
        assert reformat.format(0, 1, "1") == "1.0"
        assert reformat.format(1, 1, "1") == "1"


class TestHighlighting:
    """Test min/max highlighting on query results."""

    @pytest.fixture
    def minmax(self, db):
        db.execute("CREATE TABLE m (a INTEGER, b INTEGER)")
        db.execute("INSERT INTO m VALUES (3, 1), (7, 5), (7, 2), (2, 9)")
        return db

    def _render(self, db, spec):
        reformat = Reformat()
        reformat.parse_format(spec)
        with db.query("SELECT a, b FROM m ORDER BY rowid") as q:
            q.read_complete()
            reformat.prepare(q)
            return [[reformat.format(r, c, q.text_at(r, c)) for c in range(q.num_cols())]
                    for r in range(q.num_rows())]

    def test_column_max_highlights_all_equal_texts(self, minmax):
        cells = self._render(minmax, "col 0 (max=bold)")

        assert [row[0] for row in cells] == ["3", "\\textbf{7}", "\\textbf{7}", "2"]
        assert [row[1] for row in cells] == ["1", "5", "2", "9"]

    def test_row_min(self, minmax):
        cells = self._render(minmax, "row 1 (min=emph)")

        assert cells[1] == ["7", "\\emph{5}"]
        assert cells[0] == ["3", "1"]

    def test_highlight_wraps_formatted_text(self, minmax):
        cells = self._render(minmax, "col 1 (min=bold max=emph precision=1)")

        assert [row[1] for row in cells] == ["\\textbf{1.0}", "5.0", "2.0", "\\emph{9.0}"]

    def test_none_style_disables_highlight(self, minmax):
        cells = self._render(minmax, "col 0 (max=none)")

        assert [row[0] for row in cells] == ["3", "7", "7", "2"]


class TestRender:
    """Test table renderers."""

    def test_texttable(self, db):
        with db.query("SELECT algo, n FROM stats ORDER BY algo, n") as q:
            lines = format_texttable(q)

        assert lines == [
            "+-------+---+",
            "|  algo | n |",
            "+-------+---+",
            "| merge | 1 |",
            "| merge | 2 |",
            "| quick | 1 |",
            "| quick | 2 |",
            "+-------+---+",
        ]

    def test_table_rows_padded(self, db):
        with db.query("SELECT algo, time FROM stats WHERE n = 2 ORDER BY algo") as q:
            rows = format_table_rows(q, None, " & ", " \\\\")

        assert rows == ["merge &  1.5 \\\\", "quick & 0.75 \\\\"]

    def test_table_rows_with_reformat(self, db):
        reformat = Reformat()
        reformat.parse_format("precision=2")
        with db.query("SELECT n, time FROM stats WHERE algo = 'quick' ORDER BY n") as q:
            rows = format_table_rows(q, reformat, "\t", pad=False)

        assert rows == ["1.00\t0.25", "2.00\t0.75"]
