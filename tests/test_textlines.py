"""
Tests for the line buffer document model and the directive scanner.
"""

import pytest

from sqlplot_tools.directives import Directive, DirectiveScanner, RangeFilter
from sqlplot_tools.exceptions import DirectiveSyntaxError
from sqlplot_tools.textlines import CommentBlock, TextLines


def _directive(keyword, argument):
    text = f"{keyword} {argument}"
    return Directive(keyword, argument, text, 0, 1, 0)


class TestTextLinesReplace:
    """Test the splice primitive."""

    def test_replace_changes_count_by_content_delta(self):
        """Test that replace grows the buffer by len(content) - (end - begin)."""
        lines = TextLines.from_text("a\nb\nc\nd\n")
        after = lines.replace(1, 3, 2, ["x", "y", "z"], "test block")

        assert len(lines) == 4 - 2 + 3
        assert lines.lines == ["a", "  x", "  y", "  z", "d"]
        assert after == 4

    def test_insert_when_begin_equals_end(self):
        """Test that an empty range inserts without removing."""
        lines = TextLines.from_text("a\nb\n")
        lines.replace(1, 1, 0, ["new"], "insert")

        assert lines.lines == ["a", "new", "b"]

    def test_replace_with_text_content(self):
        """Test that newline separated content is split into lines."""
        lines = TextLines.from_text("a\n")
        lines.replace(0, 1, 0, "x\ny\n", "text")

        assert lines.lines == ["x", "y"]

    def test_delete_with_empty_content(self):
        """Test that empty content removes the range."""
        lines = TextLines.from_text("a\nb\nc\n")
        lines.replace(0, 2, 0, [], "delete")

        assert lines.lines == ["c"]

    def test_to_text_keeps_blank_lines(self):
        """Test that reading and writing preserves the document."""
        text = "first\n\n  second\n"
        assert TextLines.from_text(text).to_text() == text

    def test_crlf_documents_keep_line_terminator(self):
        """Test that CRLF input is split cleanly and written back as CRLF."""
        lines = TextLines.from_text("a\r\nb\r\n")
        lines.replace(1, 1, 0, ["new"], "insert")

        assert lines.lines == ["a", "new", "b"]
        assert lines.to_text() == "a\r\nnew\r\nb\r\n"


class TestCommentDetection:
    """Test comment line detection and collection."""

    def test_is_comment_line_returns_indent(self):
        """Test that the comment character position is returned."""
        lines = TextLines(["  % note", "text", "%% double"], "%")

        assert lines.is_comment_line(0) == 2
        assert lines.is_comment_line(1) is None
        assert lines.is_comment_line(2, 2) == 0
        assert lines.is_comment_line(0, 2) is None

    def test_collect_single_line_comment(self):
        """Test a one-line comment block."""
        lines = TextLines(["% PLOT SELECT 1", "% PLOT SELECT 2"], "%")

        assert lines.collect_comment(0) == CommentBlock("PLOT SELECT 1", 0, 1, 0)

    def test_collect_multi_line_comment(self):
        """Test that doubled markers at the same indent are joined."""
        lines = TextLines(["  ## PLOT SELECT x,", "  ##   y FROM t", "  ## ORDER BY x", "plot \\"], "#")
        block = lines.collect_comment(0)

        assert block.text == "PLOT SELECT x,   y FROM t ORDER BY x"
        assert (block.begin, block.end, block.indent) == (0, 3, 2)

    def test_multi_line_comment_stops_at_other_indent(self):
        """Test that a doubled marker at another indent ends the block."""
        lines = TextLines(["%% SQL A", "  %% B"], "%")

        assert lines.collect_comment(0).end == 1

    def test_collect_comment_on_text_line(self):
        """Test that non-comment lines yield no block."""
        assert TextLines(["text"], "%").collect_comment(0) is None

    def test_scan_for_comment_finds_marker(self):
        """Test that the first following comment is checked for the prefix."""
        lines = TextLines(["row", "row", "% END TEXTTABLE q", "% other"], "%")

        assert lines.scan_for_comment(0, "END TEXTTABLE") == 2
        assert lines.scan_for_comment(0, "END TABULAR") is None
        assert lines.scan_for_comment(3, "END") is None


class TestDirective:
    """Test directive extraction from comment blocks."""

    def test_keyword_and_argument(self):
        """Test splitting keyword and argument."""
        d = Directive.from_comment(CommentBlock("PLOT SELECT x, y FROM t", 3, 4, 2))

        assert d.keyword == "PLOT"
        assert d.argument == "SELECT x, y FROM t"
        assert (d.begin, d.end, d.indent) == (3, 4, 2)

    def test_keyword_with_dash_and_parenthesis(self):
        """Test keywords containing '-' and arguments directly following."""
        assert Directive.from_comment(CommentBlock("IMPORT-DATA -T t f", 0, 1, 0)).keyword == "IMPORT-DATA"

        d = Directive.from_comment(CommentBlock("MULTIPLOT(a) SELECT 1", 0, 1, 0))
        assert d.keyword == "MULTIPLOT"
        assert d.text == "MULTIPLOT(a) SELECT 1"

    def test_lowercase_comment_has_no_keyword(self):
        """Test that ordinary comments produce an empty keyword."""
        assert Directive.from_comment(CommentBlock("just a note", 0, 1, 0)).keyword == ""

    def test_is_candidate(self):
        """Test the heuristic for mistyped keywords."""
        assert _directive("TEXTTABEL", "x").is_candidate
        assert not _directive("FOO", "x").is_candidate
        assert not _directive("----", "x").is_candidate


class TestDirectiveScanner:
    """Test scanning a document for directives."""

    def test_scan_yields_directives_in_order(self):
        """Test that only keyword comments are yielded."""
        lines = TextLines.from_text(
            "% hello\n% PLOT SELECT 1\ntext\n%% SQL CREATE\n%% TABLE t\n", "%")
        found = [(d.keyword, d.argument) for d in DirectiveScanner(lines)]

        assert found == [("PLOT", "SELECT 1"), ("SQL", "CREATE TABLE t")]

    def test_scan_sees_lines_inserted_during_iteration(self):
        """Test that the scanner continues after spliced content."""
        lines = TextLines.from_text("% MACRO a\n% MACRO b\n", "%")
        seen = []
        for d in DirectiveScanner(lines):
            seen.append(d.argument)
            if d.argument == "a":
                lines.replace(d.end, d.end, 0, ["generated", "% SQL inserted"], "test")

        assert seen == ["a", "inserted", "b"]


class TestRangeFilter:
    """Test RANGE BEGIN/END handling."""

    def test_without_names_everything_is_active(self):
        """Test that RANGE lines are ignored without selection."""
        ranges = RangeFilter()
        ranges.handle(_directive("RANGE", "END a"))

        assert ranges.active

    def test_named_range_toggles_active(self):
        """Test that only the selected range is active."""
        ranges = RangeFilter({"a"})
        assert not ranges.active

        ranges.handle(_directive("RANGE", "BEGIN b"))
        assert not ranges.active
        ranges.handle(_directive("RANGE", "BEGIN a"))
        assert ranges.active
        ranges.handle(_directive("RANGE", "END a"))
        assert not ranges.active

    def test_reset(self):
        """Test that reset returns to the initial state."""
        ranges = RangeFilter({"a"})
        ranges.handle(_directive("RANGE", "BEGIN a"))
        ranges.reset()

        assert not ranges.active

    @pytest.mark.parametrize("argument", ["BEGIN", "START a", "BEGIN a b"])
    def test_malformed_range(self, argument):
        """Test that malformed RANGE directives are rejected."""
        with pytest.raises(DirectiveSyntaxError):
            RangeFilter({"a"}).handle(_directive("RANGE", argument))
