"""
Directive processor for LaTeX documents (comment character '%').

PLOT and MULTIPLOT write pgfplots coordinate lists:

    % PLOT SELECT n, time FROM stats
    \\addplot[red] coordinates { (1,2) (2,3) };

Everything up to "coordinates {" and from "};" on is kept when the
coordinates are regenerated.
"""

import logging
from typing import List

from ..directives import Directive
from ..matchers import LATEX_ADDPLOT, LATEX_DEF, LATEX_LEGEND, LATEX_TABULAR_ROW
from .base import DocumentProcessor, MultiplotSpec, PlotGroup, collect_groups

logger = logging.getLogger(__name__)


def format_coordinates(group: PlotGroup) -> str:
    """Coordinate list " (x,y) (x,y) ..." with optional error bars."""
    out = []
    for p in group.points:
        coord = f" ({p.x},{p.y})"
        if p.xerr is not None or p.yerr is not None:
            coord += f" +- ({p.xerr or 0},{p.yerr or 0})"
        out.append(coord)
    return "".join(out)


class LatexProcessor(DocumentProcessor):
    """
    Processes % directives in LaTeX documents.

    ::: This is-in-layer Application-Layer.
    ::: This is a processor.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    language = "latex"
    comment_char = "%"
    tabular_line_end = " \\\\"
    tabular_row_matcher = LATEX_TABULAR_ROW
    macro_matcher = LATEX_DEF

    def format_macro(self, name: str, value: str) -> str:
        return f"\\def\\{name}{{{value}}}"

    def process_plot(self, directive: Directive) -> None:
        coords = []
        with self.database.query(directive.argument) as query:
            while query.step():
                coords.append(f" ({','.join(query.current_texts())})")
        coords_text = "".join(coords)

        ln = directive.end
        m = LATEX_ADDPLOT.match(self.lines[ln]) if ln < len(self.lines) else None
        if m:
            self.lines.replace(ln, ln + 1, directive.indent,
                               [m.group(1) + coords_text + " " + m.group(2)], "PLOT coordinates")
        else:
            self.lines.replace(ln, ln, directive.indent,
                               [f"\\addplot coordinates {{{coords_text} }};"], "new PLOT coordinates")

    def process_multiplot(self, directive: Directive) -> None:
        spec = MultiplotSpec.parse(directive.text)
        with self.database.query(spec.query) as query:
            groups = collect_groups(query, spec)

        out: List[str] = []
        entry = 0
        ln = directive.end

        # reuse existing \addplot / \addlegendentry pairs
        while ln < len(self.lines):
            plot_match = LATEX_ADDPLOT.match(self.lines[ln])
            if not plot_match:
                break
            ln += 1

            legend_match = LATEX_LEGEND.match(self.lines[ln]) if ln < len(self.lines) else None
            if legend_match:
                ln += 1

            if entry >= len(groups):
                continue  # gobble surplus entries

            group = groups[entry]
            out.append(plot_match.group(1) + format_coordinates(group) + " " + plot_match.group(2))
            if legend_match:
                out.append(legend_match.group(1) + group.legend + legend_match.group(2))
            else:
                out.append(f"\\addlegendentry{{{group.legend}}};")
            entry += 1

        # append missing entries
        for group in groups[entry:]:
            out.append(f"\\addplot coordinates {{{format_coordinates(group)} }};")
            out.append(f"\\addlegendentry{{{group.legend}}};")

        self.lines.replace(directive.end, ln, directive.indent, out, "MULTIPLOT")
