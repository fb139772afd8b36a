"""
Directive processor for Gnuplot scripts (comment character '#').

Query results are written to a side datafile "<script>-data.txt", one
index block per dataset, and the plot command following the directive
refers to them:

    # MULTIPLOT(algo) SELECT algo, n AS x, time AS y FROM stats ORDER BY algo, x
    plot \\
        'speed-data.txt' index 0 title "algo=merge" with linespoints, \\
        'speed-data.txt' index 1 title "algo=quick" with lines lw 2

Decoration after the index/title of existing plot lines is kept.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..context import ProcessingContext
from ..directives import Directive
from ..matchers import GNUPLOT_ASSIGN, GNUPLOT_DATASET, GNUPLOT_PLOT
from ..textlines import TextLines
from ..utils import is_double
from .base import DocumentProcessor, MultiplotSpec, collect_groups

logger = logging.getLogger(__name__)

DEFAULT_STYLE = " with linespoints"
RULE = "#" * 80


@dataclass
class Dataset:
    """One plotted index block of the datafile."""
    index: int
    title: str = ""


def datafile_name(filename: str) -> str:
    """"dir/speed.gp" -> "dir/speed-data.txt"."""
    path = Path(filename)
    return str(path.with_name(path.stem + "-data.txt"))


def maybe_quote(value: str) -> str:
    """Quote a value for gnuplot unless it is a plain number."""
    if is_double(value):
        return value
    return "'" + value.replace("'", "''") + "'"


class GnuplotProcessor(DocumentProcessor):
    """
    Processes # directives in Gnuplot scripts.

    ::: This is-in-layer Application-Layer.
    ::: This is a processor.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    language = "gnuplot"
    comment_char = "#"
    macro_matcher = GNUPLOT_ASSIGN

    def __init__(self, context: ProcessingContext, lines: TextLines, filename: str = "stdin"):
        super().__init__(context, lines, filename)
        self.datafile_path = datafile_name(filename)
        self.datafile_ref = Path(self.datafile_path).name
        self.data = io.StringIO()
        self.data_index = 0

    def finish(self) -> None:
        self.side_files[self.datafile_path] = self.data.getvalue()

    def format_macro(self, name: str, value: str) -> str:
        return f"{name} = {maybe_quote(value)}"

    def _dataset_line(self, dataset: Dataset, title: str, style: str) -> str:
        line = f"    '{self.datafile_ref}' index {dataset.index}"
        if dataset.title:
            line += f' title "{dataset.title}"'
        elif title:
            line += title
        return line + style

    @staticmethod
    def _plot_lines(head: str, entries: List[str]) -> List[str]:
        """plot command spanning one continuation line per entry."""
        if not entries:
            return []
        return [head] + [e + ", \\" for e in entries[:-1]] + [entries[-1]]

    def plot_rewrite(self, directive: Directive, datasets: List[Dataset], description: str) -> None:
        """
        Rewrite (or create) the plot command after the directive so that it
        plots exactly the given datasets.
        """
        ln = directive.end

        if ln >= len(self.lines) or not GNUPLOT_PLOT.match(self.lines[ln]):
            # no plot command: construct a default one
            entries = [self._dataset_line(ds, "", DEFAULT_STYLE) for ds in datasets]
            out = self._plot_lines("plot \\", entries)
            self.lines.replace(ln, ln, directive.indent, out, description)
            return

        head = self.lines[ln].strip()
        entries: List[str] = []
        eln = ln + 1

        while eln < len(self.lines):
            m = GNUPLOT_DATASET.match(self.lines[eln])
            if not m:
                break
            eln += 1

            if len(entries) < len(datasets):
                entries.append(self._dataset_line(datasets[len(entries)], m.group(1) or "", m.group(2) or ""))
            # else: gobble surplus plot lines

            if not m.group(3):
                break

        # append missing plot descriptions
        for ds in datasets[len(entries):]:
            entries.append(self._dataset_line(ds, "", DEFAULT_STYLE))

        out = self._plot_lines(head, entries)
        self.lines.replace(ln, eln, directive.indent, out, description)

    def process_plot(self, directive: Directive) -> None:
        df = self.data
        df.write(f"{RULE}\n# PLOT {directive.argument}\n#\n")

        with self.database.query(directive.argument) as query:
            while query.step():
                df.write("\t".join(query.current_texts()) + "\n")

        df.write("\n\n")
        datasets = [Dataset(self.data_index)]
        self.data_index += 1

        self.plot_rewrite(directive, datasets, "PLOT")

    def process_multiplot(self, directive: Directive) -> None:
        spec = MultiplotSpec.parse(directive.text)
        with self.database.query(spec.query) as query:
            groups = collect_groups(query, spec)

        df = self.data
        df.write(f"{RULE}\n# {directive.text}\n#\n")

        datasets = []
        for i, group in enumerate(groups):
            if i != 0:
                df.write("\n\n")
                self.data_index += 1
            datasets.append(Dataset(self.data_index, group.legend))
            df.write(f"# index {self.data_index} {group.legend}\n")
            for p in group.points:
                values = [p.x, p.y] + [e for e in (p.xerr, p.yerr) if e is not None]
                df.write("\t".join(values) + "\n")

        df.write("\n\n")
        self.data_index += 1

        self.plot_rewrite(directive, datasets, "MULTIPLOT")
