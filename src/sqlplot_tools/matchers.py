"""
Named line matchers used to recognize previously generated blocks.

Each matcher must match a whole line. Capture groups hold the parts of an
old line that survive regeneration (opening syntax and user decoration).
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


class LineMatcher:
    """A named, whole-line regular expression."""

    def __init__(self, name: str, pattern: str):
        self.name = name
        self.regex = re.compile(pattern)

    def match(self, line: str) -> Optional["re.Match[str]"]:
        m = self.regex.fullmatch(line)
        logger.debug("%s %s: %s", self.name, "matches" if m else "does not match", line)
        return m

    def __repr__(self) -> str:
        return f"LineMatcher({self.name!r})"


# \addplot[style] coordinates { (1,2) (2,3) }; trailing
LATEX_ADDPLOT = LineMatcher(
    "latex-addplot", r"[ \t]*(\\addplot.*coordinates \{)[^}]+(\};.*)")

# \addlegendentry{legend}; trailing
LATEX_LEGEND = LineMatcher(
    "latex-addlegendentry", r"[ \t]*(\\addlegendentry\{).*(\};.*)")

# \def\name{value}
LATEX_DEF = LineMatcher(
    "latex-def", r"[ \t]*\\def\\[^{\s]+\{.*\}[ \t]*")

# a & b & c \\ decoration
LATEX_TABULAR_ROW = LineMatcher(
    "latex-tabular-row", r"(?:.* & )?.*?\\\\(.*)")

# plot \
GNUPLOT_PLOT = LineMatcher(
    "gnuplot-plot", r"[ \t]*plot.*\\[ \t]*")

# 'file' index N title "legend" decoration, \
GNUPLOT_DATASET = LineMatcher(
    "gnuplot-dataset", r"[ \t]*'[^']+' index [0-9]+( title \"[^\"]*\")?( .*?)?(, \\)?[ \t]*")

# name = value
GNUPLOT_ASSIGN = LineMatcher(
    "gnuplot-assign", r"[^=]+ = .*")

# MULTIPLOT(col1,col2|title) SELECT ...
MULTIPLOT_ARGUMENT = LineMatcher(
    "multiplot-argument", r"MULTIPLOT\(([^)]+)\)\s+(.+)")
