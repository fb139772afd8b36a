"""
Directive processors per document language.
"""

from typing import Dict, Type

from .base import DocumentProcessor, MultiplotSpec, PlotGroup, PlotPoint, collect_groups
from .gnuplot import Dataset, GnuplotProcessor
from .latex import LatexProcessor

PROCESSORS: Dict[str, Type[DocumentProcessor]] = {
    "latex": LatexProcessor,
    "gnuplot": GnuplotProcessor,
}

__all__ = [
    'Dataset',
    'DocumentProcessor',
    'GnuplotProcessor',
    'LatexProcessor',
    'MultiplotSpec',
    'PROCESSORS',
    'PlotGroup',
    'PlotPoint',
    'collect_groups',
]
