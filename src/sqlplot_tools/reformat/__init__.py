"""
REFORMAT engine for TABULAR, TABTABLE and MACRO directives.
"""

from .engine import Reformat, parse_numbers, split_clause
from .formats import CellFormat, Highlight, LineFormat, Rounding
from .parser import ReformatParser

__all__ = [
    'CellFormat',
    'Highlight',
    'LineFormat',
    'Reformat',
    'ReformatParser',
    'Rounding',
    'parse_numbers',
    'split_clause',
]
