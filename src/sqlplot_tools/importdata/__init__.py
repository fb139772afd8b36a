"""
RESULT-line importer: builds SQL tables from experiment logs.
"""

from .fieldset import FieldSet, FieldType, detect, sqlname
from .importer import ImportData, build_parser, result_offset, split_keyvalue, split_result_line

__all__ = [
    'FieldSet',
    'FieldType',
    'ImportData',
    'build_parser',
    'detect',
    'result_offset',
    'split_keyvalue',
    'split_result_line',
    'sqlname',
]
