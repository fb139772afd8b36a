"""
SqlPlotTools Exception Hierarchy

Contains all exception classes raised by the document processors,
the SQL backends, the REFORMAT parser and the data importer.
"""

from typing import Optional


class SqlPlotError(Exception):
    """
    Base exception for all sqlplot-tools operations.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class DirectiveSyntaxError(SqlPlotError):
    """
    Raised for malformed directives: bad MULTIPLOT clauses, missing
    required result columns, malformed RANGE lines.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class ReformatSyntaxError(DirectiveSyntaxError):
    """
    Raised when a REFORMAT(...) clause cannot be parsed or contains
    an invalid key or value.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} at line {line}, column {column}"
        super().__init__(message)


class SqlError(SqlPlotError):
    """
    Raised when a database backend fails to connect, prepare or execute.

    The message carries the backend error text, and ``statement`` the
    offending SQL text (if any).

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    def __init__(self, message: str, statement: Optional[str] = None):
        self.statement = statement
        if statement:
            message = f"{message} (statement: {statement})"
        super().__init__(message)


class SqlTableExistsError(SqlError):
    """
    Raised by CREATE TABLE when the table already exists.

    Backends that cannot enumerate temporary tables rely on this to
    DROP and retry the CREATE exactly once.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class DocumentIOError(SqlPlotError):
    """
    Raised when an input document, output file or side datafile
    cannot be read or written.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class InternalError(SqlPlotError):
    """
    Raised on internal invariant violations (programming errors).

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class ImportDataError(SqlPlotError):
    """
    Raised by the RESULT-line importer for unusable input or options.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


__all__ = [
    'SqlPlotError',
    'DirectiveSyntaxError',
    'ReformatSyntaxError',
    'SqlError',
    'SqlTableExistsError',
    'DocumentIOError',
    'InternalError',
    'ImportDataError',
]
