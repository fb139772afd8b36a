"""
sqlplot-tools - SQL-driven live documents

Processes LaTeX and Gnuplot files containing SQL directives in comments,
executes the queries and splices the generated tables, plot coordinates,
datafiles and macros back into the document. Re-running the tool on its
own output is idempotent.
"""

__version__ = "0.5.0"

from .context import ProcessingContext
from .document import ProcessedDocument, detect_filetype, process_file, process_stream
from .exceptions import (
    DirectiveSyntaxError,
    DocumentIOError,
    ImportDataError,
    InternalError,
    ReformatSyntaxError,
    SqlError,
    SqlPlotError,
    SqlTableExistsError,
)
from .results import Err, Ok, ProcessError, ProcessResult
from .sql import connect

__all__ = [
    "__version__",
    "ProcessingContext",
    "ProcessedDocument",
    "detect_filetype",
    "process_file",
    "process_stream",
    "connect",
    "Ok",
    "Err",
    "ProcessError",
    "ProcessResult",
    "SqlPlotError",
    "DirectiveSyntaxError",
    "ReformatSyntaxError",
    "SqlError",
    "SqlTableExistsError",
    "DocumentIOError",
    "InternalError",
    "ImportDataError",
]
