"""
Database abstraction shared by all SQL backends.

A SqlDatabase executes statements and creates SqlQuery objects. A query
result starts in cursor mode: ``step()`` advances one row, and ``text(col)``
/ ``is_null(col)`` read the current row. Processors that need random
access call ``read_complete()`` first, which drains the remaining rows into
a SqlDataCache; afterwards ``text_at(row, col)`` and ``num_rows()`` work on
every backend. Backends whose driver already materializes the result fill
the cache on construction, making ``read_complete()`` a no-op.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..exceptions import InternalError, SqlError, SqlTableExistsError

logger = logging.getLogger(__name__)

Row = Tuple[Optional[str], ...]


class DbType(Enum):
    """Supported database engines."""
    SQLITE = "sqlite"
    PGSQL = "postgresql"
    MYSQL = "mysql"


def cell_text(value: Any) -> Optional[str]:
    """
    Convert a driver value into the text representation of a cell.

    None stays None (SQL NULL); everything else becomes a string.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def row_text(row: Sequence[Any]) -> Row:
    return tuple(cell_text(v) for v in row)


class SqlDataCache:
    """
    Fully materialized query result: rows of nullable text cells.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a cache.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self, rows: Optional[List[Row]] = None):
        self.rows: List[Row] = rows if rows is not None else []

    def __len__(self) -> int:
        return len(self.rows)

    def is_null(self, row: int, col: int) -> bool:
        return self.rows[row][col] is None

    def text(self, row: int, col: int) -> str:
        value = self.rows[row][col]
        return "" if value is None else value


class SqlQuery(ABC):
    """
    Result of one SQL statement, read by cursor or from the cache.

    Queries are context managers and should be closed as soon as the
    directive that created them is done.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a query.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self, database: "SqlDatabase", statement: str):
        self.database = database
        self.statement = statement
        self._colmap: Optional[Dict[str, int]] = None
        self._cache: Optional[SqlDataCache] = None
        self._row = -1
        self._current: Optional[Row] = None

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _column_names(self) -> List[str]:
        """Column names of the result, empty for statements without result."""

    @abstractmethod
    def _fetch_row(self) -> Optional[Row]:
        """Fetch the next row from the driver, or None at the end."""

    def _fetch_remaining(self) -> List[Row]:
        rows = []
        while True:
            row = self._fetch_row()
            if row is None:
                return rows
            rows.append(row)

    def close(self) -> None:
        """Release driver resources."""

    def __enter__(self) -> "SqlQuery":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def num_cols(self) -> int:
        return len(self._column_names())

    def col_name(self, col: int) -> str:
        return self._column_names()[col]

    def col_names(self) -> List[str]:
        return list(self._column_names())

    def read_colmap(self) -> Dict[str, int]:
        """Build (once) the map from column name to column index."""
        if self._colmap is None:
            self._colmap = {}
            for i, name in enumerate(self._column_names()):
                self._colmap.setdefault(name, i)
        return self._colmap

    def exist_col(self, name: str) -> bool:
        return name in self.read_colmap()

    def find_col(self, name: str) -> int:
        colmap = self.read_colmap()
        if name not in colmap:
            raise InternalError(f"Column '{name}' not found in result of: {self.statement}")
        return colmap[name]

    # ------------------------------------------------------------------
    # Cursor access
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Advance to the next row. Returns False after the last row."""
        if self._cache is not None:
            self._row += 1
            if self._row < len(self._cache):
                self._current = self._cache.rows[self._row]
                return True
            self._current = None
            return False

        row = self._fetch_row()
        self._row += 1
        self._current = row
        return row is not None

    def current_row(self) -> int:
        return self._row

    def _current_row(self) -> Row:
        if self._current is None:
            raise InternalError("No current row, call step() first")
        return self._current

    def is_null(self, col: int) -> bool:
        return self._current_row()[col] is None

    def text(self, col: int) -> str:
        value = self._current_row()[col]
        return "" if value is None else value

    def current_texts(self) -> List[str]:
        return [self.text(c) for c in range(self.num_cols())]

    # ------------------------------------------------------------------
    # Cached access
    # ------------------------------------------------------------------

    @property
    def is_complete(self) -> bool:
        return self._cache is not None

    def read_complete(self) -> None:
        """
        Materialize the whole result for random access.

        Idempotent. On cursor-only backends this must happen before the
        first step(), since already consumed rows cannot be re-read.
        Stepping afterwards starts again at the first row.
        """
        if self._cache is not None:
            return
        if self._row >= 0:
            raise InternalError("read_complete() called after step() on a forward-only result")
        self._cache = SqlDataCache(self._fetch_remaining())
        logger.debug("--> %d rows", len(self._cache))

    def num_rows(self) -> int:
        if self._cache is None:
            raise InternalError("Row count is unknown before read_complete()")
        return len(self._cache)

    def _cached(self) -> SqlDataCache:
        if self._cache is None:
            raise InternalError("Random access requires read_complete()")
        return self._cache

    def is_null_at(self, row: int, col: int) -> bool:
        return self._cached().is_null(row, col)

    def text_at(self, row: int, col: int) -> str:
        return self._cached().text(row, col)


class SqlDatabase(ABC):
    """
    Connection to one database engine.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a repository.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    db_type: DbType
    varchar_type = "VARCHAR"

    def __init__(self, connection: Any):
        self.connection = connection
        self._errmsg = ""

    def type(self) -> DbType:
        return self.db_type

    def errmsg(self) -> str:
        """Message of the last backend error."""
        return self._errmsg

    def _fail(self, error: Exception, statement: Optional[str] = None) -> SqlError:
        """Record a driver error and translate it into a SqlError."""
        self._errmsg = str(error).strip()
        logger.debug("%s error: %s", self.db_type.value, self._errmsg)
        if self._is_table_exists(error):
            return SqlTableExistsError(self._errmsg, statement)
        return SqlError(self._errmsg, statement)

    def _is_table_exists(self, error: Exception) -> bool:
        return False

    @abstractmethod
    def execute(self, sql: str) -> None:
        """Execute a statement whose result (if any) is discarded."""

    @abstractmethod
    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> SqlQuery:
        """Execute a statement and return its result."""

    @abstractmethod
    def exist_table(self, table: str) -> bool:
        """Check whether a (non-temporary) table exists."""

    def quote_field(self, field: str) -> str:
        return '"' + field.replace('"', '""') + '"'

    @abstractmethod
    def placeholder(self, i: int) -> str:
        """Placeholder for the i-th (0-based) statement parameter."""

    def close(self) -> None:
        self.connection.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Context manager running a block inside BEGIN/COMMIT.

        Rolls back and re-raises on error.
        """
        self.execute("BEGIN")
        try:
            yield
        except Exception:
            self.execute("ROLLBACK")
            raise
        self.execute("COMMIT")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.db_type.value}>"
