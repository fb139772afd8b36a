"""
SQLite backend over the standard library ``sqlite3`` module.

The connection runs in autocommit mode (``isolation_level=None``) so that
explicit BEGIN/COMMIT statements behave as they do in the sqlite3 shell.
Results are forward-only cursors.
"""

import logging
import sqlite3
from typing import Any, List, Optional, Sequence

from ..exceptions import SqlError
from .base import DbType, Row, SqlDatabase, SqlQuery, row_text

logger = logging.getLogger(__name__)


class SQLiteQuery(SqlQuery):
    """Forward-only SQLite result."""

    def __init__(self, database: "SQLiteDatabase", statement: str,
                 params: Optional[Sequence[Any]] = None):
        super().__init__(database, statement)
        self._cursor = database.connection.cursor()
        try:
            self._cursor.execute(statement, tuple(params or ()))
        except sqlite3.Error as e:
            self._cursor.close()
            raise database._fail(e, statement) from e
        self._names = [d[0] for d in (self._cursor.description or ())]

    def _column_names(self) -> List[str]:
        return self._names

    def _fetch_row(self) -> Optional[Row]:
        try:
            row = self._cursor.fetchone()
        except sqlite3.Error as e:
            raise self.database._fail(e, self.statement) from e
        return None if row is None else row_text(row)

    def close(self) -> None:
        self._cursor.close()


class SQLiteDatabase(SqlDatabase):
    """
    SQLite database, in memory or in a file.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a repository.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    db_type = DbType.SQLITE

    @classmethod
    def connect(cls, path: str = ":memory:") -> "SQLiteDatabase":
        """
        Open a SQLite database.

        Args:
            path: Database file, or ":memory:" for a private in-memory database

        Returns:
            Connected SQLiteDatabase
        """
        try:
            connection = sqlite3.connect(path, isolation_level=None)
        except sqlite3.Error as e:
            raise SqlError(f"Connection to SQLite3 database {path} failed: {e}") from e
        logger.info("Connected to SQLite3 database %s", path)
        return cls(connection)

    def _is_table_exists(self, error: Exception) -> bool:
        return isinstance(error, sqlite3.OperationalError) and "already exists" in str(error)

    def execute(self, sql: str) -> None:
        try:
            if ";" in sql.strip().rstrip(";"):
                self.connection.executescript(sql)
            else:
                self.connection.execute(sql)
        except sqlite3.Error as e:
            raise self._fail(e, sql) from e

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> SQLiteQuery:
        return SQLiteQuery(self, sql, params)

    def placeholder(self, i: int) -> str:
        return f"?{i + 1}"

    def exist_table(self, table: str) -> bool:
        sql = ("SELECT COUNT(*) FROM ("
               "SELECT name FROM sqlite_master WHERE type = 'table' "
               "UNION ALL "
               "SELECT name FROM sqlite_temp_master WHERE type = 'table'"
               ") WHERE name = ?1")
        with self.query(sql, [table]) as q:
            q.step()
            return q.text(0) != "0"
