"""
PostgreSQL backend over ``psycopg2``.

psycopg2's default client-side cursor transfers the whole result on
execute, so the row count is known up front and the result is stored
in the data cache immediately.
"""

import logging
from typing import Any, List, Optional, Sequence

import psycopg2

from ..exceptions import SqlError
from .base import DbType, Row, SqlDataCache, SqlDatabase, SqlQuery, row_text

logger = logging.getLogger(__name__)

DUPLICATE_TABLE = "42P07"


class PgSqlQuery(SqlQuery):
    """Materialized PostgreSQL result."""

    def __init__(self, database: "PgSqlDatabase", statement: str,
                 params: Optional[Sequence[Any]] = None):
        super().__init__(database, statement)
        cursor = database.connection.cursor()
        try:
            cursor.execute(statement, tuple(params) if params is not None else None)
            self._names = [d[0] for d in (cursor.description or ())]
            rows = cursor.fetchall() if cursor.description else []
        except psycopg2.Error as e:
            raise database._fail(e, statement) from e
        finally:
            cursor.close()
        self._cache = SqlDataCache([row_text(r) for r in rows])
        logger.debug("--> %d rows", len(self._cache))

    def _column_names(self) -> List[str]:
        return self._names

    def _fetch_row(self) -> Optional[Row]:
        # never reached, the cache is filled on construction
        return None


class PgSqlDatabase(SqlDatabase):
    """
    PostgreSQL database.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a repository.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    db_type = DbType.PGSQL

    @classmethod
    def connect(cls, conninfo: str = "") -> "PgSqlDatabase":
        """
        Connect using a libpq connection string.

        An empty conninfo uses the PG* environment variables and defaults.
        """
        try:
            connection = psycopg2.connect(conninfo)
        except psycopg2.Error as e:
            raise SqlError(f"Connection to PostgreSQL database failed: {str(e).strip()}") from e
        connection.autocommit = True
        logger.info("Connected to PostgreSQL database %s", connection.dsn)
        return cls(connection)

    def _is_table_exists(self, error: Exception) -> bool:
        return getattr(error, "pgcode", None) == DUPLICATE_TABLE

    def execute(self, sql: str) -> None:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
        except psycopg2.Error as e:
            raise self._fail(e, sql) from e
        finally:
            cursor.close()

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> PgSqlQuery:
        return PgSqlQuery(self, sql, params)

    def placeholder(self, i: int) -> str:
        return "%s"

    def exist_table(self, table: str) -> bool:
        with self.query("SELECT COUNT(*) FROM pg_tables WHERE tablename = %s", [table]) as q:
            q.step()
            return q.text(0) != "0"
