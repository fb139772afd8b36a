"""
MySQL backend over ``pymysql``.

Queries use unbuffered server-side cursors (SSCursor): rows stream one at
a time and the row count is unknown until the result is drained into the
data cache with ``read_complete()``. MySQL cannot list TEMPORARY tables, so
table creation relies on the DROP-and-retry handling of
SqlTableExistsError.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import pymysql
import pymysql.cursors

from ..exceptions import SqlError
from .base import DbType, Row, SqlDatabase, SqlQuery, row_text

logger = logging.getLogger(__name__)

ER_TABLE_EXISTS_ERROR = 1050

_CONNINFO_KEYS = {
    "host": "host",
    "port": "port",
    "user": "user",
    "password": "password",
    "passwd": "password",
    "database": "database",
    "db": "database",
    "dbname": "database",
    "unix_socket": "unix_socket",
    "socket": "unix_socket",
}


def parse_mysql_conninfo(conninfo: str) -> Dict[str, Any]:
    """
    Parse "key=value ..." pairs into pymysql.connect() arguments.

    A bare word names the database. Pairs may be separated by blanks or ';'.
    """
    params: Dict[str, Any] = {}
    for word in conninfo.replace(";", " ").split():
        key, sep, value = word.partition("=")
        if not sep:
            params["database"] = word
            continue
        if key not in _CONNINFO_KEYS:
            raise SqlError(f"Unknown MySQL connection parameter '{key}'")
        if key == "port":
            try:
                params["port"] = int(value)
            except ValueError:
                raise SqlError(f"Invalid MySQL port '{value}'") from None
        else:
            params[_CONNINFO_KEYS[key]] = value
    return params


class MySqlQuery(SqlQuery):
    """Forward-only MySQL result."""

    def __init__(self, database: "MySqlDatabase", statement: str,
                 params: Optional[Sequence[Any]] = None):
        super().__init__(database, statement)
        self._cursor = database.connection.cursor(pymysql.cursors.SSCursor)
        try:
            self._cursor.execute(statement, tuple(params) if params is not None else None)
        except pymysql.MySQLError as e:
            self._cursor.close()
            raise database._fail(e, statement) from e
        self._names = [d[0] for d in (self._cursor.description or ())]

    def _column_names(self) -> List[str]:
        return self._names

    def _fetch_row(self) -> Optional[Row]:
        try:
            row = self._cursor.fetchone()
        except pymysql.MySQLError as e:
            raise self.database._fail(e, self.statement) from e
        return None if row is None else row_text(row)

    def close(self) -> None:
        self._cursor.close()


class MySqlDatabase(SqlDatabase):
    """
    MySQL database.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a repository.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    db_type = DbType.MYSQL
    varchar_type = "TEXT"

    @classmethod
    def connect(cls, conninfo: str = "") -> "MySqlDatabase":
        """
        Connect to a MySQL server.

        Settings missing from conninfo are read from ~/.my.cnf (if present).
        """
        params = parse_mysql_conninfo(conninfo)
        my_cnf = os.path.expanduser("~/.my.cnf")
        if os.path.exists(my_cnf):
            params.setdefault("read_default_file", my_cnf)
        try:
            connection = pymysql.connect(autocommit=True, **params)
        except pymysql.MySQLError as e:
            raise SqlError(f"Connection to MySQL database failed: {e}") from e
        logger.info("Connected to MySQL database %s", params.get("database", ""))
        return cls(connection)

    def _is_table_exists(self, error: Exception) -> bool:
        return bool(error.args) and error.args[0] == ER_TABLE_EXISTS_ERROR

    def execute(self, sql: str) -> None:
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
        except pymysql.MySQLError as e:
            raise self._fail(e, sql) from e
        finally:
            cursor.close()

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> MySqlQuery:
        return MySqlQuery(self, sql, params)

    def quote_field(self, field: str) -> str:
        return "`" + field.replace("`", "``") + "`"

    def placeholder(self, i: int) -> str:
        return "%s"

    def exist_table(self, table: str) -> bool:
        # TEMPORARY tables are not listed here
        sql = ("SELECT COUNT(*) FROM information_schema.tables "
               "WHERE table_schema = DATABASE() AND table_name = %s")
        with self.query(sql, [table]) as q:
            q.step()
            return q.text(0) != "0"
