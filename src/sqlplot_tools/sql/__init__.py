"""
SQL abstraction over SQLite, PostgreSQL and MySQL.

Use ``connect(conninfo)`` to open a database; the scheme prefix of the
connection string selects the backend:

    sqlite                      in-memory SQLite database
    sqlite:<path>               SQLite database file
    postgresql:<conninfo>       libpq connection string (also pg:, pgsql:, postgres:)
    mysql:<key=value ...>       MySQL parameters, or just a database name
    (empty)                     PostgreSQL defaults, then MySQL, then in-memory SQLite
"""

import logging

from ..exceptions import SqlError
from .base import DbType, SqlDataCache, SqlDatabase, SqlQuery, cell_text

logger = logging.getLogger(__name__)

_SQLITE_SCHEMES = ("sqlite", "sqlite3")
_PGSQL_SCHEMES = ("postgresql", "postgres", "pgsql", "pg")
_MYSQL_SCHEMES = ("mysql",)


def _connect_sqlite(path: str) -> SqlDatabase:
    from .sqlite import SQLiteDatabase
    return SQLiteDatabase.connect(path or ":memory:")


def _connect_pgsql(conninfo: str) -> SqlDatabase:
    from .pgsql import PgSqlDatabase
    return PgSqlDatabase.connect(conninfo)


def _connect_mysql(conninfo: str) -> SqlDatabase:
    from .mysql import MySqlDatabase
    return MySqlDatabase.connect(conninfo)


def _connect_default() -> SqlDatabase:
    for name, factory in (("PostgreSQL", _connect_pgsql), ("MySQL", _connect_mysql)):
        try:
            return factory("")
        except SqlError as e:
            logger.debug("%s not available: %s", name, e)
    return _connect_sqlite("")


def connect(conninfo: str = "") -> SqlDatabase:
    """
    Open a database connection.

    Args:
        conninfo: "<scheme>:<backend parameters>", see module docstring

    Returns:
        Connected SqlDatabase

    Raises:
        SqlError: Unknown scheme or failed connection
    """
    conninfo = conninfo.strip()
    if not conninfo:
        return _connect_default()

    scheme, _, rest = conninfo.partition(":")
    scheme = scheme.lower()
    if scheme in _SQLITE_SCHEMES:
        return _connect_sqlite(rest)
    if scheme in _PGSQL_SCHEMES:
        return _connect_pgsql(rest)
    if scheme in _MYSQL_SCHEMES:
        return _connect_mysql(rest)
    raise SqlError(f"Unknown database type '{scheme}' in '{conninfo}'")


__all__ = [
    'DbType',
    'SqlDataCache',
    'SqlDatabase',
    'SqlQuery',
    'cell_text',
    'connect',
]
