"""
Automatic detection of SQL column types from imported text values.
"""

from enum import IntEnum
from typing import List, Tuple

from ..sql.base import SqlDatabase
from ..utils import is_double, is_integer


class FieldType(IntEnum):
    """Detected column types; larger values are more specific."""
    NONE = 0
    VARCHAR = 1
    DOUBLE = 2
    INTEGER = 3


def detect(value: str) -> FieldType:
    """
    Detect the most specific type of a text value.

    "1234" -> INTEGER, "1234.3" -> DOUBLE, ".3e-3" -> DOUBLE, "1234,3" -> VARCHAR
    """
    if is_integer(value):
        return FieldType.INTEGER
    if is_double(value):
        return FieldType.DOUBLE
    return FieldType.VARCHAR


def sqlname(database: SqlDatabase, field_type: FieldType) -> str:
    """SQL type name of a field type on the given database."""
    if field_type == FieldType.INTEGER:
        return "BIGINT"
    if field_type == FieldType.DOUBLE:
        return "DOUBLE PRECISION"
    if field_type == FieldType.VARCHAR:
        return database.varchar_type
    return "NONE"


class FieldSet:
    """
    Ordered list of (column, type), widened as more values are seen.

    ::: This is-in-layer Domain-Layer.
    ::: This is a value-object.
    """

    def __init__(self):
        self.fields: List[Tuple[str, FieldType]] = []

    def __len__(self) -> int:
        return len(self.fields)

    def add_field(self, key: str, value: str) -> None:
        """Add a (key, value) pair, widening the type of an existing key."""
        field_type = detect(value)
        for i, (name, known) in enumerate(self.fields):
            if name == key:
                if known > field_type:
                    self.fields[i] = (name, field_type)
                return
        self.fields.append((key, field_type))

    def make_create_table(self, database: SqlDatabase, table: str, temporary: bool = False) -> str:
        columns = ", ".join(f"{database.quote_field(name)} {sqlname(database, t)}"
                            for name, t in self.fields)
        return (f"CREATE {'TEMPORARY ' if temporary else ''}TABLE "
                f"{database.quote_field(table)} ({columns})")
