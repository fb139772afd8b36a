"""
Importer for RESULT lines from experiment logs.

Lines like

    RESULT algo=merge n=1024 time=0.53

are collected from files or standard input, the column types are inferred
from all values, a table is created and all rows are inserted inside one
transaction. Used by the ``import`` command and the IMPORT-DATA directive.
"""

import argparse
import bz2
import glob
import gzip
import logging
import lzma
import sys
from typing import IO, Iterable, List, Optional, Sequence, Set, Tuple

from ..exceptions import DocumentIOError, ImportDataError, SqlTableExistsError
from ..sql.base import SqlDatabase
from ..utils import split_fields
from .fieldset import FieldSet

logger = logging.getLogger(__name__)

RESULT_PREFIXES = ("RESULT", "// RESULT", "# RESULT")

_OPENERS = {
    ".gz": gzip.open,
    ".bz2": bz2.open,
    ".xz": lzma.open,
    ".lzma": lzma.open,
}


def result_offset(line: str) -> int:
    """Length of the RESULT marker at the start of line, 0 if there is none."""
    for prefix in RESULT_PREFIXES:
        n = len(prefix)
        if line.startswith(prefix) and len(line) > n and line[n] in " \t":
            return n + 1
    return 0


def split_result_line(line: str) -> List[str]:
    return split_fields(line[result_offset(line):])


def split_keyvalue(field: str, col: int, colnums: bool = False) -> Tuple[str, str]:
    """
    Split "key=value". A field without '=' becomes key "colN" with the
    field as value if colnums is set, otherwise a boolean key with value "1".
    """
    key, sep, value = field.partition("=")
    if sep:
        return key, value
    if colnums:
        return f"col{col}", field
    return field, "1"


def open_input(path: str) -> IO[str]:
    """Open a (possibly compressed) text input file."""
    for suffix, opener in _OPENERS.items():
        if path.endswith(suffix):
            return opener(path, "rt", encoding="utf-8", errors="replace")
    return open(path, "r", encoding="utf-8", errors="replace")


def expand_inputs(patterns: Sequence[str]) -> List[str]:
    """Expand glob patterns; patterns without matches are kept as given."""
    paths: List[str] = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern))
        paths.extend(matches if matches else [pattern])
    return paths


class ImportArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ImportDataError instead of exiting."""

    def error(self, message):
        raise ImportDataError(f"{self.prog}: {message}")


def build_parser(prog: str = "sqlplot-tools import",
                 parser_class: type = argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser = parser_class(
        prog=prog,
        description="Import RESULT lines from log files into a SQL table.",
    )
    parser.add_argument("-1", "--firstline", action="store_true",
                        help="take field types from first line and process stream")
    parser.add_argument("-a", "--all-lines", action="store_true",
                        help="process all lines, regardless of RESULT marker")
    parser.add_argument("-A", "--append", action="store_true",
                        help="append to an existing table instead of replacing it")
    parser.add_argument("-C", "--colnums", action="store_true",
                        help="enumerate unnamed fields with col# instead of using key names")
    parser.add_argument("-D", "--noduplicates", action="store_true",
                        help="eliminate duplicate RESULT lines")
    parser.add_argument("-T", "--temporary", action="store_true",
                        help="create a TEMPORARY table")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="increase verbosity")
    parser.add_argument("table", help="name of the table to create")
    parser.add_argument("files", nargs="*", help="input files or glob patterns (default: stdin)")
    return parser


class ImportData:
    """
    One import run into one table.

    ::: This is-in-layer Application-Layer.
    ::: This is a importer.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self, database: SqlDatabase, temporary: bool = False, verbose: int = 0):
        self.database = database
        self.temporary = temporary
        self.verbose = verbose
        self.firstline = False
        self.all_lines = False
        self.append = False
        self.colnums = False
        self.noduplicates = False

        self.table = ""
        self.fieldset = FieldSet()
        self.linedata: List[str] = []
        self.lineset: Set[str] = set()
        self.count = 0
        self.total_count = 0

    # ------------------------------------------------------------------
    # Table handling
    # ------------------------------------------------------------------

    def _drop_table(self) -> None:
        self.database.execute(f"DROP TABLE {self.database.quote_field(self.table)}")

    def create_table(self) -> None:
        """CREATE TABLE for the accumulated field set, replacing an old table."""
        if self.database.exist_table(self.table):
            if self.append:
                logger.info("Table \"%s\" exists. Appending data.", self.table)
                return
            logger.info("Table \"%s\" exists. Replacing data.", self.table)
            self._drop_table()

        sql = self.fieldset.make_create_table(self.database, self.table, self.temporary)
        logger.debug("%s", sql)
        try:
            self.database.execute(sql)
        except SqlTableExistsError:
            # table not visible to exist_table(), e.g. a MySQL TEMPORARY table
            if self.append:
                return
            self._drop_table()
            self.database.execute(sql)

    def insert_line(self, line: str) -> bool:
        """Insert one line; returns False if it was dropped as duplicate."""
        if self.noduplicates:
            if line in self.lineset:
                logger.debug("Dropping duplicate %s", line)
                return False
            self.lineset.add(line)

        keys, values = [], []
        for col, field in enumerate(split_result_line(line)):
            key, value = split_keyvalue(field, col, self.colnums)
            keys.append(self.database.quote_field(key))
            values.append(value)

        sql = (f"INSERT INTO {self.database.quote_field(self.table)} ({','.join(keys)}) "
               f"VALUES ({','.join(self.database.placeholder(i) for i in range(len(values)))})")
        if self.verbose >= 2:
            logger.debug("%s", sql)

        with self.database.query(sql, values):
            pass
        return True

    # ------------------------------------------------------------------
    # Input processing
    # ------------------------------------------------------------------

    def _add_fields(self, line: str) -> None:
        for col, field in enumerate(split_result_line(line)):
            key, value = split_keyvalue(field, col, self.colnums)
            self.fieldset.add_field(key, value)

    def process_stream(self, stream: Iterable[str]) -> None:
        """Process an input stream, caching lines or inserting directly."""
        for line in stream:
            line = line.rstrip("\r\n")
            if not self.all_lines and result_offset(line) == 0:
                continue
            if self.verbose >= 2:
                logger.debug("line: %s", line)

            if not self.firstline:
                self._add_fields(line)
                self.linedata.append(line)
                self.count += 1
                self.total_count += 1
                continue

            if self.total_count == 0:
                self._add_fields(line)
                self.create_table()
            if self.insert_line(line):
                self.count += 1
                self.total_count += 1

    def process_linedata(self) -> None:
        """CREATE TABLE and insert all cached lines."""
        self.create_table()
        for line in self.linedata:
            if self.insert_line(line):
                self.count += 1
                self.total_count += 1

    def run(self, table: str, files: Sequence[str], stdin: Optional[IO[str]] = None) -> int:
        """
        Import files (or stdin) into table.

        Returns:
            Number of rows inserted
        """
        self.table = table

        with self.database.transaction():
            if files:
                for path in expand_inputs(files):
                    self.count = 0
                    try:
                        with open_input(path) as stream:
                            self.process_stream(stream)
                    except OSError as e:
                        raise DocumentIOError(f"Error reading {path}: {e}") from e
                    logger.info("%s %d rows of data from %s",
                                "Imported" if self.firstline else "Cached", self.count, path)
            else:
                self.process_stream(stdin if stdin is not None else sys.stdin)

            if not self.firstline:
                if not self.fieldset:
                    raise ImportDataError(f"No RESULT lines found for table \"{table}\"")
                self.count = self.total_count = 0
                self.process_linedata()

        logger.info("Imported in total %d rows of data containing %d fields",
                    self.total_count, len(self.fieldset))
        return self.total_count

    def main(self, argv: Sequence[str], stdin: Optional[IO[str]] = None) -> int:
        """Parse importer options and run the import."""
        args = build_parser(parser_class=ImportArgumentParser).parse_args(list(argv))
        self.firstline = args.firstline
        self.all_lines = args.all_lines
        self.append = args.append
        self.colnums = args.colnums
        self.noduplicates = args.noduplicates
        self.temporary = self.temporary or args.temporary
        self.verbose = max(self.verbose, args.verbose)
        return self.run(args.table, args.files, stdin)
