"""
Processing context shared by all directives of a run.

Holds the state that directives read and change in document order: the
active database connection, the verbosity and the RANGE filter.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .directives import RangeFilter
from .sql import SqlDatabase, connect

logger = logging.getLogger(__name__)


@dataclass
class ProcessingContext:
    """
    Explicit state passed to the scanner and every processor.

    ::: This is-in-layer Application-Layer.
    ::: This is a context.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """
    database: Optional[SqlDatabase] = None
    verbose: int = 0
    ranges: RangeFilter = field(default_factory=RangeFilter)
    conninfo: str = ""

    @classmethod
    def create(cls, conninfo: str = "", ranges: Iterable[str] = (), verbose: int = 0,
               database: Optional[SqlDatabase] = None) -> "ProcessingContext":
        return cls(database=database, verbose=verbose,
                   ranges=RangeFilter(set(ranges)), conninfo=conninfo)

    def require_database(self) -> SqlDatabase:
        """The active database, connecting with the default conninfo on first use."""
        if self.database is None:
            self.database = connect(self.conninfo)
        return self.database

    def connect(self, conninfo: str) -> SqlDatabase:
        """Switch to a new database; the previous connection is closed."""
        database = connect(conninfo)
        self.close()
        self.database = database
        return database

    def close(self) -> None:
        if self.database is not None:
            self.database.close()
            self.database = None
