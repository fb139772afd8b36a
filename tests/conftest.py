"""
Shared pytest fixtures for sqlplot-tools tests.

This module provides an in-memory SQLite database with sample benchmark
results, a processing context bound to it, and a helper that runs the
directive processors on document text.
"""

import logging

import pytest

from sqlplot_tools.context import ProcessingContext
from sqlplot_tools.document import process_lines
from sqlplot_tools.logging_config import ROOT_LOGGER_NAME
from sqlplot_tools.sql.sqlite import SQLiteDatabase
from sqlplot_tools.textlines import TextLines


@pytest.fixture(autouse=True)
def reset_logging():
    """
    Detach handlers installed by configure_logging after each test.

    The driver attaches a stderr handler once per process; pytest swaps
    sys.stderr per test, so the handler must not outlive the test.
    """
    yield

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def db():
    """
    Create an in-memory SQLite database with sample tables.

    Yields:
        SQLiteDatabase: database holding ``stats`` and ``points``
    """
    database = SQLiteDatabase.connect(":memory:")
    database.execute("CREATE TABLE stats (algo VARCHAR, n INTEGER, time DOUBLE PRECISION)")
    database.execute(
        "INSERT INTO stats VALUES "
        "('merge', 1, 0.5), ('merge', 2, 1.5), ('quick', 1, 0.25), ('quick', 2, 0.75)")
    database.execute("CREATE TABLE points (x INTEGER, y INTEGER)")
    database.execute("INSERT INTO points VALUES (1, 2), (2, 3)")
    yield database

    database.close()


@pytest.fixture
def context(db):
    """
    Create a ProcessingContext using the sample database.

    Args:
        db: The sample database fixture.

    Returns:
        ProcessingContext: context without RANGE selection
    """
    return ProcessingContext.create(database=db)


@pytest.fixture
def process(context):
    """
    Run the processor of a file type on document text.

    Returns:
        Callable (text, filetype="latex", filename=None) -> ProcessResult
    """
    default_names = {"latex": "doc.tex", "gnuplot": "speed.gp"}

    def _process(text, filetype="latex", filename=None):
        lines = TextLines.from_text(text)
        return process_lines(context, lines, filetype, filename or default_names[filetype])

    return _process


@pytest.fixture
def process_text(process):
    """Run a processor and return the resulting document text."""

    def _process_text(text, filetype="latex", filename=None):
        result = process(text, filetype, filename)
        assert result.is_ok(), str(result)
        return result.unwrap().text

    return _process_text
