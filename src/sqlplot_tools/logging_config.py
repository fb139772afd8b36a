"""
Logging Configuration for sqlplot-tools.

Provides centralized logger setup for the command-line driver. All modules
log through ``logging.getLogger(__name__)`` below the ``sqlplot_tools``
logger; this module attaches the handlers once.

Set SQLPLOT_LOG_FILE to additionally append every record to a file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "sqlplot_tools"

VERBOSE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PLAIN_FORMAT = '%(message)s'


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a handler.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    def emit(self, record):
        super().emit(record)
        self.flush()


def _create_file_handler(log_path: str) -> Optional[logging.FileHandler]:
    """
    Create a file handler appending to the given log file.

    Args:
        log_path: Path of the log file (parent directories are created)

    Returns:
        Configured FileHandler, or None if the file cannot be opened
    """
    try:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode='a', encoding='utf-8')
    except OSError as e:
        print(f"Cannot open log file {log_path}: {e}", file=sys.stderr, flush=True)
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT))
    return handler


def _create_stderr_handler(verbose: int) -> logging.StreamHandler:
    """Create a stderr handler for console output with auto-flush."""
    handler = FlushingStreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else PLAIN_FORMAT))
    return handler


def level_for_verbosity(verbose: int) -> int:
    """Map the -v count to a logging level."""
    return logging.DEBUG if verbose >= 1 else logging.INFO


def configure_logging(verbose: int = 0, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the sqlplot_tools logger hierarchy.

    Handlers are attached only once; later calls just adjust the level,
    so repeated driver invocations (e.g. in tests) do not duplicate output.

    Args:
        verbose: Verbosity level (0 = INFO, >= 1 = DEBUG)
        log_file: Optional log file, defaults to $SQLPLOT_LOG_FILE

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level_for_verbosity(verbose))

    # Only configure once
    if not logger.handlers:
        logger.propagate = False  # Don't propagate to root logger
        logger.addHandler(_create_stderr_handler(verbose))

        log_file = log_file or os.getenv("SQLPLOT_LOG_FILE")
        if log_file:
            file_handler = _create_file_handler(log_file)
            if file_handler:
                logger.addHandler(file_handler)

    return logger
