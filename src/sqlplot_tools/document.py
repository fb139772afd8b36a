"""
Per-document driver.

Reads a document, selects the processor by file type, runs all directives
and returns the transformed document together with its side files. Nothing
is written here; callers write the result only after processing succeeded,
so a failing directive never leaves a half-processed file behind.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, TextIO

from .context import ProcessingContext
from .exceptions import DocumentIOError
from .processors import PROCESSORS
from .results import ProcessResult, process_err, process_ok
from .textlines import TextLines

logger = logging.getLogger(__name__)

SUFFIX_FILETYPES = {
    ".tex": "latex",
    ".latex": "latex",
    ".ltx": "latex",
    ".gp": "gnuplot",
    ".gpi": "gnuplot",
    ".gnu": "gnuplot",
    ".plt": "gnuplot",
    ".plot": "gnuplot",
    ".gnuplot": "gnuplot",
}


@dataclass
class ProcessedDocument:
    """Result of processing one document."""
    filename: str
    filetype: str
    lines: TextLines
    side_files: Dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.lines.to_text()


def detect_filetype(filename: str, override: Optional[str] = None) -> str:
    """
    Select the document language by override or filename suffix.

    Raises:
        DocumentIOError: Unknown override or unrecognized suffix
    """
    if override:
        filetype = override.lower()
        if filetype not in PROCESSORS:
            raise DocumentIOError(f"Unknown file type '{override}', use one of: {', '.join(PROCESSORS)}")
        return filetype

    suffix = Path(filename).suffix.lower()
    if suffix not in SUFFIX_FILETYPES:
        raise DocumentIOError(f"Could not determine file type of '{filename}', use -f to set it")
    return SUFFIX_FILETYPES[suffix]


def process_lines(context: ProcessingContext, lines: TextLines, filetype: str,
                  filename: str = "stdin") -> ProcessResult[ProcessedDocument]:
    processor = PROCESSORS[filetype](context, lines, filename)
    logger.debug("Processing %s as %s", filename, filetype)
    return processor.process().map(
        lambda result: ProcessedDocument(filename, filetype, result, dict(processor.side_files)))


def process_stream(context: ProcessingContext, stream: TextIO, filetype: str,
                   filename: str = "stdin") -> ProcessResult[ProcessedDocument]:
    """Process a document read from an open text stream."""
    lines = TextLines()
    lines.read_stream(stream)
    return process_lines(context, lines, filetype, filename)


def process_file(context: ProcessingContext, filename: str,
                 filetype: Optional[str] = None) -> ProcessResult[ProcessedDocument]:
    """Read and process one document file."""
    try:
        filetype = detect_filetype(filename, filetype)
        lines = TextLines()
        lines.set_content(read_text(filename))
        return process_lines(context, lines, filetype, filename)
    except DocumentIOError as e:
        return process_err("INPUT", f"cannot process {filename}", None, e)


def open_document(path: str, mode: str) -> TextIO:
    """
    Open a document byte-transparently.

    Bytes that are not valid UTF-8 survive a read/write cycle unchanged and
    line terminators are passed through untranslated.
    """
    return open(path, mode, encoding="utf-8", errors="surrogateescape", newline="")


def write_text(path: str, text: str) -> None:
    try:
        with open_document(path, "w") as f:
            f.write(text)
    except OSError as e:
        raise DocumentIOError(f"Error writing {path}: {e}") from e


def read_text(path: str) -> str:
    try:
        with open_document(path, "r") as f:
            return f.read()
    except OSError as e:
        raise DocumentIOError(f"Error reading {path}: {e}") from e


def write_side_files(document: ProcessedDocument) -> None:
    for path, text in document.side_files.items():
        logger.info("Writing datafile %s", path)
        write_text(path, text)
