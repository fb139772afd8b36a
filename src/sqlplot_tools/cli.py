"""
sqlplot-tools command-line driver.

Run with: sqlplot-tools [options] [files...]
      or: sqlplot-tools [-D CONNINFO] import [options] <table> [files...]

::: This is-in-layer Presentation-Layer.
::: This is-in-component Command-Line.
::: This depends-on rich.
"""

import argparse
import difflib
import logging
import os
import sys
from typing import List, Optional, Sequence, TextIO, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import __version__
from .config import Settings, load_settings
from .context import ProcessingContext
from .document import (
    ProcessedDocument,
    process_file,
    process_stream,
    read_text,
    write_side_files,
    write_text,
)
from .exceptions import SqlPlotError
from .importdata import ImportData
from .logging_config import configure_logging
from .processors import PROCESSORS

logger = logging.getLogger(__name__)

IMPORT_COMMAND = "import"

_DIFF_STYLES = (
    ("+++", "bold"),
    ("---", "bold"),
    ("@@", "cyan"),
    ("+", "green"),
    ("-", "red"),
)


# =============================================================================
# Argument parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlplot-tools",
        description="Process SQL directives in LaTeX and Gnuplot documents.",
        epilog=f"Use '{IMPORT_COMMAND}' as first argument to import RESULT lines into a table.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=None,
                        help="increase verbosity (repeatable)")
    parser.add_argument("-f", "--filetype", choices=sorted(PROCESSORS),
                        help="force document type (default: detect by suffix)")
    parser.add_argument("-o", "--output", help="write all results to FILE instead of in place")
    parser.add_argument("-C", "--check-output", action="store_true",
                        help="compare results against the output instead of writing it")
    parser.add_argument("-D", "--database", help="database connection string")
    parser.add_argument("-R", "--range", dest="ranges", action="append", default=None,
                        metavar="NAME", help="process only the RANGE with this name (repeatable)")
    parser.add_argument("-W", "--workdir", help="change to DIR before processing")
    parser.add_argument("files", nargs="*", help="documents to process (default: stdin)")
    return parser


def split_import_command(argv: Sequence[str]) -> Tuple[List[str], Optional[List[str]]]:
    """
    Split argv at the import command.

    Returns:
        (driver arguments, importer arguments or None)
    """
    argv = list(argv)
    if IMPORT_COMMAND in argv:
        i = argv.index(IMPORT_COMMAND)
        return argv[:i], argv[i + 1:]
    return argv, None


def merge_settings(args: argparse.Namespace, settings: Settings) -> Settings:
    """Command-line options override config file and environment."""
    return Settings(
        database=args.database if args.database is not None else settings.database,
        filetype=args.filetype or settings.filetype,
        ranges=args.ranges if args.ranges is not None else settings.ranges,
        verbose=args.verbose if args.verbose is not None else settings.verbose,
        log_file=settings.log_file,
    )


# =============================================================================
# Output
# =============================================================================

def render_diff(old: str, new: str, path: str) -> Text:
    """Colored unified diff of old and new text."""
    text = Text()
    diff = difflib.unified_diff(old.splitlines(keepends=True), new.splitlines(keepends=True),
                                fromfile=path, tofile=f"{path} (processed)")
    for line in diff:
        style = next((s for prefix, s in _DIFF_STYLES if line.startswith(prefix)), "")
        text.append(line if line.endswith("\n") else line + "\n", style=style)
    return text


def check_output(path: str, new: str, console: Console) -> bool:
    """
    Compare processed output with the current contents of path.

    Returns:
        True if equal; otherwise the diff is printed and False returned
    """
    old = read_text(path) if os.path.exists(path) else ""
    if old == new:
        logger.info("Output %s is up to date", path)
        return True
    console.print(render_diff(old, new, path))
    logger.error("Output %s differs from processed result", path)
    return False


def print_summary(console: Console, documents: Sequence[ProcessedDocument]) -> None:
    table = Table(title="Processed documents", show_lines=False)
    table.add_column("Document", style="cyan")
    table.add_column("Type")
    table.add_column("Lines", justify="right")
    table.add_column("Datafiles")
    for doc in documents:
        table.add_row(doc.filename, doc.filetype, str(len(doc.lines)),
                      ", ".join(doc.side_files) or "-")
    console.print(table)


# =============================================================================
# Commands
# =============================================================================

def run_import(argv: Sequence[str], settings: Settings, stdin: Optional[TextIO] = None) -> int:
    context = ProcessingContext.create(settings.database, verbose=settings.verbose)
    try:
        importer = ImportData(context.require_database(), verbose=settings.verbose)
        importer.main(argv, stdin if stdin is not None else sys.stdin)
        return 0
    except SqlPlotError as e:
        logger.error("%s", e)
        return 1
    finally:
        context.close()


def run_documents(args: argparse.Namespace, settings: Settings,
                  stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                  console: Optional[Console] = None) -> int:
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    console = console or Console(stderr=True)

    context = ProcessingContext.create(settings.database, settings.ranges, settings.verbose)
    documents: List[ProcessedDocument] = []
    try:
        if args.files:
            for filename in args.files:
                result = process_file(context, filename, settings.filetype)
                if result.is_err():
                    logger.error("%s: %s", filename, result.error)
                    return 1
                documents.append(result.unwrap())
        else:
            if not settings.filetype:
                logger.error("Reading stdin requires -f latex|gnuplot")
                return 1
            result = process_stream(context, stdin, settings.filetype.lower())
            if result.is_err():
                logger.error("stdin: %s", result.error)
                return 1
            documents.append(result.unwrap())
    finally:
        context.close()

    try:
        status = _emit(args, documents, stdout, console)
    except SqlPlotError as e:
        logger.error("%s", e)
        return 1

    if args.files:
        print_summary(console, documents)
    return status


def _emit(args: argparse.Namespace, documents: Sequence[ProcessedDocument],
          stdout: TextIO, console: Console) -> int:
    """Write (or check) all results; only reached when every document succeeded."""
    if args.check_output:
        ok = True
        if args.output:
            ok = check_output(args.output, "".join(d.text for d in documents), console)
        elif args.files:
            for doc in documents:
                ok = check_output(doc.filename, doc.text, console) and ok
        for doc in documents:
            for path, text in doc.side_files.items():
                ok = check_output(path, text, console) and ok
        return 0 if ok else 1

    for doc in documents:
        write_side_files(doc)

    if args.output:
        write_text(args.output, "".join(d.text for d in documents))
    elif args.files:
        for doc in documents:
            logger.debug("Writing %s", doc.filename)
            write_text(doc.filename, doc.text)
    else:
        stdout.write(documents[0].text)
        stdout.flush()
    return 0


def run(argv: Optional[Sequence[str]] = None, stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None) -> int:
    """Run the driver and return the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    driver_argv, import_argv = split_import_command(argv)
    args = build_parser().parse_args(driver_argv)

    if args.workdir:
        os.chdir(args.workdir)

    settings = merge_settings(args, load_settings())
    configure_logging(settings.verbose, settings.log_file)

    if import_argv is not None:
        if args.files:
            logger.error("Unexpected arguments before '%s': %s", IMPORT_COMMAND, " ".join(args.files))
            return 1
        return run_import(import_argv, settings, stdin)

    return run_documents(args, settings, stdin, stdout)


def main():
    """Main entry point for sqlplot-tools."""
    sys.exit(run())


if __name__ == "__main__":
    main()
