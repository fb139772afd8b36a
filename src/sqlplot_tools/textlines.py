"""
Line buffer document model.

A document is held as a list of text lines. Directive processors never
touch the list directly; they compute new content and splice it in with
``TextLines.replace``, which logs what it does before doing it.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Union

logger = logging.getLogger(__name__)

BLANKS = " \t"


@dataclass(frozen=True)
class CommentBlock:
    """One logical comment: its text and the lines [begin, end) it spans."""
    text: str
    begin: int
    end: int
    indent: int


def split_content(content: Union[str, Sequence[str]]) -> List[str]:
    """Split a generated block into lines the way ``read_stream`` does."""
    if not isinstance(content, str):
        return list(content)
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class TextLines:
    """
    Ordered, mutable sequence of text lines of one document.

    ::: This is-in-layer Domain-Layer.
    ::: This is a document-model.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self, lines: Optional[Iterable[str]] = None, comment_char: str = "%"):
        self._lines: List[str] = list(lines) if lines is not None else []
        self.comment_char = comment_char
        # line terminator used when writing, taken from the input
        self.newline = "\n"

    # ------------------------------------------------------------------
    # Reading and writing
    # ------------------------------------------------------------------

    @classmethod
    def from_text(cls, text: str, comment_char: str = "%") -> "TextLines":
        lines = cls(comment_char=comment_char)
        lines.set_content(text)
        return lines

    def set_content(self, text: str) -> None:
        """Replace the buffer with text; CRLF input is written back as CRLF."""
        if "\r\n" in text:
            self.newline = "\r\n"
            text = text.replace("\r\n", "\n")
        else:
            self.newline = "\n"
        self._lines = split_content(text)

    def read_stream(self, stream: TextIO) -> None:
        """Replace the buffer with the lines of the stream."""
        self.set_content(stream.read())

    def write_stream(self, stream: TextIO) -> None:
        stream.write(self.to_text())

    def to_text(self) -> str:
        return "".join(line + self.newline for line in self._lines)

    # ------------------------------------------------------------------
    # Sequence access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, ln: int) -> str:
        return self._lines[ln]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    @property
    def lines(self) -> List[str]:
        """A copy of the current lines."""
        return list(self._lines)

    # ------------------------------------------------------------------
    # Splicing
    # ------------------------------------------------------------------

    def replace(self, begin: int, end: int, indent: int,
                content: Union[str, Sequence[str]], description: str) -> int:
        """
        Replace lines [begin, end) with content, each line indented.

        Args:
            begin: First line to remove
            end: One past the last line to remove (begin == end inserts)
            indent: Number of spaces put in front of every new line
            content: New lines, either a sequence or newline separated text
            description: Human-readable summary used for logging

        Returns:
            The line index just after the inserted content
        """
        new_lines = [" " * indent + line for line in split_content(content)]

        if begin == end:
            logger.info("Inserting %s at line %d (%d lines)", description, begin + 1, len(new_lines))
        else:
            logger.info("Replacing lines %d-%d with %s (%d lines)",
                        begin + 1, end, description, len(new_lines))

        self._lines[begin:end] = new_lines
        return begin + len(new_lines)

    # ------------------------------------------------------------------
    # Comment detection
    # ------------------------------------------------------------------

    def is_comment_line(self, ln: int, repeat: int = 1) -> Optional[int]:
        """
        Test whether line ln is a comment line.

        Leading blanks are skipped, then ``repeat`` comment characters must
        follow. Returns the index of the (first) comment character, or None.
        """
        line = self._lines[ln]
        indent = len(line) - len(line.lstrip(BLANKS))
        if line.startswith(self.comment_char * repeat, indent):
            return indent
        return None

    def collect_comment(self, ln: int) -> Optional[CommentBlock]:
        """
        Collect the logical comment starting at line ln.

        A single comment character introduces a one-line comment. A doubled
        comment character starts a multi-line comment: following lines at
        the same indent that also start with the doubled character are
        appended, each without its two-character prefix.
        """
        indent = self.is_comment_line(ln)
        if indent is None:
            return None

        line = self._lines[ln]
        end = ln + 1

        if self.is_comment_line(ln, 2) != indent:
            return CommentBlock(line[indent + 1:].strip(), ln, end, indent)

        text = line[indent + 2:]
        while end < len(self._lines) and self.is_comment_line(end, 2) == indent:
            text += self._lines[end][indent + 2:]
            end += 1

        return CommentBlock(text.strip(), ln, end, indent)

    def scan_for_comment(self, ln: int, prefix: str) -> Optional[int]:
        """
        Find the first comment line at or after ln.

        Returns its index if the comment text starts with prefix, otherwise
        (or if there is no further comment) None.
        """
        for i in range(ln, len(self._lines)):
            indent = self.is_comment_line(i)
            if indent is None:
                continue
            text = self._lines[i][indent + 1:].strip()
            return i if text.startswith(prefix) else None
        return None
