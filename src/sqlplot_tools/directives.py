"""
Directive scanner.

Walks a TextLines buffer top to bottom, turning comment blocks into
Directive values: the leading run of upper-case letters, '-' and '_' is the
keyword, the rest is the argument. The scanner resumes right after each
directive's comment lines, so content spliced in by a processor is scanned
next (and skipped, since generated lines are not directives).
"""

import logging
import re
from dataclasses import dataclass
from typing import AbstractSet, Iterator, Optional

from .exceptions import DirectiveSyntaxError
from .textlines import CommentBlock, TextLines

logger = logging.getLogger(__name__)

_KEYWORD_RE = re.compile(r"[A-Z_-]*")


@dataclass(frozen=True)
class Directive:
    """A recognized comment-embedded command.

    ::: This is-in-layer Domain-Layer.
    ::: This is a value-object.
    """
    keyword: str
    argument: str
    text: str
    begin: int
    end: int
    indent: int

    @classmethod
    def from_comment(cls, block: CommentBlock) -> "Directive":
        keyword = _KEYWORD_RE.match(block.text).group(0)
        argument = block.text[len(keyword):].strip()
        return cls(keyword, argument, block.text, block.begin, block.end, block.indent)

    @property
    def is_candidate(self) -> bool:
        """Whether an unknown keyword looks like a mistyped directive."""
        return len(self.keyword) >= 4 and not self.keyword.startswith("-")


class DirectiveScanner:
    """
    Iterates over the directives of a document while it is being edited.

    ::: This is-in-layer Domain-Layer.
    ::: This is a scanner.
    ::: This is-in-process Main-Process.
    ::: This is stateful.
    """

    def __init__(self, lines: TextLines):
        self.lines = lines
        self.ln = 0

    def __iter__(self) -> Iterator[Directive]:
        while self.ln < len(self.lines):
            block = self.lines.collect_comment(self.ln)
            if block is None:
                self.ln += 1
                continue
            self.ln = block.end
            directive = Directive.from_comment(block)
            if directive.keyword:
                yield directive


class RangeFilter:
    """
    Tracks RANGE BEGIN/END guards for selective regeneration.

    With no configured names every directive is active. Otherwise a
    document starts inactive and only the named ranges are processed.
    """

    def __init__(self, names: Optional[AbstractSet[str]] = None):
        self.names = frozenset(names or ())
        self.active = not self.names

    def reset(self) -> None:
        self.active = not self.names

    def handle(self, directive: Directive) -> None:
        """Apply a RANGE directive to the active flag."""
        words = directive.argument.split()
        if len(words) != 2 or words[0] not in ("BEGIN", "END"):
            raise DirectiveSyntaxError(f"RANGE expects 'BEGIN <name>' or 'END <name>', got '{directive.argument}'")

        action, name = words
        if not self.names:
            logger.debug("RANGE %s %s ignored, no ranges selected", action, name)
            return
        if name not in self.names:
            return

        self.active = action == "BEGIN"
        logger.info("%s range %s", "Entering" if self.active else "Leaving", name)
