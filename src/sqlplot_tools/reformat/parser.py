"""
Parser for the REFORMAT(...) clause using a Lark grammar.

The grammar lives in ``reformat.lark`` next to this module and is compiled
once into an LALR parser.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from lark import Lark, Tree
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
)

from ..exceptions import ReformatSyntaxError

logger = logging.getLogger(__name__)


class ReformatParser:
    """
    Parses REFORMAT clause bodies into Lark trees.

    Singleton: the grammar is loaded once and cached.
    """

    _instance: Optional[ReformatParser] = None

    def __new__(cls) -> ReformatParser:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load_grammar()
        return cls._instance

    def _load_grammar(self) -> None:
        grammar_path = Path(__file__).parent / "reformat.lark"
        if not grammar_path.exists():
            raise FileNotFoundError(f"REFORMAT grammar not found: {grammar_path}")
        self._parser = Lark(
            grammar_path.read_text(encoding="utf-8"),
            start="start",
            parser="lalr",
            propagate_positions=True,
        )

    def parse(self, text: str) -> Tree:
        """
        Parse the text between the parentheses of REFORMAT(...).

        Raises:
            ReformatSyntaxError: with line/column of the offending input
        """
        try:
            return self._parser.parse(text)
        except UnexpectedToken as e:
            expected = ", ".join(sorted(e.expected)) if e.expected else "end of clause"
            raise ReformatSyntaxError(
                f"Unexpected '{e.token}' in REFORMAT({text}), expected {expected}",
                e.line, e.column) from e
        except UnexpectedCharacters as e:
            raise ReformatSyntaxError(
                f"Unexpected character '{e.char}' in REFORMAT({text})",
                e.line, e.column) from e
        except UnexpectedEOF as e:
            raise ReformatSyntaxError(f"Unexpected end of REFORMAT({text})") from e
        except UnexpectedInput as e:
            raise ReformatSyntaxError(f"Invalid REFORMAT({text}): {e}") from e
