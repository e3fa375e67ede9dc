"""
Lexer (Tokenizer)
=================

This module converts C source text into a list of tokens using the
definition table in ``nanocc.compiler.tokens``.

Algorithm
---------
Starting at offset 0, repeat until the input is exhausted:

1. Skip a run of whitespace (it never produces tokens).
2. Try every token definition anchored at the current offset.
3. If nothing matches, raise LexError with the offending fragment.
4. Otherwise keep the longest match. On equal length the definition
   listed first in the table wins.
5. Convert the match to a token and advance past it.

Longest match is what makes ``return`` a keyword rather than ``r``
followed by ``eturn``, and ``123`` one constant rather than three.

Example Usage
-------------
>>> from nanocc.compiler.lexer import lex
>>> lex("int main(void) { return 42; }")
[Token(INT), Token(IDENTIFIER, 'main'), Token(LPAREN), Token(VOID),
 Token(RPAREN), Token(LBRACE), Token(RETURN), Token(CONSTANT, 42),
 Token(SEMICOLON), Token(RBRACE)]
"""

import logging
import re
from typing import Iterator, Optional, Sequence

from nanocc.errors import SourceLocation
from nanocc.compiler.errors import LexError
from nanocc.compiler.tokens import Token, TokenDefinition, TOKEN_DEFINITIONS

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")

# Longest fragment of unrecognized input quoted in a LexError
FRAGMENT_LIMIT = 20


class Lexer:
    """
    Tokenizes a source string.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
        definitions: The token definitions to evaluate
    """

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        definitions: Sequence[TokenDefinition] = TOKEN_DEFINITIONS,
    ):
        self.source = source
        self.filename = filename
        self.definitions = tuple(definitions)

        self._pos = 0
        self._line = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Raises:
            LexError: At the first position no definition matches
        """
        while self._pos < len(self.source):
            blank = WHITESPACE.match(self.source, self._pos)
            if blank:
                self._consume(blank.end())
                continue

            definition, text = self._longest_match()
            if definition is None:
                raise self._error()

            yield definition.convert(text, self._location())
            self._consume(self._pos + len(text))

    def _longest_match(self) -> tuple[Optional[TokenDefinition], str]:
        """Pick the longest match at the current offset (earliest wins ties)."""
        best: Optional[TokenDefinition] = None
        best_text = ""
        for definition in self.definitions:
            text = definition.match(self.source, self._pos)
            if text and len(text) > len(best_text):
                best, best_text = definition, text
        return best, best_text

    def _consume(self, end: int) -> None:
        """Advance to ``end``, keeping line tracking up to date."""
        newlines = self.source.count("\n", self._pos, end)
        if newlines:
            self._line += newlines
            self._line_start_pos = self.source.rfind("\n", self._pos, end) + 1
        self._pos = end

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line, self._pos - self._line_start_pos + 1)

    def _source_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    def _error(self) -> LexError:
        rest = self.source[self._pos:]
        fragment = WHITESPACE.split(rest, maxsplit=1)[0][:FRAGMENT_LIMIT]
        return LexError(fragment, self._location(), self._source_line())


def lex(source: str, filename: str = "<input>") -> list[Token]:
    """
    Tokenize a complete source string.

    Args:
        source: C source code
        filename: Source filename for error messages

    Returns:
        The tokens in source order (no end-of-file marker)

    Raises:
        LexError: If some input matches no token definition
    """
    tokens = list(Lexer(source, filename).tokenize())
    logger.debug(f"{filename}: lexed {len(tokens)} tokens")
    return tokens
