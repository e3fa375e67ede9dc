"""
Token Model and Token Definition Table
======================================

This module defines the tokens of the accepted C subset and the table of
token definitions the lexer evaluates at every input position.

Token Categories
----------------
- Identifiers: function names (payload: the text)
- Constants: decimal integer literals (payload: the integer)
- Keywords: int, return, void
- Punctuation: ( ) { } ;

Token Definitions
-----------------
Each TokenDefinition pairs a compiled regular expression with a converter
that turns the matched text into a Token. Patterns are only ever applied
with ``Pattern.match(text, pos)``, which anchors the match at ``pos``.
The table is built once at import time and never modified.

| Definition  | Pattern                 | Converter result               |
|-------------|-------------------------|--------------------------------|
| identifier  | [A-Za-z_][A-Za-z0-9_]*  | keyword token or IDENTIFIER    |
| constant    | [0-9]+                  | CONSTANT(int)                  |
| (  )  {  }  ;| the literal character  | fixed punctuation token        |
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional

from nanocc.errors import InternalCompilerError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types for the accepted C subset."""

    # === Tokens with payload ===
    IDENTIFIER = auto()     # function names
    CONSTANT = auto()       # integer literals

    # === Keywords ===
    INT = auto()            # int
    RETURN = auto()         # return
    VOID = auto()           # void

    # === Punctuation ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    SEMICOLON = auto()      # ;


KEYWORDS: dict[str, TokenType] = {
    "int": TokenType.INT,
    "return": TokenType.RETURN,
    "void": TokenType.VOID,
}

PUNCTUATION: dict[str, TokenType] = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}

# Source spelling of every marker token, used in diagnostics
SPELLING: dict[TokenType, str] = {
    **{token_type: text for text, token_type in KEYWORDS.items()},
    **{token_type: text for text, token_type in PUNCTUATION.items()},
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token.

    Tokens compare by type and payload only; the location is carried for
    error reporting and does not take part in equality, so the same
    program lexed with different spacing yields equal token lists.

    Attributes:
        type: The TokenType classification
        value: Identifier text, constant value, or None for markers
        location: Where the token starts in the source
    """
    type: TokenType
    value: str | int | None = None
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False
    )

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r})"
        return f"Token({self.type.name})"

    def describe(self) -> str:
        """Human-readable description used in parser diagnostics."""
        if self.type == TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type == TokenType.CONSTANT:
            return f"constant {self.value}"
        return f"'{SPELLING[self.type]}'"


def describe_token_type(token_type: TokenType) -> str:
    """Describe a token type the way the parser names what it expects."""
    if token_type == TokenType.IDENTIFIER:
        return "an identifier"
    if token_type == TokenType.CONSTANT:
        return "an integer constant"
    return f"'{SPELLING[token_type]}'"


# =============================================================================
# Token Definitions
# =============================================================================

Converter = Callable[[str, Optional[SourceLocation]], Token]


@dataclass(frozen=True)
class TokenDefinition:
    """
    A recognizer/converter pair.

    Attributes:
        name: Short name for debugging and logging
        pattern: Compiled pattern, applied with ``match`` at an offset
        convert: Maps the matched text (and its location) to a Token
    """
    name: str
    pattern: re.Pattern
    convert: Converter

    def match(self, text: str, pos: int) -> Optional[str]:
        """Return the text this definition matches at ``pos``, if any."""
        m = self.pattern.match(text, pos)
        return m.group(0) if m else None


def _convert_word(text: str, location: Optional[SourceLocation]) -> Token:
    """Reserved words become keyword tokens, everything else an identifier."""
    keyword = KEYWORDS.get(text)
    if keyword is not None:
        return Token(keyword, location=location)
    return Token(TokenType.IDENTIFIER, text, location)


def _convert_constant(text: str, location: Optional[SourceLocation]) -> Token:
    # The pattern only admits decimal digits, so int() failing means the
    # recognizer and converter disagree.
    try:
        value = int(text, 10)
    except ValueError as e:
        raise InternalCompilerError(
            f"constant recognizer matched non-decimal text {text!r}"
        ) from e
    return Token(TokenType.CONSTANT, value, location)


def _fixed(token_type: TokenType) -> Converter:
    """Build a converter that ignores the match and returns a marker token."""
    def convert(text: str, location: Optional[SourceLocation]) -> Token:
        return Token(token_type, location=location)
    return convert


TOKEN_DEFINITIONS: tuple[TokenDefinition, ...] = (
    TokenDefinition("identifier", re.compile(r"[A-Za-z_][A-Za-z0-9_]*"), _convert_word),
    TokenDefinition("constant", re.compile(r"[0-9]+"), _convert_constant),
    *(
        TokenDefinition(token_type.name.lower(), re.compile(re.escape(text)), _fixed(token_type))
        for text, token_type in PUNCTUATION.items()
    ),
)
