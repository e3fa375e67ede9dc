"""
Recursive Descent Parser
========================

This module turns a token list into an AST.

Grammar
-------
program              ::= function_definition <end of tokens>
function_definition  ::= 'int' IDENTIFIER '(' 'void' ')' '{' statement '}'
statement            ::= 'return' expression ';'
expression           ::= CONSTANT

Parsing Model
-------------
The parser never mutates its input. A TokenStream is a value holding the
shared token tuple and a position; consuming a token returns the token
together with a new stream one position further on. Every rule takes a
stream and returns ``(node, rest_of_stream)``.

Failures
--------
- A token of the wrong kind raises ParseError (expected vs. found).
- Running out of tokens raises UnexpectedEndOfInput.
- Tokens left over after the function raise ParseError.
The first failure ends the parse; there is no error recovery.

Example Usage
-------------
>>> from nanocc.compiler.lexer import lex
>>> from nanocc.compiler.parser import parse
>>> parse(lex("int main(void) { return 2; }"))
Program(function=FunctionDefinition(name='main', body=Return(expression=Constant(value=2))))
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from nanocc.errors import SourceLocation
from nanocc.compiler.ast import (
    Constant,
    Expression,
    FunctionDefinition,
    Program,
    Return,
    Statement,
)
from nanocc.compiler.errors import ParseError, UnexpectedEndOfInput
from nanocc.compiler.tokens import Token, TokenType, describe_token_type

logger = logging.getLogger(__name__)


# =============================================================================
# Token Stream
# =============================================================================

@dataclass(frozen=True)
class TokenStream:
    """
    Immutable cursor over a token sequence.

    Attributes:
        tokens: The complete token sequence (shared, never modified)
        position: Index of the next token to consume
        filename: Source filename for error messages
        source_lines: Original source lines for error context
    """
    tokens: tuple[Token, ...]
    position: int = 0
    filename: str = "<input>"
    source_lines: tuple[str, ...] = ()

    @classmethod
    def of(
        cls,
        tokens: Sequence[Token],
        filename: str = "<input>",
        source_lines: Optional[Sequence[str]] = None,
    ) -> "TokenStream":
        return cls(tuple(tokens), 0, filename, tuple(source_lines or ()))

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def peek(self) -> Optional[Token]:
        return None if self.at_end() else self.tokens[self.position]

    def next(self, expected: str) -> tuple[Token, "TokenStream"]:
        """
        Consume one token.

        Args:
            expected: What the caller wants here, quoted if input has run out

        Raises:
            UnexpectedEndOfInput: If no tokens remain
        """
        if self.at_end():
            location = self._end_location()
            raise UnexpectedEndOfInput(
                expected, location, self.source_line(location)
            )
        return self.tokens[self.position], self._advanced()

    def _advanced(self) -> "TokenStream":
        return TokenStream(self.tokens, self.position + 1, self.filename, self.source_lines)

    def _end_location(self) -> Optional[SourceLocation]:
        """Location just past the last token, when tokens carry locations."""
        if not self.tokens or self.tokens[-1].location is None:
            return None
        last = self.tokens[-1]
        width = len(str(last.value)) if last.value is not None else len(last.describe()) - 2
        return SourceLocation(
            last.location.filename, last.location.line, last.location.column + width
        )

    def source_line(self, location: Optional[SourceLocation]) -> Optional[str]:
        """Get source line for error reporting."""
        if location is not None and 0 < location.line <= len(self.source_lines):
            return self.source_lines[location.line - 1]
        return None


# =============================================================================
# Grammar Rules
# =============================================================================

def _mismatch(stream: TokenStream, token: Token, expected: str, hint: Optional[str] = None) -> ParseError:
    return ParseError(
        expected,
        token.describe(),
        location=token.location,
        source_line=stream.source_line(token.location),
        hint=hint,
    )


def expect_token(stream: TokenStream, expected: Token) -> TokenStream:
    """
    Consume one token that must equal ``expected``.

    Raises:
        ParseError: If the next token is different
        UnexpectedEndOfInput: If no tokens remain
    """
    description = expected.describe()
    token, rest = stream.next(description)
    if token != expected:
        hint = "every statement ends with ';'" if expected.type == TokenType.SEMICOLON else None
        raise _mismatch(stream, token, description, hint)
    return rest


def parse_identifier(stream: TokenStream) -> tuple[str, TokenStream]:
    """Consume an IDENTIFIER token and return its text."""
    expected = describe_token_type(TokenType.IDENTIFIER)
    token, rest = stream.next(expected)
    if token.type != TokenType.IDENTIFIER:
        raise _mismatch(stream, token, expected)
    return token.value, rest


def parse_integer(stream: TokenStream) -> tuple[int, TokenStream]:
    """Consume a CONSTANT token and return its value."""
    expected = describe_token_type(TokenType.CONSTANT)
    token, rest = stream.next(expected)
    if token.type != TokenType.CONSTANT:
        raise _mismatch(stream, token, expected)
    return token.value, rest


def parse_expression(stream: TokenStream) -> tuple[Expression, TokenStream]:
    """expression ::= CONSTANT"""
    start = stream.peek()
    value, stream = parse_integer(stream)
    return Constant(value, start.location), stream


def parse_statement(stream: TokenStream) -> tuple[Statement, TokenStream]:
    """statement ::= 'return' expression ';'"""
    start = stream.peek()
    stream = expect_token(stream, Token(TokenType.RETURN))
    expression, stream = parse_expression(stream)
    stream = expect_token(stream, Token(TokenType.SEMICOLON))
    return Return(expression, start.location), stream


def parse_function_definition(stream: TokenStream) -> tuple[FunctionDefinition, TokenStream]:
    """function_definition ::= 'int' IDENTIFIER '(' 'void' ')' '{' statement '}'"""
    start = stream.peek()
    stream = expect_token(stream, Token(TokenType.INT))
    name, stream = parse_identifier(stream)
    stream = expect_token(stream, Token(TokenType.LPAREN))
    stream = expect_token(stream, Token(TokenType.VOID))
    stream = expect_token(stream, Token(TokenType.RPAREN))
    stream = expect_token(stream, Token(TokenType.LBRACE))
    body, stream = parse_statement(stream)
    stream = expect_token(stream, Token(TokenType.RBRACE))
    return FunctionDefinition(name, body, start.location), stream


def parse_program(stream: TokenStream) -> Program:
    """program ::= function_definition <end of tokens>"""
    function, stream = parse_function_definition(stream)
    leftover = stream.peek()
    if leftover is not None:
        raise ParseError(
            "end of input",
            leftover.describe(),
            location=leftover.location,
            source_line=stream.source_line(leftover.location),
            message=f"unexpected tokens after function definition, starting at {leftover.describe()}",
            hint="only a single function definition is supported",
        )
    return Program(function)


def parse(
    tokens: Sequence[Token],
    filename: str = "<input>",
    source_lines: Optional[Sequence[str]] = None,
) -> Program:
    """
    Parse a token list into a Program.

    Args:
        tokens: Tokens from the lexer
        filename: Source filename for error messages
        source_lines: Original source lines for error context

    Raises:
        ParseError: On a grammar mismatch or trailing tokens
        UnexpectedEndOfInput: If the tokens end mid-program
    """
    program = parse_program(TokenStream.of(tokens, filename, source_lines))
    logger.debug(f"{filename}: parsed function '{program.function.name}'")
    return program
