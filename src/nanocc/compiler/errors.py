"""
Compiler Front-End Errors
=========================

Errors raised while turning source text into an AST.

Exception Hierarchy
-------------------
CompileError (base, inherits NanoCCError)
├── LexError - no token pattern matches at the current position
├── ParseError - a token does not fit the grammar
└── UnexpectedEndOfInput - the token stream ended in the middle of a rule

ParseError and UnexpectedEndOfInput are siblings, so callers can tell a
malformed program from a truncated one.

Error Message Format
--------------------
    main.c:1:22: error: expected ';', found '}'
        int main(void) { return 2 }
                                  ^
    hint: every statement ends with ';'
"""

from typing import Optional

from nanocc.errors import NanoCCError, SourceLocation


class CompileError(NanoCCError):
    """
    Base exception for lexer and parser errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, source context, and hint."""
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        # Source context with caret pointer
        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexError(CompileError):
    """
    No token pattern matches the input at the current position.

    Attributes:
        fragment: A short prefix of the unrecognized input
    """

    def __init__(
        self,
        fragment: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.fragment = fragment
        super().__init__(
            f"unrecognized input '{fragment}'",
            location=location,
            source_line=source_line,
        )


class ParseError(CompileError):
    """
    A token does not match what the grammar requires.

    Attributes:
        expected: Description of what the grammar wanted
        found: Description of the token actually present
    """

    def __init__(
        self,
        expected: str,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(
            message or f"expected {expected}, found {found}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnexpectedEndOfInput(CompileError):
    """The token stream was exhausted while a rule still needed tokens."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"unexpected end of input, expected {expected}",
            location=location,
            hint="the program appears to be truncated",
            source_line=source_line,
        )
