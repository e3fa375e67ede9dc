"""
nanocc Error Hierarchy
======================

This module defines the exception hierarchy shared by the whole compiler.
All user-facing exceptions inherit from NanoCCError, allowing callers to
catch every compilation failure with a single except clause.

Exception Hierarchy
-------------------
NanoCCError (base)
├── CompileError (nanocc.compiler.errors)
│   ├── LexError - no token pattern matches the input
│   ├── ParseError - token does not fit the grammar
│   └── UnexpectedEndOfInput - token stream ran out mid-rule
├── EmitError - the assembly file could not be written
├── SourceReadError - the source file could not be read
├── ToolchainError - external preprocessor/assembler/linker failed
└── OutputPathError - an output would overwrite the input or another output

InternalCompilerError is deliberately NOT a NanoCCError: it signals a
broken contract inside the compiler, never a problem with the input.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence


# =============================================================================
# Base Exception Class
# =============================================================================

class NanoCCError(Exception):
    """
    Base exception for all nanocc errors.

        try:
            compile_c(source)
        except NanoCCError as e:
            print(f"Error: {e}")
    """
    pass


class InternalCompilerError(Exception):
    """Raised when an internal invariant of the compiler is violated."""
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# I/O and Toolchain Exceptions
# =============================================================================

class EmitError(NanoCCError):
    """
    Writing the generated assembly file failed.

    Attributes:
        path: Destination that could not be written
        reason: The underlying OS error message
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot write assembly to '{path}': {reason}")


class SourceReadError(NanoCCError):
    """Reading a source (or preprocessed) file failed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read '{path}': {reason}")


class ToolchainError(NanoCCError):
    """
    An external tool (preprocessor, assembler or linker) failed.

    Attributes:
        command: The argument vector that was executed
        returncode: Process exit status, or None if it never started
        stderr: Captured standard error output
    """

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        parts = [f"{message}: {' '.join(self.command)}"]
        if returncode is not None:
            parts[0] += f" (exit status {returncode})"
        if stderr.strip():
            parts.append(stderr.rstrip())
        super().__init__("\n".join(parts))


class OutputPathError(NanoCCError):
    """
    A file the driver would write collides with the input or another output.

    Attributes:
        path: The colliding path
        role: What the driver meant to write there
        other: What already occupies that path
    """

    def __init__(self, path: Path, role: str, other: str):
        self.path = path
        self.role = role
        self.other = other
        super().__init__(
            f"'{path}' would be used both as the {other} and the {role}; "
            f"rename the input or choose a different output with -o"
        )
