"""
Abstract Syntax Tree (AST) Definitions
======================================

Node types produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Program - root, owns exactly one function
├── FunctionDefinition - name and body statement
├── Statements
│   └── Return - return statement
└── Expressions
    └── Constant - integer literal

Design Notes
------------
- All nodes are frozen dataclasses; the tree is immutable once built
- Each node may carry its source location for diagnostics; locations
  are excluded from equality so trees compare structurally
"""

from dataclasses import dataclass, field
from typing import Optional

from nanocc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for expression nodes."""


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for statement nodes."""


# =============================================================================
# Expressions
# =============================================================================

@dataclass(frozen=True)
class Constant(Expression):
    """Integer literal, e.g. ``42``."""
    value: int
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


# =============================================================================
# Statements
# =============================================================================

@dataclass(frozen=True)
class Return(Statement):
    """``return <expression>;``"""
    expression: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


# =============================================================================
# Top Level
# =============================================================================

@dataclass(frozen=True)
class FunctionDefinition(ASTNode):
    """
    Function definition.

    Attributes:
        name: Function name; becomes the exported assembly symbol
        body: The single statement making up the body
    """
    name: str
    body: Statement
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program(ASTNode):
    """Root node: a translation unit holding one function."""
    function: FunctionDefinition


# =============================================================================
# AST Printer
# =============================================================================

class ASTPrinter:
    """
    Pretty-prints an AST as an indented tree.

    Example:
        Program
          Function main
            Return
              Constant 42
    """

    INDENT = "  "

    def __init__(self):
        self._lines: list[str] = []

    def print(self, node: ASTNode) -> str:
        """Render ``node`` and everything below it."""
        self._lines = []
        self._visit(node, 0)
        return "\n".join(self._lines)

    def _emit(self, depth: int, text: str) -> None:
        self._lines.append(f"{self.INDENT * depth}{text}")

    def _visit(self, node: ASTNode, depth: int) -> None:
        match node:
            case Program(function=function):
                self._emit(depth, "Program")
                self._visit(function, depth + 1)
            case FunctionDefinition(name=name, body=body):
                self._emit(depth, f"Function {name}")
                self._visit(body, depth + 1)
            case Return(expression=expression):
                self._emit(depth, "Return")
                self._visit(expression, depth + 1)
            case Constant(value=value):
                self._emit(depth, f"Constant {value}")
            case _:
                self._emit(depth, f"<{type(node).__name__}>")
