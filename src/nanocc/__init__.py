"""
nanocc - A Tiny C-to-Assembly Compiler
======================================

nanocc compiles the smallest useful C program, a single
``int NAME(void) { return CONSTANT; }`` function, to x86-64 assembly
and hands it to the system toolchain to build an executable.

Main Components
---------------
- **compiler**: lexer, parser, code generator, emitter and the driver
  that runs the external preprocessor, assembler and linker
- **cli**: the ``nanocc`` command

Quick Start
-----------
    >>> from nanocc import compile_c, Platform
    >>> print(compile_c("int main(void) { return 2; }", Platform.OSX))

Or from the shell:
    $ nanocc return_2.c && ./return_2; echo $?
    2
"""

__version__ = "0.1.0"

from nanocc.errors import (
    NanoCCError,
    InternalCompilerError,
    SourceLocation,
    EmitError,
    SourceReadError,
    ToolchainError,
    OutputPathError,
)
from nanocc.compiler import (
    Compiler,
    CompilerOptions,
    CompilationResult,
    Stage,
    Platform,
    compile_c,
    compile_file,
    lex,
    parse,
    generate,
    render,
    emit,
    write_assembly,
    CompileError,
    LexError,
    ParseError,
    UnexpectedEndOfInput,
)

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "CompilerOptions",
    "CompilationResult",
    "Stage",
    "Platform",
    "compile_c",
    "compile_file",
    "lex",
    "parse",
    "generate",
    "render",
    "emit",
    "write_assembly",
    # Errors
    "NanoCCError",
    "InternalCompilerError",
    "SourceLocation",
    "CompileError",
    "LexError",
    "ParseError",
    "UnexpectedEndOfInput",
    "EmitError",
    "SourceReadError",
    "ToolchainError",
    "OutputPathError",
]
