"""
nanocc Compiler
===============

Translates a C function of the form ``int NAME(void) { return N; }`` into
x86-64 assembly for Linux or OSX.

Pipeline
--------
    C Source → Lexer → Parser → AST → Code Generator → IR → Emitter → Assembly

Each stage is usable on its own:

>>> from nanocc.compiler import lex, parse, generate, render, Platform
>>> tokens = lex("int main(void) { return 42; }")
>>> program = parse(tokens)
>>> ir = generate(program)
>>> print(render(ir, Platform.LINUX))
	.globl main
main:
	movl $42, %eax
	ret
	.section .note.GNU-stack,"",@progbits
"""

from nanocc.compiler.tokens import Token, TokenType, TokenDefinition, TOKEN_DEFINITIONS
from nanocc.compiler.lexer import Lexer, lex
from nanocc.compiler.ast import (
    ASTNode,
    ASTPrinter,
    Constant,
    Expression,
    FunctionDefinition,
    Program,
    Return,
    Statement,
)
from nanocc.compiler.parser import TokenStream, parse
from nanocc.compiler.ir import (
    AsmFunction,
    AsmProgram,
    Imm,
    Instruction,
    Mov,
    Operand,
    Register,
    Ret,
    format_ir,
)
from nanocc.compiler.codegen import CodeGenerator, generate
from nanocc.compiler.emitter import Platform, emit, render, write_assembly
from nanocc.compiler.errors import (
    CompileError,
    LexError,
    ParseError,
    UnexpectedEndOfInput,
)
from nanocc.compiler.driver import (
    Compiler,
    CompilerOptions,
    CompilationResult,
    Stage,
    compile_c,
    compile_file,
)

__all__ = [
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompilationResult",
    "Stage",
    "compile_c",
    "compile_file",
    # Stages
    "lex",
    "parse",
    "generate",
    "render",
    "emit",
    "write_assembly",
    "Lexer",
    "TokenStream",
    "CodeGenerator",
    "Platform",
    # Tokens
    "Token",
    "TokenType",
    "TokenDefinition",
    "TOKEN_DEFINITIONS",
    # AST
    "ASTNode",
    "ASTPrinter",
    "Program",
    "FunctionDefinition",
    "Statement",
    "Return",
    "Expression",
    "Constant",
    # IR
    "AsmProgram",
    "AsmFunction",
    "Instruction",
    "Mov",
    "Ret",
    "Operand",
    "Imm",
    "Register",
    "format_ir",
    # Errors
    "CompileError",
    "LexError",
    "ParseError",
    "UnexpectedEndOfInput",
]
