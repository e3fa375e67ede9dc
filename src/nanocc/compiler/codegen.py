"""
Code Generator
==============

Lowers the AST to the instruction IR.

Lowering Rules
--------------
| AST node                  | IR                                         |
|---------------------------|--------------------------------------------|
| Program(f)                | AsmProgram(lower(f))                       |
| FunctionDefinition(n, b)  | AsmFunction(n, lower(b))                   |
| Return(e)                 | Mov(lower(e), Register()), Ret()           |
| Constant(i)               | Imm(i)                                     |

The translation is direct and total over any AST the parser can build:
no register allocation, scheduling, or optimization.

Usage
-----
>>> from nanocc.compiler.codegen import CodeGenerator
>>> CodeGenerator().generate(program)
AsmProgram(function=AsmFunction(name='main', instructions=(Mov(...), Ret())))
"""

from nanocc.errors import InternalCompilerError
from nanocc.compiler.ast import (
    Constant,
    Expression,
    FunctionDefinition,
    Program,
    Return,
    Statement,
)
from nanocc.compiler.ir import (
    AsmFunction,
    AsmProgram,
    Imm,
    Instruction,
    Mov,
    Operand,
    Register,
    Ret,
)


class CodeGenerator:
    """Translates a Program into an AsmProgram."""

    def generate(self, program: Program) -> AsmProgram:
        return AsmProgram(self._function(program.function))

    def _function(self, function: FunctionDefinition) -> AsmFunction:
        return AsmFunction(function.name, tuple(self._statement(function.body)))

    def _statement(self, statement: Statement) -> list[Instruction]:
        match statement:
            case Return(expression=expression):
                return [Mov(self._expression(expression), Register()), Ret()]
        raise InternalCompilerError(f"no lowering for statement {statement!r}")

    def _expression(self, expression: Expression) -> Operand:
        match expression:
            case Constant(value=value):
                return Imm(value)
        raise InternalCompilerError(f"no lowering for expression {expression!r}")


def generate(program: Program) -> AsmProgram:
    """Lower ``program`` to the instruction IR."""
    return CodeGenerator().generate(program)
