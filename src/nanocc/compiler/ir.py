"""
Instruction IR
==============

Platform-independent assembly representation produced by the code
generator and consumed by the emitter.

Structure
---------
AsmProgram
└── AsmFunction (name, instructions)
    └── Instruction
        ├── Mov(source, destination)
        └── Ret()

Operands are either Imm(value) or Register(), the single return-value
register. There is no register file and no allocation.
"""

from dataclasses import dataclass


# =============================================================================
# Operands
# =============================================================================

@dataclass(frozen=True)
class Operand:
    """Base class for instruction operands."""


@dataclass(frozen=True)
class Imm(Operand):
    """Immediate integer value."""
    value: int


@dataclass(frozen=True)
class Register(Operand):
    """The return-value register."""


# =============================================================================
# Instructions
# =============================================================================

@dataclass(frozen=True)
class Instruction:
    """Base class for instructions."""


@dataclass(frozen=True)
class Mov(Instruction):
    """Copy ``source`` into ``destination``."""
    source: Operand
    destination: Operand


@dataclass(frozen=True)
class Ret(Instruction):
    """Return from the current function."""


# =============================================================================
# Functions and Programs
# =============================================================================

@dataclass(frozen=True)
class AsmFunction:
    """
    A function in IR form.

    Attributes:
        name: Symbol name, exactly as written in the source
        instructions: Instructions in execution order
    """
    name: str
    instructions: tuple[Instruction, ...]


@dataclass(frozen=True)
class AsmProgram:
    """Root of the IR: one function."""
    function: AsmFunction


# =============================================================================
# IR Printer
# =============================================================================

def format_operand(operand: Operand) -> str:
    match operand:
        case Imm(value=value):
            return f"Imm({value})"
        case Register():
            return "Reg(AX)"
    return repr(operand)


def format_ir(program: AsmProgram) -> str:
    """
    Render IR as readable text, e.g.::

        Function main
          Mov(Imm(42), Reg(AX))
          Ret
    """
    lines = [f"Function {program.function.name}"]
    for instruction in program.function.instructions:
        match instruction:
            case Mov(source=source, destination=destination):
                lines.append(f"  Mov({format_operand(source)}, {format_operand(destination)})")
            case Ret():
                lines.append("  Ret")
            case _:
                lines.append(f"  {instruction!r}")
    return "\n".join(lines)
