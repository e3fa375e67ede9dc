"""
Assembly Emitter
================

Renders the instruction IR as x86-64 AT&T assembly for a target platform.

Platform Differences
--------------------
| Aspect          | Linux (ELF / GNU as)          | OSX (Mach-O / Apple as)          |
|-----------------|-------------------------------|----------------------------------|
| Symbol name     | main                          | _main                            |
| Header          | .globl + label                | text section, .globl, .p2align 4 |
| Frame           | none                          | pushq %rbp / movq %rsp, %rbp     |
| Ret             | ret                           | (epilogue) popq %rbp / retq      |
| Trailer         | .note.GNU-stack section       | .subsections_via_symbols         |

Operands render identically on both platforms: the return register is
``%eax`` and an immediate is ``$`` plus its signed decimal value.

Example output (Linux)
----------------------
    	.globl main
    main:
    	movl $42, %eax
    	ret
    	.section .note.GNU-stack,"",@progbits
"""

import logging
import platform as host_platform
from enum import Enum
from pathlib import Path

from nanocc.errors import EmitError, InternalCompilerError
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

logger = logging.getLogger(__name__)


class Platform(Enum):
    """Target platform; selects symbol naming, framing and directives."""

    LINUX = "linux"
    OSX = "osx"

    @classmethod
    def host(cls) -> "Platform":
        """The platform of the running system (anything but macOS is Linux)."""
        if host_platform.system().lower() == "darwin":
            return cls.OSX
        return cls.LINUX

    @classmethod
    def from_name(cls, name: str) -> "Platform":
        """Look up a platform by name, ignoring case and surrounding blanks."""
        return cls(name.strip().lower())


# =============================================================================
# Rendering
# =============================================================================

def label(name: str, target: Platform) -> str:
    """Symbol name as the platform's assembler expects it."""
    return f"_{name}" if target == Platform.OSX else name


def render_operand(operand: Operand) -> str:
    match operand:
        case Register():
            return "%eax"
        case Imm(value=value):
            return f"${value}"
    raise InternalCompilerError(f"cannot render operand {operand!r}")


def render_instruction(instruction: Instruction, target: Platform) -> str:
    match instruction:
        case Mov(source=source, destination=destination):
            return f"\tmovl {render_operand(source)}, {render_operand(destination)}\n"
        case Ret():
            # On OSX the epilogue performs the return.
            return "\tret\n" if target == Platform.LINUX else ""
    raise InternalCompilerError(f"cannot render instruction {instruction!r}")


def render_function(function: AsmFunction, target: Platform) -> str:
    name = label(function.name, target)
    body = "".join(render_instruction(i, target) for i in function.instructions)

    if target == Platform.OSX:
        return (
            "\t.section\t__TEXT,__text,regular,pure_instructions\n"
            f"\t.globl\t{name}\n"
            "\t.p2align\t4, 0x90\n"
            f"{name}:\n"
            "\tpushq\t%rbp\n"
            "\tmovq\t%rsp, %rbp\n"
            f"{body}"
            "\tpopq\t%rbp\n"
            "\tretq\n"
        )
    return (
        f"\t.globl {name}\n"
        f"{name}:\n"
        f"{body}"
    )


def render(program: AsmProgram, target: Platform) -> str:
    """
    Render a whole program as assembly text.

    Args:
        program: The IR to render
        target: Platform whose conventions to follow

    Returns:
        Complete assembly source, ready for the system assembler
    """
    text = render_function(program.function, target)
    if target == Platform.OSX:
        return text + "\n.subsections_via_symbols\n"
    return text + '\t.section .note.GNU-stack,"",@progbits\n'


def write_assembly(destination: Path, text: str) -> None:
    """
    Write already-rendered assembly ``text`` to ``destination`` in a single write.

    Raises:
        EmitError: If the file cannot be written
    """
    try:
        Path(destination).write_text(text, encoding="utf-8")
    except OSError as e:
        raise EmitError(Path(destination), e.strerror or str(e)) from e
    logger.info(f"Wrote {len(text)} bytes of assembly to {destination}")


def emit(destination: Path, program: AsmProgram, target: Platform) -> None:
    """Render ``program`` for ``target`` and write it to ``destination``."""
    write_assembly(destination, render(program, target))
