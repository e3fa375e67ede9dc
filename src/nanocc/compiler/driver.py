"""
Compiler Driver
===============

This module orchestrates a complete compilation:

    .c ──cc -E -P──▶ .i ──lex/parse/codegen/emit──▶ .s ──cc -c──▶ .o
                                                      └──cc────▶ executable

The front end (lexer, parser, code generator, emitter) runs in-process.
Preprocessing, assembling and linking are delegated to the system C
compiler driver (``gcc`` by default), invoked with ``subprocess``.

Stages
------
A Stage says how far to go. The first three print an intermediate form
and write nothing; the last three produce a file.

| Stage       | Output                           |
|-------------|----------------------------------|
| LEX         | token list                       |
| PARSE       | AST                              |
| CODEGEN     | instruction IR                   |
| ASSEMBLY    | foo.s                            |
| OBJECT      | foo.o                            |
| EXECUTABLE  | foo                              |

Intermediate files (the preprocessed ``.i`` and, past ASSEMBLY, the
``.s``) are removed afterwards unless ``keep_intermediates`` is set.

Usage
-----
Programmatic:
    >>> from nanocc.compiler import compile_c
    >>> print(compile_c("int main(void) { return 2; }"))

Command line:
    $ nanocc hello.c -o hello
"""

import logging
import subprocess
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional, Sequence

from nanocc.errors import OutputPathError, SourceReadError, ToolchainError
from nanocc.compiler.ast import Program
from nanocc.compiler.codegen import generate
from nanocc.compiler.emitter import Platform, render, write_assembly
from nanocc.compiler.ir import AsmProgram
from nanocc.compiler.lexer import lex
from nanocc.compiler.parser import parse
from nanocc.compiler.tokens import Token

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    """How far the pipeline runs; later stages include earlier ones."""

    LEX = 1
    PARSE = 2
    CODEGEN = 3
    ASSEMBLY = 4
    OBJECT = 5
    EXECUTABLE = 6


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        platform: Target platform (default: the host)
        stage: Last stage to run
        keep_intermediates: Keep .i and .s files instead of deleting them
        cc: C compiler driver used to preprocess, assemble and link
        preprocess: Run the external preprocessor before lexing
    """
    platform: Platform = field(default_factory=Platform.host)
    stage: Stage = Stage.EXECUTABLE
    keep_intermediates: bool = False
    cc: str = "gcc"
    preprocess: bool = True


@dataclass
class CompilationResult:
    """
    Result of a compilation.

    Each field is filled in once its stage has run.

    Attributes:
        filename: Source filename
        stage: The stage the pipeline stopped after
        tokens: Lexer output
        ast: Parser output
        ir: Code generator output
        assembly: Rendered assembly text
        output_path: File produced (for ASSEMBLY and later)
    """
    filename: str = "<input>"
    stage: Stage = Stage.LEX
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[Program] = None
    ir: Optional[AsmProgram] = None
    assembly: str = ""
    output_path: Optional[Path] = None


class Compiler:
    """
    Runs the compilation pipeline.

    Example:
        compiler = Compiler(CompilerOptions(stage=Stage.ASSEMBLY))
        result = compiler.compile_file("return_2.c")
        print(result.output_path)   # return_2.s
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    # =========================================================================
    # In-process front end
    # =========================================================================

    def compile_source(self, source: str, filename: str = "<input>") -> CompilationResult:
        """
        Run the front end on a source string.

        Stops at ``options.stage``, or at ASSEMBLY for any later stage since
        nothing is written to disk here.

        Raises:
            CompileError: On lexical or syntax errors
        """
        stop = min(self.options.stage, Stage.ASSEMBLY)
        result = CompilationResult(filename=filename)

        result.tokens = lex(source, filename)
        result.stage = Stage.LEX
        if stop == Stage.LEX:
            return result

        result.ast = parse(result.tokens, filename, source.split("\n"))
        result.stage = Stage.PARSE
        if stop == Stage.PARSE:
            return result

        result.ir = generate(result.ast)
        result.stage = Stage.CODEGEN
        if stop == Stage.CODEGEN:
            return result

        result.assembly = render(result.ir, self.options.platform)
        result.stage = Stage.ASSEMBLY
        return result

    # =========================================================================
    # File pipeline
    # =========================================================================

    def compile_file(self, source_path: Path, output: Optional[Path] = None) -> CompilationResult:
        """
        Compile a C file up to ``options.stage``.

        Every path the run will write is worked out first and checked
        against the input and each other, so nothing is touched when two
        of them coincide, for example when a suffix-less input would be
        linked onto itself.

        Args:
            source_path: The .c file
            output: Final output path (default derived from the source name)

        Raises:
            CompileError: On lexical or syntax errors
            SourceReadError: If the source cannot be read
            OutputPathError: If an output would overwrite the input or another output
            EmitError: If the assembly file cannot be written
            ToolchainError: If preprocessing, assembling or linking fails
        """
        source_path = Path(source_path)
        stage = self.options.stage
        preprocessed, asm_path, target = self._plan_paths(source_path, output)
        intermediates: list[Path] = []

        try:
            if preprocessed is not None:
                intermediates.append(preprocessed)
                self.run_tool(
                    [self.options.cc, "-E", "-P", str(source_path), "-o", str(preprocessed)]
                )
            source = self._read_source(preprocessed or source_path)
            result = self.compile_source(source, str(source_path))
            if stage <= Stage.CODEGEN:
                return result

            write_assembly(asm_path, result.assembly)
            result.output_path = asm_path
            if stage == Stage.ASSEMBLY:
                return result

            intermediates.append(asm_path)
            if stage == Stage.OBJECT:
                self.run_tool([self.options.cc, "-c", str(asm_path), "-o", str(target)])
            else:
                self.run_tool([self.options.cc, str(asm_path), "-o", str(target)])
            result.output_path = target
            result.stage = stage
            logger.info(f"Built {target}")
            return result
        finally:
            self._cleanup(intermediates)

    def _plan_paths(
        self, source_path: Path, output: Optional[Path]
    ) -> tuple[Optional[Path], Optional[Path], Optional[Path]]:
        """
        Work out the preprocessed, assembly and final output paths.

        Returns:
            (preprocessed, assembly, target); unused entries are None

        Raises:
            OutputPathError: If any two of them, or one and the input, are the same file
        """
        stage = self.options.stage
        preprocessed = source_path.with_suffix(".i") if self.options.preprocess else None
        asm_path = target = None
        if stage == Stage.ASSEMBLY:
            asm_path = target = Path(output) if output else source_path.with_suffix(".s")
        elif stage == Stage.OBJECT:
            asm_path = source_path.with_suffix(".s")
            target = Path(output) if output else source_path.with_suffix(".o")
        elif stage == Stage.EXECUTABLE:
            asm_path = source_path.with_suffix(".s")
            target = Path(output) if output else source_path.with_suffix("")

        planned = [("preprocessed file", preprocessed), ("assembly file", asm_path)]
        if target is not asm_path:
            planned.append(("output file", target))

        taken = {source_path.resolve(): "input file"}
        for role, path in planned:
            if path is None:
                continue
            key = path.resolve()
            if key in taken:
                raise OutputPathError(path, role, taken[key])
            taken[key] = role
        return preprocessed, asm_path, target

    def _read_source(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise SourceReadError(path, e.strerror or str(e)) from e

    def run_tool(self, command: Sequence[str]) -> subprocess.CompletedProcess:
        """
        Run an external tool, raising ToolchainError if it fails.

        Args:
            command: Argument vector, program first
        """
        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = subprocess.run(list(command), capture_output=True, text=True)
        except FileNotFoundError:
            raise ToolchainError(f"'{command[0]}' not found", command)
        if completed.returncode != 0:
            raise ToolchainError(
                f"'{command[0]}' failed", command, completed.returncode, completed.stderr
            )
        return completed

    def _cleanup(self, paths: list[Path]) -> None:
        if self.options.keep_intermediates:
            return
        for path in paths:
            if path.exists():
                logger.debug(f"Removing intermediate file {path}")
                path.unlink()


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_c(
    source: str,
    platform: Optional[Platform] = None,
    filename: str = "<input>",
) -> str:
    """
    Compile C source text to assembly text.

    Args:
        source: C source code (already preprocessed)
        platform: Target platform (default: the host)
        filename: Source filename for error messages

    Raises:
        CompileError: If the source is not a valid program
    """
    options = CompilerOptions(stage=Stage.ASSEMBLY)
    if platform is not None:
        options.platform = platform
    return Compiler(options).compile_source(source, filename).assembly


def compile_file(
    source_path: Path,
    output: Optional[Path] = None,
    options: Optional[CompilerOptions] = None,
) -> CompilationResult:
    """Compile a C file with ``options`` (default: build an executable)."""
    return Compiler(options).compile_file(source_path, output)
