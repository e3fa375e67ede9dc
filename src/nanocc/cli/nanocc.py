"""
nanocc - Compiler Command-Line Interface
========================================

Usage Examples
--------------
Build an executable:
    $ nanocc return_2.c            # writes ./return_2

Stop early:
    $ nanocc --lex return_2.c      # print tokens
    $ nanocc --parse return_2.c    # print the AST
    $ nanocc --codegen return_2.c  # print the instruction IR
    $ nanocc -S return_2.c         # write return_2.s
    $ nanocc -c return_2.c         # write return_2.o

Cross-target the assembly:
    $ nanocc -S --platform osx return_2.c

Exit Codes
----------
0 - Success
1 - Build failed (lexical, syntax, emit or toolchain error)
2 - Invalid arguments or file not found
3 - Internal error
"""

import logging
from pathlib import Path
from typing import Optional

import click

from nanocc import __version__
from nanocc.compiler import (
    ASTPrinter,
    Compiler,
    CompilerOptions,
    Platform,
    Stage,
    format_ir,
)
from nanocc.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def select_stage(lex: bool, parse: bool, codegen: bool, assembly: bool, obj: bool) -> Stage:
    """Map the stage flags to a Stage; at most one may be given."""
    chosen = [
        stage
        for flag, stage in (
            (lex, Stage.LEX),
            (parse, Stage.PARSE),
            (codegen, Stage.CODEGEN),
            (assembly, Stage.ASSEMBLY),
            (obj, Stage.OBJECT),
        )
        if flag
    ]
    if len(chosen) > 1:
        raise click.BadParameter(
            "options --lex, --parse, --codegen, -S and -c are mutually exclusive"
        )
    return chosen[0] if chosen else Stage.EXECUTABLE


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--lex", "lex", is_flag=True, help="Stop after lexing and print the tokens")
@click.option("--parse", "parse", is_flag=True, help="Stop after parsing and print the AST")
@click.option("--codegen", "codegen", is_flag=True, help="Stop after code generation and print the IR")
@click.option("-S", "assembly", is_flag=True, help="Stop after writing the assembly file (.s)")
@click.option("-c", "obj", is_flag=True, help="Stop after assembling an object file (.o)")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: derived from INPUT_FILE)",
)
@click.option(
    "-p", "--platform", "platform_name",
    type=click.Choice([p.value for p in Platform], case_sensitive=False),
    default=None,
    help="Target platform (default: the host system)",
)
@click.option(
    "-k", "--keep",
    is_flag=True,
    help="Keep intermediate files (.i, .s) instead of cleaning up",
)
@click.option(
    "--no-preprocess",
    is_flag=True,
    help="Lex the file as-is instead of running the C preprocessor first",
)
@click.option(
    "--cc",
    default="gcc",
    show_default=True,
    help="C compiler driver used to preprocess, assemble and link",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="nanocc")
def main(
    input_file: Path,
    lex: bool,
    parse: bool,
    codegen: bool,
    assembly: bool,
    obj: bool,
    output: Optional[Path],
    platform_name: Optional[str],
    keep: bool,
    no_preprocess: bool,
    cc: str,
    verbose: bool,
) -> None:
    """
    Compile a tiny C program.

    INPUT_FILE is a C source file containing exactly one function of the
    form `int NAME(void) { return N; }`.

    \b
    Examples:
        nanocc return_2.c              # Build ./return_2
        nanocc -S return_2.c           # Write return_2.s
        nanocc --parse return_2.c      # Print the AST
        nanocc -S -p osx return_2.c    # macOS assembly
    """
    setup_logging(verbose)

    try:
        options = CompilerOptions(
            stage=select_stage(lex, parse, codegen, assembly, obj),
            keep_intermediates=keep,
            cc=cc,
            preprocess=not no_preprocess,
        )
        if platform_name:
            options.platform = Platform.from_name(platform_name)

        if verbose:
            click.echo(f"Compiling {input_file} (stage: {options.stage.name.lower()}, "
                       f"platform: {options.platform.value})")

        result = Compiler(options).compile_file(input_file, output)

        if options.stage == Stage.LEX:
            for token in result.tokens:
                click.echo(repr(token))
        elif options.stage == Stage.PARSE:
            click.echo(ASTPrinter().print(result.ast))
        elif options.stage == Stage.CODEGEN:
            click.echo(format_ir(result.ir))
        elif verbose:
            click.echo(f"Compiled {input_file} -> {result.output_path}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
