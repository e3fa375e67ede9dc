"""
Tests for the compiler driver
=============================

These tests cover stage selection, the file pipeline and the handling of
the external toolchain. ``subprocess.run`` is replaced by a fake so no
real compiler is needed.
"""

import subprocess
from pathlib import Path

import pytest

from nanocc.compiler.driver import (
    CompilationResult,
    Compiler,
    CompilerOptions,
    Stage,
    compile_c,
    compile_file,
)
from nanocc.compiler.emitter import Platform
from nanocc.compiler.errors import LexError, ParseError
from nanocc.compiler.ir import AsmFunction, AsmProgram, Imm, Mov, Register, Ret
from nanocc.compiler.tokens import Token, TokenType
from nanocc.compiler import driver, emitter
from nanocc.errors import NanoCCError, OutputPathError, SourceReadError, ToolchainError


RETURN_2 = "int main(void) { return 2; }\n"


class FakeToolchain:
    """Stands in for subprocess.run; records commands and fakes outputs."""

    def __init__(self, fail_when=None, returncode=1, stderr="boom"):
        self.commands: list[list[str]] = []
        self.fail_when = fail_when
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, command, capture_output=False, text=False):
        self.commands.append(command)
        if self.fail_when and self.fail_when(command):
            return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)
        output = Path(command[-1])
        if "-E" in command:
            output.write_text(Path(command[3]).read_text())
        else:
            output.write_text("object code")
        return subprocess.CompletedProcess(command, 0, "", "")


@pytest.fixture
def toolchain(monkeypatch):
    fake = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "return_2.c"
    path.write_text(RETURN_2)
    return path


# =============================================================================
# In-process Stages
# =============================================================================

class TestCompileSource:
    """Tests for Compiler.compile_source()."""

    def test_lex_stage(self):
        result = Compiler(CompilerOptions(stage=Stage.LEX)).compile_source(RETURN_2)
        assert result.stage == Stage.LEX
        assert result.tokens[0] == Token(TokenType.INT)
        assert result.ast is None
        assert result.ir is None

    def test_parse_stage(self):
        result = Compiler(CompilerOptions(stage=Stage.PARSE)).compile_source(RETURN_2)
        assert result.stage == Stage.PARSE
        assert result.ast.function.name == "main"
        assert result.ir is None

    def test_codegen_stage(self):
        result = Compiler(CompilerOptions(stage=Stage.CODEGEN)).compile_source(RETURN_2)
        assert result.ir == AsmProgram(
            AsmFunction("main", (Mov(Imm(2), Register()), Ret()))
        )
        assert result.assembly == ""

    def test_later_stages_stop_at_assembly(self):
        options = CompilerOptions(stage=Stage.EXECUTABLE, platform=Platform.LINUX)
        result = Compiler(options).compile_source(RETURN_2)
        assert result.stage == Stage.ASSEMBLY
        assert "movl $2, %eax" in result.assembly

    def test_platform_does_not_affect_front_end(self):
        linux = Compiler(CompilerOptions(stage=Stage.CODEGEN, platform=Platform.LINUX))
        osx = Compiler(CompilerOptions(stage=Stage.CODEGEN, platform=Platform.OSX))
        assert linux.compile_source(RETURN_2).ir == osx.compile_source(RETURN_2).ir

    def test_compile_c(self):
        assert "_main:" in compile_c(RETURN_2, Platform.OSX)
        assert "\tret\n" in compile_c(RETURN_2, Platform.LINUX)

    def test_errors_propagate(self):
        with pytest.raises(LexError):
            compile_c("int main(void) { return -1; }")
        with pytest.raises(ParseError):
            compile_c("int main(void) { return 1 }")

    def test_default_options(self):
        options = CompilerOptions()
        assert options.stage == Stage.EXECUTABLE
        assert options.platform == Platform.host()
        assert options.cc == "gcc"
        assert options.preprocess is True
        assert options.keep_intermediates is False

    def test_stage_ordering(self):
        assert Stage.LEX < Stage.PARSE < Stage.CODEGEN < Stage.ASSEMBLY
        assert Stage.ASSEMBLY < Stage.OBJECT < Stage.EXECUTABLE

    def test_diagnostic_line_ignores_form_feed(self):
        options = CompilerOptions(stage=Stage.PARSE)
        source = "int main(void) {\x0c return 2\n}"
        with pytest.raises(ParseError) as exc_info:
            Compiler(options).compile_source(source)
        error = exc_info.value
        assert error.location.line == 2
        assert error.location.column == 1
        assert error.source_line == "}"


# =============================================================================
# File Pipeline
# =============================================================================

class TestCompileFile:
    """Tests for Compiler.compile_file()."""

    def test_assembly_without_preprocessor(self, source_file, toolchain):
        options = CompilerOptions(stage=Stage.ASSEMBLY, preprocess=False, platform=Platform.LINUX)
        result = compile_file(source_file, options=options)
        asm = source_file.with_suffix(".s")
        assert result.output_path == asm
        assert asm.read_text() == result.assembly
        assert toolchain.commands == []

    def test_assembly_custom_output(self, source_file, tmp_path, toolchain):
        options = CompilerOptions(stage=Stage.ASSEMBLY, preprocess=False)
        out = tmp_path / "out.s"
        compile_file(source_file, out, options)
        assert out.exists()
        assert not source_file.with_suffix(".s").exists()

    def test_preprocess_then_assembly(self, source_file, toolchain):
        options = CompilerOptions(stage=Stage.ASSEMBLY)
        compile_file(source_file, options=options)
        preprocessed = source_file.with_suffix(".i")
        assert toolchain.commands == [
            ["gcc", "-E", "-P", str(source_file), "-o", str(preprocessed)]
        ]
        assert not preprocessed.exists()
        assert source_file.with_suffix(".s").exists()

    def test_executable(self, source_file, toolchain):
        result = compile_file(source_file)
        asm = source_file.with_suffix(".s")
        exe = source_file.with_suffix("")
        assert toolchain.commands[-1] == ["gcc", str(asm), "-o", str(exe)]
        assert result.output_path == exe
        assert result.stage == Stage.EXECUTABLE
        assert exe.exists()
        assert not asm.exists()
        assert not source_file.with_suffix(".i").exists()

    def test_object(self, source_file, toolchain):
        options = CompilerOptions(stage=Stage.OBJECT, cc="clang")
        result = compile_file(source_file, options=options)
        asm = source_file.with_suffix(".s")
        obj = source_file.with_suffix(".o")
        assert toolchain.commands[-1] == ["clang", "-c", str(asm), "-o", str(obj)]
        assert result.output_path == obj
        assert not asm.exists()

    def test_keep_intermediates(self, source_file, toolchain):
        compile_file(source_file, options=CompilerOptions(keep_intermediates=True))
        assert source_file.with_suffix(".i").exists()
        assert source_file.with_suffix(".s").exists()

    def test_early_stage_writes_nothing(self, source_file, toolchain):
        result = compile_file(source_file, options=CompilerOptions(stage=Stage.PARSE))
        assert isinstance(result, CompilationResult)
        assert result.output_path is None
        assert sorted(p.name for p in source_file.parent.iterdir()) == ["return_2.c"]

    def test_compile_error_cleans_up(self, tmp_path, toolchain):
        path = tmp_path / "bad.c"
        path.write_text("int main(void) { return 2 }")
        with pytest.raises(ParseError):
            compile_file(path)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["bad.c"]

    def test_missing_source(self, tmp_path):
        options = CompilerOptions(preprocess=False)
        with pytest.raises(SourceReadError) as exc_info:
            compile_file(tmp_path / "nope.c", options=options)
        assert exc_info.value.path == tmp_path / "nope.c"

    def test_assembly_rendered_once(self, source_file, toolchain, monkeypatch):
        calls = []

        def counting_render(program, target):
            calls.append(target)
            return emitter.render_function(program.function, target)

        monkeypatch.setattr(driver, "render", counting_render)
        monkeypatch.setattr(emitter, "render", counting_render)
        options = CompilerOptions(stage=Stage.ASSEMBLY, preprocess=False)
        result = compile_file(source_file, options=options)
        assert len(calls) == 1
        assert result.output_path.read_text() == result.assembly


# =============================================================================
# Output Path Collisions
# =============================================================================

class TestOutputPaths:
    """The driver never writes over its input or over one of its own outputs."""

    def test_preprocessed_input_is_not_overwritten(self, tmp_path, toolchain):
        path = tmp_path / "prog.i"
        path.write_text(RETURN_2)
        with pytest.raises(OutputPathError) as exc_info:
            compile_file(path, options=CompilerOptions(stage=Stage.ASSEMBLY))
        assert exc_info.value.path == path
        assert exc_info.value.role == "preprocessed file"
        assert path.read_text() == RETURN_2
        assert toolchain.commands == []

    def test_assembly_input_is_not_overwritten(self, tmp_path, toolchain):
        path = tmp_path / "prog.s"
        path.write_text(RETURN_2)
        options = CompilerOptions(stage=Stage.OBJECT, preprocess=False)
        with pytest.raises(OutputPathError):
            compile_file(path, options=options)
        assert path.read_text() == RETURN_2
        assert sorted(p.name for p in tmp_path.iterdir()) == ["prog.s"]

    def test_suffixless_input_is_not_linked_over(self, tmp_path, toolchain):
        path = tmp_path / "prog"
        path.write_text(RETURN_2)
        with pytest.raises(OutputPathError) as exc_info:
            compile_file(path)
        assert exc_info.value.role == "output file"
        assert exc_info.value.other == "input file"
        assert isinstance(exc_info.value, NanoCCError)
        assert path.read_text() == RETURN_2
        assert sorted(p.name for p in tmp_path.iterdir()) == ["prog"]
        assert toolchain.commands == []

    def test_explicit_output_matching_input(self, source_file, toolchain):
        with pytest.raises(OutputPathError):
            compile_file(source_file, source_file, CompilerOptions(stage=Stage.ASSEMBLY))
        assert source_file.read_text() == RETURN_2

    def test_output_matching_intermediate(self, source_file, toolchain):
        options = CompilerOptions(stage=Stage.OBJECT)
        with pytest.raises(OutputPathError) as exc_info:
            compile_file(source_file, source_file.with_suffix(".s"), options)
        assert exc_info.value.other == "assembly file"
        assert toolchain.commands == []

    def test_assembly_output_may_replace_default_name(self, source_file, toolchain):
        options = CompilerOptions(stage=Stage.ASSEMBLY, preprocess=False)
        result = compile_file(source_file, source_file.with_suffix(".s"), options)
        assert result.output_path.exists()


# =============================================================================
# Toolchain Failures
# =============================================================================

class TestToolchain:
    """Tests for external tool errors."""

    def test_link_failure(self, source_file, monkeypatch):
        fake = FakeToolchain(fail_when=lambda cmd: "-E" not in cmd, stderr="ld: error")
        monkeypatch.setattr(subprocess, "run", fake)
        with pytest.raises(ToolchainError) as exc_info:
            compile_file(source_file)
        error = exc_info.value
        assert error.returncode == 1
        assert error.stderr == "ld: error"
        assert "ld: error" in str(error)
        assert not source_file.with_suffix(".s").exists()

    def test_preprocessor_failure(self, source_file, monkeypatch):
        fake = FakeToolchain(fail_when=lambda cmd: "-E" in cmd)
        monkeypatch.setattr(subprocess, "run", fake)
        with pytest.raises(ToolchainError):
            compile_file(source_file)
        assert len(fake.commands) == 1

    def test_tool_not_found(self, source_file, monkeypatch):
        def missing(command, capture_output=False, text=False):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(subprocess, "run", missing)
        with pytest.raises(ToolchainError) as exc_info:
            compile_file(source_file, options=CompilerOptions(cc="no-such-cc"))
        assert exc_info.value.returncode is None
        assert exc_info.value.command[0] == "no-such-cc"
