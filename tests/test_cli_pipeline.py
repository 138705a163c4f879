"""
CLI pipeline tests - env_check, document_preprocess and results_report stages

Drives the stages directly with a ProgramState instead of going through
argument parsing.
"""

import io
import shutil
from argparse import Namespace
from pathlib import Path

import pytest

from mdpp.__main__ import env_check, document_preprocess, results_report
from mdpp.config import AppSettings, appsettings
from mdpp.lib.exceptions import RendererError
from mdpp.lib.renderer import RendererPipe
from mdpp.models import ProgramState, pipeline


pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


def make_state(tmp_path: Path, source: str, **options) -> ProgramState:
    inputdir = tmp_path / "in"
    outputdir = tmp_path / "out"
    inputdir.mkdir()
    (inputdir / "doc.md").write_text(source, encoding="utf-8")
    return ProgramState(
        inputdir=inputdir,
        outputdir=outputdir,
        inputFile="doc.md",
        interpreter="/bin/sh",
        **options,
    )


class TestProgramState:
    """Test ProgramState construction from CLI options"""

    def test_state_from_namespace_drops_unknown_options(self, tmp_path):
        options = Namespace(inputFile="doc.md", render=True, verbosity=3, unrelated="x")
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")
        assert state.inputFile == "doc.md"
        assert state.render is True
        assert state.verbosity == 3
        assert state.inputdir == tmp_path
        assert not hasattr(state, "unrelated")


class TestEnvCheck:
    """Test path resolution"""

    def test_output_defaults_to_input_name(self, tmp_path):
        state = env_check(make_state(tmp_path, "x\n"))
        assert state.envOK is True
        assert state.outputTargetFile == tmp_path / "out" / "doc.md"
        assert state.outputTargetFile.parent.is_dir()

    def test_render_output_defaults_to_html(self, tmp_path):
        state = env_check(make_state(tmp_path, "x\n", render=True))
        assert state.outputTargetFile.name == "doc.html"

    def test_explicit_output_name(self, tmp_path):
        state = env_check(make_state(tmp_path, "x\n", outputFile="sub/final.md"))
        assert state.outputTargetFile == tmp_path / "out" / "sub" / "final.md"

    def test_missing_input_exits(self, tmp_path):
        state = make_state(tmp_path, "x\n")
        state.inputFile = "missing.md"
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1

    def test_output_onto_input_refused(self, tmp_path, capsys):
        """Same directory and default name would truncate the document"""
        state = make_state(tmp_path, "hello $(echo world)\n")
        state.outputdir = state.inputdir
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1
        assert "would overwrite input" in capsys.readouterr().err
        assert (state.inputdir / "doc.md").read_text(encoding="utf-8") == "hello $(echo world)\n"

    def test_output_onto_input_through_other_spelling_refused(self, tmp_path):
        state = make_state(tmp_path, "x\n", outputFile="../in/doc.md")
        with pytest.raises(SystemExit):
            env_check(state)
        assert (tmp_path / "in" / "doc.md").read_text(encoding="utf-8") == "x\n"

    def test_same_directory_other_name_allowed(self, tmp_path):
        state = make_state(tmp_path, "x\n", outputFile="doc.out.md")
        state.outputdir = state.inputdir
        assert env_check(state).outputTargetFile == tmp_path / "in" / "doc.out.md"

    def test_stdin_defaults_to_stdout(self, tmp_path):
        state = env_check(ProgramState(inputdir=tmp_path, outputdir=tmp_path / "out", inputFile="-"))
        assert state.inputSourceFile == Path("-")
        assert state.outputTargetFile == Path("-")
        assert not (tmp_path / "out").exists()


class TestPipeline:
    """Test the full stage pipeline"""

    def test_preprocess_to_file(self, tmp_path):
        state = make_state(tmp_path, "%title T\nvalue $(echo $title)\n")
        final = pipeline(state, env_check, document_preprocess, results_report)
        assert final.preprocessResult["status"] is True
        assert final.preprocessResult["line_count"] == 2
        output = Path(final.preprocessResult["output_file"]).read_text(encoding="utf-8")
        assert output == "<title>T</title>\nvalue T\n"

    def test_render_through_pipe(self, tmp_path, monkeypatch):
        monkeypatch.setattr(appsettings, "renderer_command", "cat")
        state = make_state(tmp_path, "a $(echo b) c\n", render=True)
        final = pipeline(state, env_check, document_preprocess)
        output = (tmp_path / "out" / "doc.html").read_text(encoding="utf-8")
        assert output == "a b c\n"
        assert final.preprocessResult["line_count"] == 1

    def test_document_error_exits_nonzero(self, tmp_path, capsys):
        state = env_check(make_state(tmp_path, "$(echo unclosed\n"))
        with pytest.raises(SystemExit) as excinfo:
            document_preprocess(state)
        assert excinfo.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_interpreter_error_exits_nonzero(self, tmp_path):
        state = env_check(make_state(tmp_path, "x\n"))
        state.interpreter = "/nonexistent/mdpp-evaluator"
        with pytest.raises(SystemExit) as excinfo:
            document_preprocess(state)
        assert excinfo.value.code == 1

    def test_stdin_to_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("a $(echo b) c\n"))
        state = ProgramState(
            inputdir=tmp_path, outputdir=tmp_path / "out",
            inputFile="-", outputFile="doc.md", interpreter="/bin/sh",
        )
        final = pipeline(state, env_check, document_preprocess)
        assert (tmp_path / "out" / "doc.md").read_text(encoding="utf-8") == "a b c\n"
        assert final.preprocessResult["line_count"] == 1

    def test_file_to_stdout(self, tmp_path, capsys):
        state = make_state(tmp_path, "%title T\nby $(echo $title)\n", outputFile="-")
        final = pipeline(state, env_check, document_preprocess)
        assert capsys.readouterr().out == "<title>T</title>\nby T\n"
        assert final.preprocessResult["output_file"] == "<stdout>"
        assert not (tmp_path / "out").exists()

    def test_stdin_to_stdout(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("x \\$(echo no)\n"))
        state = ProgramState(inputdir=tmp_path, outputdir=tmp_path, inputFile="-", interpreter="/bin/sh")
        pipeline(state, env_check, document_preprocess)
        assert capsys.readouterr().out == "x $(echo no)\n"

    def test_report_without_result_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            results_report(ProgramState())


class TestRendererPipe:
    """Test the renderer subprocess wrapper"""

    def test_output_reaches_destination(self, tmp_path):
        target = tmp_path / "out.txt"
        with open(target, "w", encoding="utf-8") as dest:
            with RendererPipe(dest, command="cat") as renderer:
                renderer.stdin.write("hello\n")
        assert target.read_text(encoding="utf-8") == "hello\n"

    def test_nonzero_exit_is_an_error(self, tmp_path):
        with open(tmp_path / "out.txt", "w", encoding="utf-8") as dest:
            renderer = RendererPipe(dest, command="false")
            with pytest.raises(RendererError, match="status 1"):
                renderer.close()

    def test_missing_renderer(self, tmp_path):
        with open(tmp_path / "out.txt", "w", encoding="utf-8") as dest:
            with pytest.raises(RendererError, match="Unable to start renderer"):
                RendererPipe(dest, command="/nonexistent/mdpp-renderer")


class TestSettings:
    """Test environment-driven configuration"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MDPP_INTERPRETER_COMMAND", raising=False)
        settings = AppSettings(_env_file=None)
        assert settings.interpreter_command == "/bin/sh"
        assert settings.statement_terminator == ";"
        assert settings.metaTag_make("a", "b") == '<meta name="a" content="b">'
        assert settings.titleTag_make("T") == "<title>T</title>"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MDPP_INTERPRETER_COMMAND", "/bin/bash")
        settings = AppSettings(_env_file=None)
        assert settings.interpreter_command == "/bin/bash"
