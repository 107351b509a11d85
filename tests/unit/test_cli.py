"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from spemath._version import get_version
from spemath.cli import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _program(tmp_path: Path, source: str, name: str = "prog.spemath") -> Path:
    path = tmp_path / name
    path.write_text(source)
    return path


def _manifest_args(tmp_path: Path) -> list[str]:
    return ["--manifest", str(tmp_path / "spemath.toml")]


class TestVersion:
    def test_version_flag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"spemath version {get_version()}" in result.stdout


class TestRunCommand:
    def test_run_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "f(x, y) = x + y\nf(2, 3)\n7 / 2\n")
        result = cli_runner.invoke(app, ["run", str(prog), *_manifest_args(tmp_path)])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["5", "3.5"]

    def test_run_default_source_from_manifest(
        self, cli_runner: CliRunner, project_dir: Path
    ) -> None:
        result = cli_runner.invoke(app, ["run", *_manifest_args(project_dir)])
        assert result.exit_code == 0
        assert "9" in result.stdout

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(
            app, ["run", str(tmp_path / "nope.spemath"), *_manifest_args(tmp_path)]
        )
        assert result.exit_code == 1
        assert "cannot read" in result.output

    def test_lex_error_exits_1(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "1 @ 2\n")
        result = cli_runner.invoke(app, ["run", str(prog), *_manifest_args(tmp_path)])
        assert result.exit_code == 1
        assert "Unexpected character '@'" in result.output

    def test_parse_errors_are_all_reported(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, ")\n5 = x\n")
        result = cli_runner.invoke(app, ["run", str(prog), *_manifest_args(tmp_path)])
        assert result.exit_code == 1
        assert "Unexpected token ')'" in result.output
        assert "Invalid assignment target" in result.output

    def test_runtime_error_exits_0_by_default(
        self, cli_runner: CliRunner, tmp_path: Path
    ) -> None:
        prog = _program(tmp_path, "1\ny\n2\n")
        result = cli_runner.invoke(app, ["run", str(prog), *_manifest_args(tmp_path)])
        assert result.exit_code == 0
        assert "Runtime Error: Unknown variable: 'y'" in result.output
        assert "1" in result.stdout
        assert "2" in result.stdout

    def test_strict_runtime_error_exits_2(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "y\n")
        result = cli_runner.invoke(
            app, ["run", str(prog), "--strict", *_manifest_args(tmp_path)]
        )
        assert result.exit_code == 2

    def test_max_call_depth_option(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "f(x) = g(x)\ng(x) = x\nf(1)\n")
        result = cli_runner.invoke(
            app,
            ["run", str(prog), "--max-call-depth", "1", "--strict", *_manifest_args(tmp_path)],
        )
        assert result.exit_code == 2
        assert "Maximum call depth of 1 exceeded" in result.output

    def test_invalid_manifest_exits_1(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "spemath.toml").write_text("[run]\nmax_call_depth = 0\n")
        prog = _program(tmp_path, "1\n")
        result = cli_runner.invoke(app, ["run", str(prog), *_manifest_args(tmp_path)])
        assert result.exit_code == 1
        assert "Manifest error" in result.output


class TestTokensCommand:
    def test_tokens(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "x = 2\n")
        result = cli_runner.invoke(app, ["tokens", str(prog)])
        assert result.exit_code == 0
        assert "IDENT" in result.stdout
        assert "NUMBER" in result.stdout
        assert "WHITESPACE" not in result.stdout

    def test_tokens_layout(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "x = 2\n")
        result = cli_runner.invoke(app, ["tokens", str(prog), "--layout"])
        assert result.exit_code == 0
        assert "WHITESPACE" in result.stdout

    def test_tokens_with_errors(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "1 @\n")
        result = cli_runner.invoke(app, ["tokens", str(prog)])
        assert result.exit_code == 1
        assert "Unexpected character" in result.output


class TestAstCommand:
    def test_ast(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "2 ^ 3 ^ 2\nf(x) = 2x + 1\n")
        result = cli_runner.invoke(app, ["ast", str(prog)])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["(2 ^ (3 ^ 2))", "f(x) = ((2 * x) + 1)"]

    def test_ast_parse_error(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        prog = _program(tmp_path, "(1 + 2\n")
        result = cli_runner.invoke(app, ["ast", str(prog)])
        assert result.exit_code == 1
        assert "Expected ')'" in result.output
