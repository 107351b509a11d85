"""
spemath command-line driver.

Reads a program file, runs it and writes results to stdout and diagnostics
to stderr. Exit codes: 0 on success, 1 on lexer/parser/manifest errors,
2 on runtime errors when ``--strict`` is given.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spemath._version import get_version
from spemath.core.errors import DiagnosticsError, SpemathError
from spemath.core.expression_lang.parser import parse
from spemath.core.expression_lang.tokenizer import Lexer, TokenKind, tokenize
from spemath.core.manifest import MANIFEST_NAME, SpemathManifest, load_manifest
from spemath.core.runtime import execute

err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"spemath version {get_version()}")
        typer.echo(f"  Python:        {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


app = typer.Typer(
    help="spemath: arithmetic expression language interpreter",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """spemath CLI main callback for global options."""
    pass


def _configure_logging(manifest: SpemathManifest, verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif manifest.logging.numeric_level is not None:
        level = manifest.logging.numeric_level
    else:
        env_level = os.getenv("LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, env_level, logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load(manifest: str, verbose: bool) -> SpemathManifest:
    try:
        mf = load_manifest(Path(manifest).resolve())
    except SpemathError as e:
        err_console.print(f"[bold red]Manifest error:[/bold red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=1)
    _configure_logging(mf, verbose)
    return mf


def _read_source(file: Path | None, mf: SpemathManifest) -> str:
    path = file if file is not None else mf.source_path
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        err_console.print(
            f"[bold red]Error:[/bold red] cannot read {escape(str(path))}: {escape(str(e))}",
            highlight=False,
        )
        raise typer.Exit(code=1)


def _print_diagnostics(error: DiagnosticsError) -> None:
    for diagnostic in error.errors:
        err_console.print(f"[bold red]error:[/bold red] {escape(str(diagnostic))}", highlight=False)


@app.command()
def run(
    file: Path | None = typer.Argument(  # noqa: B008
        None, help="Program to run (default: run.source from spemath.toml, or input.spemath)"
    ),
    manifest: str = typer.Option(MANIFEST_NAME, "--manifest", "-m", help="Path to spemath.toml"),
    max_call_depth: int | None = typer.Option(
        None, "--max-call-depth", min=1, help="Nested call limit (overrides the manifest)"
    ),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 2 on runtime errors"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """
    Run a program and print the value of every top-level expression.
    """
    mf = _load(manifest, verbose)
    source = _read_source(file, mf)
    depth = max_call_depth if max_call_depth is not None else mf.run.max_call_depth
    logger.debug("Running %d characters with max call depth %d", len(source), depth)

    try:
        report = execute(source, max_call_depth=depth)
    except DiagnosticsError as e:
        _print_diagnostics(e)
        raise typer.Exit(code=1)

    for result in report.results:
        line = result.render()
        if line is None:
            continue
        if result.ok:
            typer.echo(line)
        else:
            err_console.print(f"[red]{escape(line)}[/red]", highlight=False)

    if strict and report.errors:
        raise typer.Exit(code=2)


@app.command()
def tokens(
    file: Path = typer.Argument(..., help="Program to tokenize"),  # noqa: B008
    layout: bool = typer.Option(False, "--layout", help="Include whitespace tokens"),
) -> None:
    """
    Dump the spanned token stream (debug aid).
    """
    source = _read_source(file, SpemathManifest(root=Path.cwd()))
    lexer = Lexer(source)
    toks = lexer.tokenize()

    table = Table(title=str(file))
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Kind")
    table.add_column("Value")
    for tok in toks:
        if tok.kind == TokenKind.WHITESPACE and not layout:
            continue
        table.add_row(
            str(tok.span.line),
            str(tok.span.column),
            str(tok.span.offset),
            tok.kind.name,
            repr(tok.value),
        )
    Console().print(table)

    for error in lexer.errors:
        err_console.print(f"[bold red]error:[/bold red] {escape(str(error))}", highlight=False)
    if lexer.errors:
        raise typer.Exit(code=1)


@app.command()
def ast(
    file: Path = typer.Argument(..., help="Program to parse"),  # noqa: B008
) -> None:
    """
    Print each parsed top-level expression with explicit grouping.
    """
    source = _read_source(file, SpemathManifest(root=Path.cwd()))
    try:
        exprs = parse(tokenize(source))
    except DiagnosticsError as e:
        _print_diagnostics(e)
        raise typer.Exit(code=1)

    for expr in exprs:
        typer.echo(str(expr))


def main() -> None:
    """Console script entry point."""
    app()
