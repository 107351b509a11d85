"""
Runtime entry points: source text in, output text out.

Usage:
    from spemath.core.runtime import run_source

    run_source("f(x, y) = x + y\\nf(2, 3)")
    # "5\\n"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from spemath.core.errors import DiagnosticsError, EvalError
from spemath.core.expression_lang.environment import Environment
from spemath.core.expression_lang.evaluator import DEFAULT_MAX_CALL_DEPTH, Evaluator
from spemath.core.expression_lang.parser import parse
from spemath.core.expression_lang.tokenizer import tokenize
from spemath.core.ir.expressions import Expr
from spemath.core.ir.values import Value, format_value

logger = logging.getLogger(__name__)

RUNTIME_ERROR_PREFIX = "Runtime Error: "


@dataclass
class StatementResult:
    """Outcome of one top-level statement: a value or an error, never both."""

    expr: Expr
    value: Value | None = None
    error: EvalError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str | None:
        """Output line for this statement, or None if it prints nothing."""
        if self.error is not None:
            return f"{RUNTIME_ERROR_PREFIX}{self.error}"
        if self.value is None:
            return None
        return format_value(self.value)


@dataclass
class RunReport:
    """Structured result of running a whole program."""

    results: list[StatementResult] = field(default_factory=list)
    environment: Environment = field(default_factory=Environment)

    @property
    def outputs(self) -> list[str]:
        """Printed lines of successful, non-unit statements."""
        return [
            line
            for r in self.results
            if r.ok and (line := r.render()) is not None
        ]

    @property
    def errors(self) -> list[EvalError]:
        return [r.error for r in self.results if r.error is not None]

    def render(self) -> str:
        """Every output and runtime-error line in source order."""
        lines = [line for r in self.results if (line := r.render()) is not None]
        return "".join(f"{line}\n" for line in lines)


def execute(
    source: str,
    *,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    log: logging.Logger | None = None,
) -> RunReport:
    """Lex, parse and evaluate a program with a fresh environment.

    A failing statement is recorded and evaluation moves on to the next.

    Raises:
        LexErrors: If tokenization fails (nothing is evaluated).
        ParseErrors: If parsing fails (nothing is evaluated).
    """
    log = log or logger
    exprs = parse(tokenize(source, log=log), log=log)

    evaluator = Evaluator(max_call_depth=max_call_depth, log=log)
    report = RunReport(environment=evaluator.env)

    for index, expr in enumerate(exprs, start=1):
        try:
            value = evaluator.evaluate(expr)
        except EvalError as e:
            log.warning("Statement %d failed: %s", index, e)
            report.results.append(StatementResult(expr=expr, error=e))
        else:
            report.results.append(StatementResult(expr=expr, value=value))

    log.debug(
        "Evaluated %d statements, %d failed", len(report.results), len(report.errors)
    )
    return report


def run_source(
    source: str,
    *,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    log: logging.Logger | None = None,
) -> str:
    """Run a program and return its output text.

    Returns:
        One line per non-unit value and one ``Runtime Error: ...`` line per
        failed statement, in source order.

    Raises:
        LexErrors: If tokenization fails; ``str()`` is the full report.
        ParseErrors: If parsing fails; ``str()`` is the full report.
    """
    return execute(source, max_call_depth=max_call_depth, log=log).render()


def run_code(source: str) -> str:
    """Host-embedding entry point that never raises on bad input."""
    try:
        return run_source(source)
    except DiagnosticsError as e:
        return f"Error: {e}"
