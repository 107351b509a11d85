"""
Error types for the spemath lexer, parser and evaluator.

Each pipeline stage has its own taxonomy. Lexing and parsing are batch
stages: they collect every diagnostic and raise a single
:class:`DiagnosticsError` at the end. Evaluation errors are raised one
statement at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spemath.core.expression_lang.tokenizer import Token


@dataclass(frozen=True)
class Span:
    """
    Source location of a token.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        offset: Absolute character offset (0-indexed)
    """

    line: int
    column: int
    offset: int

    def format(self) -> str:
        """Format as ``line L, column C``."""
        return f"line {self.line}, column {self.column}"


class SpemathError(Exception):
    """Base exception for all spemath errors."""

    def __init__(self, message: str, span: Span | None = None):
        self.message = message
        self.span = span
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with its location if available."""
        if self.span:
            return f"{self.message} at {self.span.format()}"
        return self.message


# ---------------------------------------------------------------------------
# Lexer errors
# ---------------------------------------------------------------------------


class LexError(SpemathError):
    """Raised for a single lexical fault."""


class UnexpectedCharacter(LexError):
    """A character that starts no token."""

    def __init__(self, char: str, span: Span):
        self.char = char
        super().__init__(f"Unexpected character {char!r}", span)


class InvalidNumberFormat(LexError):
    """A malformed numeric literal, reported with its full run-on text."""

    def __init__(self, literal: str, span: Span):
        self.literal = literal
        super().__init__(f"Invalid number format {literal!r}", span)


# ---------------------------------------------------------------------------
# Parser errors
# ---------------------------------------------------------------------------


class ParseError(SpemathError):
    """Raised for a single syntax fault."""


class UnexpectedToken(ParseError):
    def __init__(self, found: Token):
        self.found = found
        super().__init__(f"Unexpected token {found.describe()}", found.span)


class ExpectedToken(ParseError):
    def __init__(self, expected: str, found: Token):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected '{expected}' but found {found.describe()}", found.span)


class UnexpectedEof(ParseError):
    def __init__(self, expected: str, span: Span):
        self.expected = expected
        super().__init__(f"Unexpected end of input, expected {expected}", span)


class InvalidAssignment(ParseError):
    """Left-hand side of ``=`` is neither a name nor a call pattern."""

    def __init__(self, target: object, span: Span):
        self.target = target
        super().__init__(
            f"Invalid assignment target '{target}', left-hand side must be a variable", span
        )


class InvalidFunctionParameter(ParseError):
    def __init__(self, param: object, span: Span):
        self.param = param
        super().__init__(
            f"Invalid function parameter '{param}', parameters must be plain names", span
        )


class InvalidFunctionDefinition(ParseError):
    def __init__(self, reason: str, span: Span):
        self.reason = reason
        super().__init__(f"Invalid function definition: {reason}", span)


class NestingTooDeep(ParseError):
    """Parentheses, prefix operators or ``^`` chains nested past the parser limit."""

    def __init__(self, limit: int, span: Span):
        self.limit = limit
        super().__init__(f"Expression nested too deeply (limit {limit})", span)


# ---------------------------------------------------------------------------
# Evaluation errors
# ---------------------------------------------------------------------------


class EvalError(SpemathError):
    """Raised when a top-level statement fails to evaluate."""


class UnknownVariable(EvalError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown variable: '{name}'")


class InvalidUnary(EvalError):
    def __init__(self, op: str, operand_kind: str):
        self.op = op
        self.operand_kind = operand_kind
        super().__init__(f"Invalid unary operation: '{op}' on {operand_kind}")


class UnsupportedOperation(EvalError):
    def __init__(self, op: str, left_kind: str, right_kind: str):
        self.op = op
        self.left_kind = left_kind
        self.right_kind = right_kind
        super().__init__(f"Unsupported binary operation: {left_kind} '{op}' {right_kind}")


class NotCallable(EvalError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Attempted to call a non-function value: {kind}")


class ArityMismatch(EvalError):
    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Function expected {expected} arguments but got {got}")


class RecursionLimitExceeded(EvalError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Maximum call depth of {limit} exceeded")


class ExpressionTooDeep(EvalError):
    """Evaluation ran out of interpreter stack before reaching the call limit."""

    def __init__(self) -> None:
        super().__init__("Expression nested too deeply to evaluate")


# ---------------------------------------------------------------------------
# Batch diagnostics
# ---------------------------------------------------------------------------


class DiagnosticsError(SpemathError):
    """Every diagnostic produced by one batch stage, in encounter order."""

    def __init__(self, errors: list[SpemathError]):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class LexErrors(DiagnosticsError):
    """Raised by :func:`tokenize` when any lexical fault was recorded."""


class ParseErrors(DiagnosticsError):
    """Raised by :func:`parse` when any syntax fault was recorded."""
