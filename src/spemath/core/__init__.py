"""
spemath core: error types, IR, expression language and runtime.
"""

from spemath.core.errors import (
    DiagnosticsError,
    EvalError,
    LexError,
    LexErrors,
    ParseError,
    ParseErrors,
    Span,
    SpemathError,
)
from spemath.core.runtime import RunReport, execute, run_code, run_source

__all__ = [
    "DiagnosticsError",
    "EvalError",
    "LexError",
    "LexErrors",
    "ParseError",
    "ParseErrors",
    "RunReport",
    "Span",
    "SpemathError",
    "execute",
    "run_code",
    "run_source",
]
