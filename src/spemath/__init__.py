"""
spemath - a small arithmetic expression language.

Numbers, variables, implicit multiplication and single-expression
functions, evaluated line by line.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import (
    DiagnosticsError,
    EvalError,
    LexError,
    LexErrors,
    ParseError,
    ParseErrors,
    SpemathError,
)
from .core.runtime import execute, run_code, run_source

__version__ = get_version()

__all__ = [
    "__version__",
    "SpemathError",
    "DiagnosticsError",
    "LexError",
    "LexErrors",
    "ParseError",
    "ParseErrors",
    "EvalError",
    "execute",
    "run_code",
    "run_source",
]
