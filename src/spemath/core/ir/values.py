"""
Runtime values produced by the evaluator.

A value is exactly one of :class:`NumberValue`, :class:`FunctionValue` or
:class:`UnitValue`. New kinds of value get a new model here and an explicit
branch in every consumer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from spemath.core.ir.expressions import Expr, format_number


class NumberValue(BaseModel):
    """A double-precision number."""

    value: float

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> str:
        return "number"

    def __str__(self) -> str:
        return format_number(self.value)


class FunctionValue(BaseModel):
    """A user-defined function: parameter names plus an unevaluated body."""

    params: list[str] = Field(default_factory=list)
    body: Expr

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> str:
        return "function"

    @property
    def arity(self) -> int:
        return len(self.params)

    def __str__(self) -> str:
        return f"<function ({', '.join(self.params)})>"


class UnitValue(BaseModel):
    """Result of assignments and definitions. Never printed."""

    model_config = ConfigDict(frozen=True)

    @property
    def kind(self) -> str:
        return "unit"

    def __str__(self) -> str:
        return "()"


UNIT = UnitValue()

Value = NumberValue | FunctionValue | UnitValue


def format_value(value: Value) -> str | None:
    """Canonical output line for a value, or None for unit."""
    if isinstance(value, UnitValue):
        return None
    return str(value)
