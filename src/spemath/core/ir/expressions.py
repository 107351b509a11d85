"""
Expression AST for the spemath language.

Nodes are immutable pydantic models forming a strict tree:

- Literals and names: ``2.5``, ``x``
- Unary: ``-x``, ``+x``
- Binary: ``+ - * / % ^`` and the comparisons ``== != < <= > >=``
- Assignment: ``x = 5``
- Calls: ``f(1, 2)``
- Single-expression function definitions: ``f(x, y) = x + y``
"""

from __future__ import annotations

import math
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


def format_number(value: float) -> str:
    """Canonical text for a number: ``5``, ``0.5``, ``inf``, ``-inf``, ``NaN``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary operators for expressions."""

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    POW = "^"
    # Comparison
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


class UnaryOp(StrEnum):
    """Unary operators for expressions."""

    POS = "+"
    NEG = "-"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class NumberLiteral(BaseModel):
    """A numeric literal. The language has a single double-precision type."""

    value: float = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return format_number(self.value)


class Identifier(BaseModel):
    """Reference to a name in the environment."""

    name: str = Field(description="Variable or function name")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.op.value}{self.operand}"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        chain: list[BinaryExpr] = []
        node: Expr = self
        while isinstance(node, BinaryExpr):
            chain.append(node)
            node = node.left
        text = str(node)
        for binary in reversed(chain):
            text = f"({text} {binary.op.value} {binary.right})"
        return text


class Assignment(BaseModel):
    """Variable binding: target = value."""

    target: str = Field(description="Name being bound")
    value: Expr = Field(description="Right-hand side")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.target} = {self.value}"


class CallExpr(BaseModel):
    """
    Function call: callee(arg1, arg2, ...).

    The parser only produces calls whose callee is an :class:`Identifier`,
    but the evaluator accepts any callee expression.
    """

    callee: Expr = Field(description="Expression producing the function")
    args: list[Expr] = Field(default_factory=list, description="Arguments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.callee}({args_str})"


class FunctionDef(BaseModel):
    """
    Single-expression function definition: name(p1, p2) = body.

    The body is stored unevaluated and runs against a snapshot of the
    caller's environment at call time.
    """

    name: str = Field(description="Function name")
    params: list[str] = Field(default_factory=list, description="Parameter names")
    body: Expr = Field(description="Function body")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.name}({', '.join(self.params)}) = {self.body}"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = NumberLiteral | Identifier | UnaryExpr | BinaryExpr | Assignment | CallExpr | FunctionDef

# Rebuild models for recursive forward references
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()
Assignment.model_rebuild()
CallExpr.model_rebuild()
FunctionDef.model_rebuild()
