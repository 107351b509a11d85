"""
Intermediate representation for spemath: the expression AST and runtime values.
"""

from spemath.core.ir.expressions import (
    Assignment,
    BinaryExpr,
    BinaryOp,
    CallExpr,
    Expr,
    FunctionDef,
    Identifier,
    NumberLiteral,
    UnaryExpr,
    UnaryOp,
    format_number,
)
from spemath.core.ir.values import (
    UNIT,
    FunctionValue,
    NumberValue,
    UnitValue,
    Value,
    format_value,
)

__all__ = [
    "Assignment",
    "BinaryExpr",
    "BinaryOp",
    "CallExpr",
    "Expr",
    "FunctionDef",
    "FunctionValue",
    "Identifier",
    "NumberLiteral",
    "NumberValue",
    "UNIT",
    "UnaryExpr",
    "UnaryOp",
    "UnitValue",
    "Value",
    "format_number",
    "format_value",
]
