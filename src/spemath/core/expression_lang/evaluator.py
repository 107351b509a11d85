"""
Expression evaluator for the spemath expression language.

Tree-walking interpreter over the typed AST. Only the closed set of AST
node and value types is handled; nothing is delegated to Python's eval().

Scoping is snapshot-at-call: a call copies the caller's whole environment,
binds the parameters into the copy and evaluates the body there. Functions
see the bindings that exist when they are *called*, including their own
name, so direct recursion resolves. Bindings made inside a call never leak
back to the caller.
"""

from __future__ import annotations

import logging
import math

from spemath.core.errors import (
    ArityMismatch,
    EvalError,
    ExpressionTooDeep,
    InvalidUnary,
    NotCallable,
    RecursionLimitExceeded,
    UnknownVariable,
    UnsupportedOperation,
)
from spemath.core.expression_lang.environment import Environment
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
)
from spemath.core.ir.values import UNIT, FunctionValue, NumberValue, Value

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 100


def _divide(a: float, b: float) -> float:
    """IEEE-754 division: x/0 is +-inf, 0/0 is NaN."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        # Sign of zero matters: 1 / -0.0 is -inf
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _power(a: float, b: float) -> float:
    """Real-valued power: NaN where undefined, inf on overflow."""
    try:
        result = math.pow(a, b)
    except OverflowError:
        if a < 0 and b.is_integer() and int(b) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # Negative base with fractional exponent, or 0 to a negative power
        if a == 0.0:
            return math.copysign(math.inf, a) if b.is_integer() and int(b) % 2 == 1 else math.inf
        return math.nan
    return result


_ARITHMETIC = {
    BinaryOp.ADD: lambda a, b: a + b,
    BinaryOp.SUB: lambda a, b: a - b,
    BinaryOp.MUL: lambda a, b: a * b,
    BinaryOp.DIV: _divide,
    BinaryOp.POW: _power,
}


class Evaluator:
    """
    Evaluates expressions against a mutable environment.

    One evaluator (and one environment) per run. ``Assignment`` and
    ``FunctionDef`` write to the environment; everything else is pure.
    """

    def __init__(
        self,
        env: Environment | None = None,
        *,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
        log: logging.Logger | None = None,
    ) -> None:
        self.env = env if env is not None else Environment()
        self.max_call_depth = max_call_depth
        self.log = log or logger

    def evaluate(self, expr: Expr) -> Value:
        """Evaluate one top-level expression.

        Raises:
            EvalError: If evaluation fails. The environment keeps any
                bindings made before the failure.
        """
        try:
            return self._interpret(expr, self.env, 0)
        except RecursionError:
            raise ExpressionTooDeep() from None

    def _interpret(self, expr: Expr, env: Environment, depth: int) -> Value:
        """Dispatch evaluation to the appropriate handler."""
        if isinstance(expr, NumberLiteral):
            return NumberValue(value=expr.value)

        if isinstance(expr, Identifier):
            value = env.get(expr.name)
            if value is None:
                raise UnknownVariable(expr.name)
            return value

        if isinstance(expr, UnaryExpr):
            return self._interpret_unary(expr, env, depth)

        if isinstance(expr, BinaryExpr):
            return self._interpret_binary(expr, env, depth)

        if isinstance(expr, Assignment):
            env.set(expr.target, self._interpret(expr.value, env, depth))
            return UNIT

        if isinstance(expr, FunctionDef):
            env.set(expr.name, FunctionValue(params=expr.params, body=expr.body))
            return UNIT

        if isinstance(expr, CallExpr):
            return self._interpret_call(expr, env, depth)

        raise EvalError(f"Unknown expression type: {type(expr).__name__}")

    def _interpret_unary(self, expr: UnaryExpr, env: Environment, depth: int) -> Value:
        operand = self._interpret(expr.operand, env, depth)
        if not isinstance(operand, NumberValue):
            raise InvalidUnary(expr.op.value, operand.kind)
        if expr.op == UnaryOp.NEG:
            return NumberValue(value=-operand.value)
        return operand

    def _interpret_binary(self, expr: BinaryExpr, env: Environment, depth: int) -> Value:
        # Left-leaning chains (1 + 2 + ... + n) are folded in a loop
        chain: list[BinaryExpr] = []
        node: Expr = expr
        while isinstance(node, BinaryExpr):
            chain.append(node)
            node = node.left

        left = self._interpret(node, env, depth)
        for binary in reversed(chain):
            right = self._interpret(binary.right, env, depth)
            left = self._apply(binary.op, left, right)
        return left

    def _apply(self, op: BinaryOp, left: Value, right: Value) -> Value:
        apply = _ARITHMETIC.get(op)
        if (
            apply is None
            or not isinstance(left, NumberValue)
            or not isinstance(right, NumberValue)
        ):
            raise UnsupportedOperation(op.value, left.kind, right.kind)

        return NumberValue(value=apply(left.value, right.value))

    def _interpret_call(self, expr: CallExpr, env: Environment, depth: int) -> Value:
        func = self._interpret(expr.callee, env, depth)
        if not isinstance(func, FunctionValue):
            raise NotCallable(func.kind)

        if func.arity != len(expr.args):
            raise ArityMismatch(func.arity, len(expr.args))

        if depth >= self.max_call_depth:
            raise RecursionLimitExceeded(self.max_call_depth)

        args = [self._interpret(arg, env, depth) for arg in expr.args]

        local = env.snapshot()
        for name, value in zip(func.params, args):
            local.set(name, value)

        self.log.debug("Calling %s with %d args at depth %d", expr.callee, len(args), depth + 1)
        return self._interpret(func.body, local, depth + 1)


def evaluate(
    expr: Expr,
    env: Environment | None = None,
    *,
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
) -> Value:
    """Evaluate a single expression.

    Args:
        expr: Parsed expression AST.
        env: Environment to read and write. A fresh one is used if omitted.
        max_call_depth: Nested call limit before RecursionLimitExceeded.

    Returns:
        The computed value.

    Raises:
        EvalError: If evaluation fails.
    """
    return Evaluator(env, max_call_depth=max_call_depth).evaluate(expr)
