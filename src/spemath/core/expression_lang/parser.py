"""
Precedence-climbing (Pratt) parser for the spemath expression language.

Precedence ladder, low to high:

    LOWEST < ASSIGNMENT < COMPARISON < SUM < PRODUCT < POWER < PREFIX < CALL

Binary operators are left-associative except ``^``, which recurses at its
own level and so groups to the right: ``2^3^2`` is ``2^(3^2)``.

Whitespace tokens from the tokenizer decide three ambiguities:

- ``f(x)`` (no space) is a call, ``f (x)`` is not.
- ``2x``, ``(a)(b)`` and ``(a)2`` are implicit multiplication; a space
  between the operands suppresses it.
- ``f(x, y) = body`` is reinterpreted from a call into a function
  definition when ``=`` follows it.

A program is a sequence of statements separated by newlines or ``;``. A
faulty statement is recorded and skipped up to the next separator, so one
run reports every syntax error.
"""

from __future__ import annotations

import logging
from enum import IntEnum

from spemath.core.errors import (
    ExpectedToken,
    InvalidAssignment,
    InvalidFunctionDefinition,
    InvalidFunctionParameter,
    NestingTooDeep,
    ParseError,
    ParseErrors,
    UnexpectedEof,
    UnexpectedToken,
)
from spemath.core.expression_lang.tokenizer import Token, TokenKind, tokenize
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

logger = logging.getLogger(__name__)

# Nested sub-expressions (parentheses, prefix operators, right-hand sides of
# ``^``) allowed before NestingTooDeep. Left-leaning chains such as
# ``1 + 2 + 3`` are built in a loop and do not count.
MAX_NESTING_DEPTH = 200


class Precedence(IntEnum):
    LOWEST = 0
    ASSIGNMENT = 1
    COMPARISON = 2
    SUM = 3
    PRODUCT = 4
    POWER = 5
    PREFIX = 6
    CALL = 7


_INFIX: dict[TokenKind, tuple[Precedence, BinaryOp]] = {
    TokenKind.PLUS: (Precedence.SUM, BinaryOp.ADD),
    TokenKind.MINUS: (Precedence.SUM, BinaryOp.SUB),
    TokenKind.STAR: (Precedence.PRODUCT, BinaryOp.MUL),
    TokenKind.SLASH: (Precedence.PRODUCT, BinaryOp.DIV),
    TokenKind.PERCENT: (Precedence.PRODUCT, BinaryOp.MOD),
    TokenKind.CARET: (Precedence.POWER, BinaryOp.POW),
    TokenKind.EQ: (Precedence.COMPARISON, BinaryOp.EQ),
    TokenKind.NE: (Precedence.COMPARISON, BinaryOp.NE),
    TokenKind.LT: (Precedence.COMPARISON, BinaryOp.LT),
    TokenKind.LE: (Precedence.COMPARISON, BinaryOp.LE),
    TokenKind.GT: (Precedence.COMPARISON, BinaryOp.GT),
    TokenKind.GE: (Precedence.COMPARISON, BinaryOp.GE),
}

_PREFIX: dict[TokenKind, UnaryOp] = {
    TokenKind.PLUS: UnaryOp.POS,
    TokenKind.MINUS: UnaryOp.NEG,
}

_RIGHT_ASSOCIATIVE = frozenset({TokenKind.CARET})

_BOUNDARY = frozenset({TokenKind.SEMICOLON, TokenKind.NEWLINE, TokenKind.EOF})

_LAYOUT = frozenset({TokenKind.SEMICOLON, TokenKind.NEWLINE, TokenKind.WHITESPACE})

# Token kinds that may precede an operand to form an implicit product
_IMPLICIT_LEFT = frozenset({TokenKind.NUMBER, TokenKind.IDENT, TokenKind.RPAREN})


class _Parser:
    """Precedence-climbing parser over a spanned token list."""

    def __init__(self, tokens: list[Token], log: logging.Logger | None = None) -> None:
        if not tokens or tokens[-1].kind != TokenKind.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0
        self.errors: list[ParseError] = []
        self.depth = 0
        self.log = log or logger

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        self.skip_whitespace()
        tok = self.current
        if tok.kind == kind:
            return self.advance()
        if tok.kind == TokenKind.EOF:
            raise UnexpectedEof(f"'{kind.value}'", tok.span)
        raise ExpectedToken(kind.value, tok)

    def skip_whitespace(self) -> None:
        while self.current.kind == TokenKind.WHITESPACE:
            self.advance()

    def has_whitespace_before(self) -> bool:
        return self.pos > 0 and self.tokens[self.pos - 1].kind == TokenKind.WHITESPACE

    def synchronize(self) -> None:
        """Skip past the next statement separator (or up to EOF)."""
        while self.current.kind != TokenKind.EOF:
            kind = self.advance().kind
            if kind in (TokenKind.SEMICOLON, TokenKind.NEWLINE):
                return

    # -- Statements --

    def parse_program(self) -> list[Expr]:
        """Parse every statement, recording errors instead of stopping."""
        exprs: list[Expr] = []

        while self.current.kind != TokenKind.EOF:
            if self.current.kind in _LAYOUT:
                self.advance()
                continue

            try:
                exprs.append(self.parse_statement())
            except ParseError as e:
                self.log.warning("Parse error: %s", e)
                self.errors.append(e)
                self.synchronize()
            except RecursionError:
                # Interpreter stack is smaller than MAX_NESTING_DEPTH needs
                e = NestingTooDeep(MAX_NESTING_DEPTH, self.current.span)
                self.log.warning("Parse error: %s", e)
                self.errors.append(e)
                self.synchronize()

        self.log.debug("Parsed %d statements, %d errors", len(exprs), len(self.errors))
        return exprs

    def parse_statement(self) -> Expr:
        """One expression followed by a statement boundary."""
        expr = self.parse_expression(Precedence.LOWEST)
        self.skip_whitespace()
        if self.current.kind not in _BOUNDARY:
            raise UnexpectedToken(self.current)
        return expr

    # -- Expressions --

    def parse_expression(self, precedence: Precedence) -> Expr:
        if self.depth >= MAX_NESTING_DEPTH:
            self.skip_whitespace()
            raise NestingTooDeep(MAX_NESTING_DEPTH, self.current.span)
        self.depth += 1
        try:
            return self._parse_expression(precedence)
        finally:
            self.depth -= 1

    def _parse_expression(self, precedence: Precedence) -> Expr:
        left = self.parse_prefix()

        while True:
            self.skip_whitespace()
            tok = self.current

            if tok.kind in _BOUNDARY:
                break

            if tok.kind == TokenKind.EQUAL:
                if Precedence.ASSIGNMENT <= precedence:
                    break
                left = self._parse_assignment(left, tok)
                continue

            if tok.kind == TokenKind.LPAREN and not self.has_whitespace_before():
                # Calls bind at CALL precedence, above every operator
                callee_token = self.tokens[self.pos - 1]
                if isinstance(left, Identifier) and callee_token.kind == TokenKind.IDENT:
                    left = self._parse_call(left)
                    continue
                # (a)(b) or 2(a)
                if Precedence.PRODUCT <= precedence:
                    break
                left = self._implicit_product(left)
                continue

            if self._is_implicit_multiplication(tok):
                if Precedence.PRODUCT <= precedence:
                    break
                left = self._implicit_product(left)
                continue

            infix = _INFIX.get(tok.kind)
            if infix is None:
                break
            op_prec, op = infix
            if op_prec < precedence or (
                op_prec == precedence and tok.kind not in _RIGHT_ASSOCIATIVE
            ):
                break

            self.advance()
            right = self.parse_expression(op_prec)
            left = BinaryExpr(op=op, left=left, right=right)

        return left

    def parse_prefix(self) -> Expr:
        """number | identifier | ('+'|'-') operand | '(' expr ')'"""
        self.skip_whitespace()
        tok = self.current

        if tok.kind == TokenKind.NUMBER:
            self.advance()
            return NumberLiteral(value=tok.value)

        if tok.kind == TokenKind.IDENT:
            self.advance()
            return Identifier(name=tok.value)

        if tok.kind in _PREFIX:
            self.advance()
            operand = self.parse_expression(Precedence.PREFIX)
            return UnaryExpr(op=_PREFIX[tok.kind], operand=operand)

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expression(Precedence.LOWEST)
            self.expect(TokenKind.RPAREN)
            return expr

        if tok.kind == TokenKind.EOF:
            raise UnexpectedEof("expression", tok.span)

        raise UnexpectedToken(tok)

    def _implicit_product(self, left: Expr) -> BinaryExpr:
        right = self.parse_expression(Precedence.PRODUCT)
        return BinaryExpr(op=BinaryOp.MUL, left=left, right=right)

    def _is_implicit_multiplication(self, tok: Token) -> bool:
        if tok.kind not in (TokenKind.NUMBER, TokenKind.IDENT):
            return False
        if self.pos == 0 or self.has_whitespace_before():
            return False
        return self.tokens[self.pos - 1].kind in _IMPLICIT_LEFT

    def _parse_call(self, callee: Expr) -> CallExpr:
        """callee '(' (expr (',' expr)*)? ')'"""
        self.expect(TokenKind.LPAREN)

        args: list[Expr] = []
        self.skip_whitespace()
        if self.current.kind != TokenKind.RPAREN:
            while True:
                args.append(self.parse_expression(Precedence.LOWEST))
                self.skip_whitespace()
                if self.current.kind != TokenKind.COMMA:
                    break
                self.advance()

        self.expect(TokenKind.RPAREN)
        return CallExpr(callee=callee, args=args)

    def _parse_assignment(self, left: Expr, equal: Token) -> Expr:
        """Turn ``name = value`` or ``name(params) = body`` into a binding."""
        if isinstance(left, CallExpr):
            return self._parse_function_def(left, equal)

        if isinstance(left, Identifier):
            self.advance()
            value = self.parse_expression(Precedence.ASSIGNMENT)
            return Assignment(target=left.name, value=value)

        raise InvalidAssignment(left, equal.span)

    def _parse_function_def(self, call: CallExpr, equal: Token) -> FunctionDef:
        if not isinstance(call.callee, Identifier):
            raise InvalidFunctionDefinition(
                f"'{call.callee}' is not a function name", equal.span
            )

        params: list[str] = []
        for arg in call.args:
            if not isinstance(arg, Identifier):
                raise InvalidFunctionParameter(arg, equal.span)
            if arg.name in params:
                raise InvalidFunctionDefinition(
                    f"duplicate parameter '{arg.name}'", equal.span
                )
            params.append(arg.name)

        self.advance()
        body = self.parse_expression(Precedence.ASSIGNMENT)
        return FunctionDef(name=call.callee.name, params=params, body=body)


def parse(tokens: list[Token], *, log: logging.Logger | None = None) -> list[Expr]:
    """Parse a token list into top-level expressions.

    Args:
        tokens: Spanned tokens ending in EOF, as produced by ``tokenize``.
        log: Optional logger for trace output.

    Returns:
        Top-level expressions in source order.

    Raises:
        ParseErrors: With every syntax error found, in encounter order.
    """
    parser = _Parser(tokens, log)
    exprs = parser.parse_program()
    if parser.errors:
        raise ParseErrors(parser.errors)
    return exprs


def parse_program(source: str, *, log: logging.Logger | None = None) -> list[Expr]:
    """Tokenize and parse a whole program.

    Raises:
        LexErrors: If tokenization fails.
        ParseErrors: If parsing fails.
    """
    return parse(tokenize(source, log=log), log=log)


def parse_expr(source: str) -> Expr:
    """Parse source holding exactly one statement into an AST.

    Args:
        source: Expression string (e.g., "2x + f(3)")

    Returns:
        Parsed expression AST.

    Raises:
        LexErrors: If tokenization fails.
        ParseErrors: If the statement is invalid or more than one is present.
    """
    parser = _Parser(tokenize(source))
    try:
        while parser.current.kind in _LAYOUT:
            parser.advance()
        expr = parser.parse_statement()
        while parser.current.kind in _LAYOUT:
            parser.advance()
        if parser.current.kind != TokenKind.EOF:
            raise UnexpectedToken(parser.current)
    except ParseError as e:
        raise ParseErrors([e]) from e
    return expr
