"""
spemath expression language.

Tokenizer, parser and evaluator for the arithmetic DSL.

Usage:
    from spemath.core.expression_lang import Evaluator, parse_program

    evaluator = Evaluator()
    for expr in parse_program("x = 4\n2x + 1"):
        result = evaluator.evaluate(expr)
    # result == NumberValue(value=9.0)
"""

from spemath.core.expression_lang.environment import Environment
from spemath.core.expression_lang.evaluator import Evaluator, evaluate
from spemath.core.expression_lang.parser import parse, parse_expr, parse_program
from spemath.core.expression_lang.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "Environment",
    "Evaluator",
    "Token",
    "TokenKind",
    "evaluate",
    "parse",
    "parse_expr",
    "parse_program",
    "tokenize",
]
