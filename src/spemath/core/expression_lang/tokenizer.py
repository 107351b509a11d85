"""
Tokenizer for the spemath expression language.

Converts source text into a sequence of spanned tokens. Whitespace and
newlines are kept as tokens because the parser uses them to tell implicit
multiplication and calls apart from separate operands.

Lexing never stops at the first fault: unexpected characters are skipped,
malformed numerals are consumed whole, and every diagnostic is reported
together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from spemath.core.errors import (
    InvalidNumberFormat,
    LexError,
    LexErrors,
    Span,
    UnexpectedCharacter,
)

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    """Token types. Values double as human-readable descriptions."""

    # Literals and names
    NUMBER = "number"
    IDENT = "identifier"

    # Operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    CARET = "^"
    EQUAL = "="
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    BANG = "!"

    # Punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    SEMICOLON = ";"

    # Layout
    WHITESPACE = "whitespace"
    NEWLINE = "newline"

    # End of input
    EOF = "end of input"


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        kind: Type of token
        value: Float for numbers, name for identifiers, lexeme otherwise
        span: Where the token starts
    """

    kind: TokenKind
    value: float | str
    span: Span

    def describe(self) -> str:
        """Short description for diagnostics."""
        if self.kind == TokenKind.NUMBER:
            return f"number {self.value}"
        if self.kind == TokenKind.IDENT:
            return f"identifier '{self.value}'"
        if self.kind in (TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.EOF):
            return self.kind.value
        return f"'{self.kind.value}'"

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.value!r}, {self.span.line}:{self.span.column})"


_SINGLE_CHAR: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "%": TokenKind.PERCENT,
    "^": TokenKind.CARET,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

# Operators that take a trailing "=" to form a two-character operator
_TWO_CHAR: dict[str, tuple[TokenKind, TokenKind]] = {
    "=": (TokenKind.EQUAL, TokenKind.EQ),
    "!": (TokenKind.BANG, TokenKind.NE),
    "<": (TokenKind.LT, TokenKind.LE),
    ">": (TokenKind.GT, TokenKind.GE),
}

# Characters swallowed after a numeral has already gone bad
_NUMBER_TAIL = frozenset("0123456789.eE+-")


def _is_ident_start(c: str) -> bool:
    return c == "_" or ("a" <= c <= "z") or ("A" <= c <= "Z")


def _is_ident_char(c: str) -> bool:
    return _is_ident_start(c) or _is_digit(c)


def _is_digit(c: str | None) -> bool:
    return c is not None and "0" <= c <= "9"


class Lexer:
    """
    Lexer for spemath source.

    Tokens accumulate on :attr:`tokens` and diagnostics on :attr:`errors`.
    """

    def __init__(self, text: str, *, log: logging.Logger | None = None):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            log: Logger for trace output (defaults to the module logger)
        """
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []
        self.errors: list[LexError] = []
        self.log = log or logger

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def span(self) -> Span:
        return Span(self.line, self.column, self.pos)

    def emit(self, kind: TokenKind, value: float | str, span: Span) -> None:
        self.tokens.append(Token(kind, value, span))

    def skip_line_comment(self) -> None:
        """Skip ``//`` comment up to (not including) the newline."""
        while self.current_char() is not None and self.current_char() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Skip ``/* ... */``. Not nested; runs to end of input if unterminated."""
        self.advance()
        self.advance()
        while self.current_char() is not None:
            if self.current_char() == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                return
            self.advance()

    def read_identifier(self) -> str:
        """Read an identifier."""
        start = self.pos
        while (c := self.current_char()) is not None and _is_ident_char(c):
            self.advance()
        return self.text[start : self.pos]

    def read_number(self, span: Span) -> float | None:
        """
        Read a numeric literal: digits, at most one ``.``, and an optional
        exponent with optional sign and at least one digit.

        Returns None after recording an InvalidNumberFormat.
        """
        start = self.pos
        has_dot = False
        has_exponent = False

        while (c := self.current_char()) is not None:
            if _is_digit(c):
                self.advance()
            elif c == ".":
                if has_dot or has_exponent:
                    return self._invalid_number(start, span)
                has_dot = True
                self.advance()
            elif c in "eE":
                if has_exponent:
                    return self._invalid_number(start, span)
                has_exponent = True
                self.advance()
                if self.current_char() in ("+", "-"):
                    self.advance()
                if not _is_digit(self.current_char()):
                    return self._invalid_number(start, span)
            else:
                break

        literal = self.text[start : self.pos]
        try:
            return float(literal)
        except ValueError:
            # A lone "." or similar
            return self._invalid_number(start, span)

    def _invalid_number(self, start: int, span: Span) -> None:
        """Consume the malformed tail and record the whole literal."""
        while (c := self.current_char()) is not None and c in _NUMBER_TAIL:
            self.advance()
        literal = self.text[start : self.pos]
        self.log.warning("Invalid number format %r at %s", literal, span.format())
        self.errors.append(InvalidNumberFormat(literal, span))
        return None

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending in exactly one EOF. Check :attr:`errors`
            for diagnostics; tokens of faulty spans are omitted.
        """
        self.log.debug("Tokenizing %d characters", len(self.text))

        while (ch := self.current_char()) is not None:
            span = self.span()

            if ch == " " or ch == "\t":
                self.emit(TokenKind.WHITESPACE, ch, span)
                self.advance()

            elif ch == "\n":
                self.emit(TokenKind.NEWLINE, ch, span)
                self.advance()

            elif ch.isspace():
                self.advance()

            elif _is_digit(ch) or ch == ".":
                number = self.read_number(span)
                if number is not None:
                    self.emit(TokenKind.NUMBER, number, span)

            elif _is_ident_start(ch):
                self.emit(TokenKind.IDENT, self.read_identifier(), span)

            elif ch == "/":
                if self.peek_char() == "/":
                    self.skip_line_comment()
                elif self.peek_char() == "*":
                    self.skip_block_comment()
                else:
                    self.emit(TokenKind.SLASH, ch, span)
                    self.advance()

            elif ch in _TWO_CHAR:
                single, double = _TWO_CHAR[ch]
                if self.peek_char() == "=":
                    self.advance()
                    self.advance()
                    self.emit(double, double.value, span)
                else:
                    self.advance()
                    self.emit(single, single.value, span)

            elif ch in _SINGLE_CHAR:
                self.emit(_SINGLE_CHAR[ch], ch, span)
                self.advance()

            else:
                self.log.warning("Unexpected character %r at %s", ch, span.format())
                self.errors.append(UnexpectedCharacter(ch, span))
                self.advance()

        self.emit(TokenKind.EOF, "", self.span())
        self.log.debug("Produced %d tokens, %d errors", len(self.tokens), len(self.errors))
        return self.tokens


def tokenize(source: str, *, log: logging.Logger | None = None) -> list[Token]:
    """
    Tokenize source text into spanned tokens.

    Args:
        source: Program text
        log: Optional logger for trace output

    Returns:
        List of tokens, terminated by a single EOF token.

    Raises:
        LexErrors: If any character or numeral could not be tokenized.
    """
    lexer = Lexer(source, log=log)
    tokens = lexer.tokenize()
    if lexer.errors:
        raise LexErrors(lexer.errors)
    return tokens
