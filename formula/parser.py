"""
Recursive descent parser for formula expressions.

Grammar, lowest to highest precedence:

    ternary        := or ( "?" ternary ":" ternary )?
    or             := and ( "or" and )*
    and            := comparison ( "and" comparison )*
    comparison     := additive ( (">=" | "<=" | "==" | "!=" | ">" | "<") additive )*
    additive       := multiplicative ( ("+" | "-") multiplicative )*
    multiplicative := unary ( ("*" | "/") unary )*
    unary          := ("-" | "not") unary | primary
    primary        := "(" ternary ")" | boolean | call | number | identifier
    call           := identifier "(" ( ternary ( "," ternary )* )? ")"

Whitespace is insignificant between tokens. Keywords (`and`, `or`, `not`,
`true`, `false`) are case-insensitive and must end at an identifier boundary,
so `notes` or `order` are plain variables.
"""

import re

from .ast import (
    Binary,
    BinaryOp,
    Boolean,
    Expr,
    FunctionCall,
    Number,
    Ternary,
    Unary,
    UnaryOp,
    Variable,
)
from .errors import EmptyExpression, ParseError

_IDENT_END = r"(?![A-Za-z0-9_])"

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_BOOLEAN = re.compile(r"(true|false)" + _IDENT_END, re.IGNORECASE)
_KEYWORDS = {
    word: re.compile(word + _IDENT_END, re.IGNORECASE) for word in ("and", "or", "not")
}

_COMPARISON_OPS = re.compile(r">=|<=|==|!=|>|<")
_ADDITIVE_OPS = re.compile(r"[+-]")
_MULTIPLICATIVE_OPS = re.compile(r"[*/]")


class _Parser:
    """Single-use cursor over one (already trimmed) formula string."""

    def __init__(self, text: str):
        self._text = text
        self._pos = 0

    # -- cursor helpers -----------------------------------------------------

    def _skip_ws(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos].isspace():
            self._pos += 1

    def _peek(self) -> str:
        self._skip_ws()
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _match(self, pattern: "re.Pattern"):
        """Consume `pattern` at the cursor (after whitespace); return the text or None."""
        self._skip_ws()
        m = pattern.match(self._text, self._pos)
        if m is None:
            return None
        self._pos = m.end()
        return m.group(0)

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            raise self._error(f"expected '{char}'")
        self._pos += 1

    def _error(self, message: str) -> ParseError:
        # Positions are reported as byte offsets into the trimmed input.
        offset = len(self._text[: self._pos].encode("utf-8"))
        return ParseError(offset, message)

    # -- grammar --------------------------------------------------------------

    def parse(self) -> Expr:
        try:
            expr = self._ternary()
        except RecursionError:
            raise self._error("expression nested too deeply") from None
        self._skip_ws()
        if self._pos < len(self._text):
            raise self._error(f"unexpected characters: '{self._text[self._pos:]}'")
        return expr

    def _ternary(self) -> Expr:
        condition = self._or()
        if self._peek() != "?":
            return condition
        self._pos += 1
        then_expr = self._ternary()
        self._expect(":")
        else_expr = self._ternary()
        return Ternary(condition, then_expr, else_expr)

    def _or(self) -> Expr:
        left = self._and()
        while self._match(_KEYWORDS["or"]):
            left = Binary(BinaryOp.OR, left, self._and())
        return left

    def _and(self) -> Expr:
        left = self._comparison()
        while self._match(_KEYWORDS["and"]):
            left = Binary(BinaryOp.AND, left, self._comparison())
        return left

    def _comparison(self) -> Expr:
        left = self._additive()
        while True:
            symbol = self._match(_COMPARISON_OPS)
            if symbol is None:
                return left
            left = Binary(BinaryOp(symbol), left, self._additive())

    def _additive(self) -> Expr:
        left = self._multiplicative()
        while True:
            symbol = self._match(_ADDITIVE_OPS)
            if symbol is None:
                return left
            left = Binary(BinaryOp(symbol), left, self._multiplicative())

    def _multiplicative(self) -> Expr:
        left = self._unary()
        while True:
            symbol = self._match(_MULTIPLICATIVE_OPS)
            if symbol is None:
                return left
            left = Binary(BinaryOp(symbol), left, self._unary())

    def _unary(self) -> Expr:
        if self._peek() == "-":
            self._pos += 1
            return Unary(UnaryOp.NEG, self._unary())
        if self._match(_KEYWORDS["not"]):
            return Unary(UnaryOp.NOT, self._unary())
        return self._primary()

    def _primary(self) -> Expr:
        char = self._peek()
        if not char:
            raise self._error("unexpected end of expression")

        if char == "(":
            self._pos += 1
            expr = self._ternary()
            self._expect(")")
            return expr

        literal = self._match(_BOOLEAN)
        if literal is not None:
            return Boolean(literal.lower() == "true")

        name = self._match(_IDENTIFIER)
        if name is not None:
            after_name = self._pos
            if self._peek() == "(":
                self._pos += 1
                return FunctionCall(name, self._arguments())
            self._pos = after_name
            return Variable(name)

        number = self._match(_NUMBER)
        if number is not None:
            return Number(float(number))

        raise self._error(f"unexpected character '{char}'")

    def _arguments(self):
        args = []
        if self._peek() == ")":
            self._pos += 1
            return tuple(args)
        while True:
            args.append(self._ternary())
            char = self._peek()
            if char == ",":
                self._pos += 1
            elif char == ")":
                self._pos += 1
                return tuple(args)
            else:
                raise self._error("expected ',' or ')' in argument list")


def parse(text: str) -> Expr:
    """Parse a formula into an AST.

    Raises:
        EmptyExpression: the text is blank.
        ParseError: the text is not a complete, well-formed expression.
    """
    text = text.strip()
    if not text:
        raise EmptyExpression()
    return _Parser(text).parse()
