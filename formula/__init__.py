"""
Formula engine for user-defined calculated fields.

Supported grammar:
    - Arithmetic: + - * / ( )
    - Comparison: > < >= <= == !=
    - Boolean: and or not, true false
    - Ternary: cond ? a : b
    - Functions: min(a,b), max(a,b), round(x,n), abs(x), sqrt(x), floor(x),
      ceil(x), if(cond,a,b)

Example:
    >>> compute("deco_time_min / bottom_time_min",
    ...         {"deco_time_min": 10.0, "bottom_time_min": 50.0})
    0.2
"""

from typing import Iterable

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
    iter_variables,
)
from .errors import (
    DivisionByZero,
    EmptyExpression,
    FormulaError,
    FormulaTypeError,
    InvalidArgCount,
    ParseError,
    UnknownFunction,
    UnknownVariable,
)
from .evaluator import FunctionInfo, Value, VariableLookup, evaluate, supported_functions
from .parser import parse


def validate(expression: str) -> None:
    """Check that `expression` parses. Variables are not checked."""
    parse(expression)


def validate_with_variables(expression: str, available: Iterable[str]) -> None:
    """Check that `expression` parses and only references names in `available`.

    Function names and argument counts are only checked at evaluation time.
    """
    ast = parse(expression)
    names = set(available)
    for name in iter_variables(ast):
        if name not in names:
            raise UnknownVariable(name)


def compute(expression: str, variables: VariableLookup) -> float:
    """Parse and evaluate `expression`, returning a number (booleans become 1.0/0.0)."""
    return evaluate(parse(expression), variables).as_number()


__all__ = [
    "Binary",
    "BinaryOp",
    "Boolean",
    "DivisionByZero",
    "EmptyExpression",
    "Expr",
    "FormulaError",
    "FormulaTypeError",
    "FunctionCall",
    "FunctionInfo",
    "InvalidArgCount",
    "Number",
    "ParseError",
    "Ternary",
    "Unary",
    "UnaryOp",
    "UnknownFunction",
    "UnknownVariable",
    "Value",
    "Variable",
    "VariableLookup",
    "compute",
    "evaluate",
    "iter_variables",
    "parse",
    "supported_functions",
    "validate",
    "validate_with_variables",
]
