"""
Abstract syntax tree for formula expressions.

Nodes are frozen dataclasses; a parsed tree is immutable and can be shared
freely between evaluations.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class BinaryOp(Enum):
    """Binary operators, valued by their source symbol."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    EQ = "=="
    NEQ = "!="
    AND = "and"
    OR = "or"


class UnaryOp(Enum):
    NEG = "-"
    NOT = "not"


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Binary:
    op: BinaryOp
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: "Expr"


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: Tuple["Expr", ...] = ()


@dataclass(frozen=True)
class Ternary:
    condition: "Expr"
    then_expr: "Expr"
    else_expr: "Expr"


Expr = Union[Number, Boolean, Variable, Binary, Unary, FunctionCall, Ternary]


def iter_variables(expr: Expr):
    """Yield every variable name referenced in `expr`, depth first, left to right.

    Walks with an explicit stack: long operator chains such as `a + a + ... + a`
    parse into left-leaning trees deeper than the interpreter's recursion limit.
    """
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, Variable):
            yield node.name
        elif isinstance(node, Binary):
            stack.append(node.right)
            stack.append(node.left)
        elif isinstance(node, Unary):
            stack.append(node.operand)
        elif isinstance(node, FunctionCall):
            stack.extend(reversed(node.args))
        elif isinstance(node, Ternary):
            stack.extend((node.else_expr, node.then_expr, node.condition))
