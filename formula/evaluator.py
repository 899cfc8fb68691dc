"""
Tree-walking evaluator for parsed formulas.

Values are numbers or booleans. Booleans used as numbers become 1.0/0.0 and
numbers used as booleans are true when non-zero. Function arguments are always
evaluated before the function is dispatched, which makes `if(c, a, b)` eager in
both branches; the `c ? a : b` operator only evaluates the branch it takes.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Union

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
from .errors import DivisionByZero, InvalidArgCount, UnknownFunction, UnknownVariable

# Anything that answers "what number is this name?": a mapping or a callable
# returning None for unknown names.
VariableLookup = Union[Mapping[str, float], Callable[[str], Optional[float]]]


@dataclass(frozen=True)
class Value:
    """Result of evaluating an expression."""

    raw: Union[float, bool]

    @classmethod
    def number(cls, n: float) -> "Value":
        return cls(float(n))

    @classmethod
    def boolean(cls, b: bool) -> "Value":
        return cls(bool(b))

    @property
    def is_boolean(self) -> bool:
        return isinstance(self.raw, bool)

    def as_number(self) -> float:
        if self.is_boolean:
            return 1.0 if self.raw else 0.0
        return self.raw

    def as_bool(self) -> bool:
        if self.is_boolean:
            return self.raw
        return self.raw != 0.0


@dataclass(frozen=True)
class FunctionInfo:
    """Display metadata for a built-in function."""

    name: str
    signature: str
    description: str
    arg_count: int


_FUNCTIONS = (
    FunctionInfo("min", "min(a, b)", "Returns the smaller of two values", 2),
    FunctionInfo("max", "max(a, b)", "Returns the larger of two values", 2),
    FunctionInfo("round", "round(x, n)", "Rounds x to n decimal places", 2),
    FunctionInfo("abs", "abs(x)", "Returns the absolute value of x", 1),
    FunctionInfo("sqrt", "sqrt(x)", "Returns the square root of x", 1),
    FunctionInfo("floor", "floor(x)", "Rounds x down to the nearest integer", 1),
    FunctionInfo("ceil", "ceil(x)", "Rounds x up to the nearest integer", 1),
    FunctionInfo("if", "if(cond, a, b)", "Returns a if cond is true, otherwise b", 3),
)

_ARITY = {info.name: info.arg_count for info in _FUNCTIONS}


def supported_functions() -> List[FunctionInfo]:
    """Built-in functions, in display order."""
    return list(_FUNCTIONS)


def _resolver(variables: VariableLookup) -> Callable[[str], Optional[float]]:
    if callable(variables):
        return variables
    return variables.get


def evaluate(expr: Expr, variables: VariableLookup) -> Value:
    """Evaluate `expr`, resolving variable names through `variables`."""
    return _evaluate(expr, _resolver(variables))


def _evaluate(expr: Expr, lookup: Callable[[str], Optional[float]]) -> Value:
    if isinstance(expr, Number):
        return Value.number(expr.value)
    if isinstance(expr, Boolean):
        return Value.boolean(expr.value)
    if isinstance(expr, Variable):
        value = lookup(expr.name)
        if value is None:
            raise UnknownVariable(expr.name)
        return Value.number(value)
    if isinstance(expr, Binary):
        # Fold the left spine in a loop; `1 + 1 + ... + 1` nests thousands deep
        chain = []
        node = expr
        while isinstance(node, Binary):
            chain.append(node)
            node = node.left
        result = _evaluate(node, lookup)
        for binary in reversed(chain):
            result = _binary(binary.op, result, _evaluate(binary.right, lookup))
        return result
    if isinstance(expr, Unary):
        operand = _evaluate(expr.operand, lookup)
        if expr.op is UnaryOp.NEG:
            return Value.number(-operand.as_number())
        return Value.boolean(not operand.as_bool())
    if isinstance(expr, FunctionCall):
        args = [_evaluate(arg, lookup) for arg in expr.args]
        return _call(expr.name, args)
    if isinstance(expr, Ternary):
        if _evaluate(expr.condition, lookup).as_bool():
            return _evaluate(expr.then_expr, lookup)
        return _evaluate(expr.else_expr, lookup)
    raise TypeError(f"Not a formula expression: {expr!r}")


def _binary(op: BinaryOp, left: Value, right: Value) -> Value:
    if op is BinaryOp.AND:
        return Value.boolean(left.as_bool() and right.as_bool())
    if op is BinaryOp.OR:
        return Value.boolean(left.as_bool() or right.as_bool())

    lhs = left.as_number()
    rhs = right.as_number()
    if op is BinaryOp.ADD:
        return Value.number(lhs + rhs)
    if op is BinaryOp.SUB:
        return Value.number(lhs - rhs)
    if op is BinaryOp.MUL:
        return Value.number(lhs * rhs)
    if op is BinaryOp.DIV:
        if rhs == 0.0:
            raise DivisionByZero()
        return Value.number(lhs / rhs)
    if op is BinaryOp.GT:
        return Value.boolean(lhs > rhs)
    if op is BinaryOp.LT:
        return Value.boolean(lhs < rhs)
    if op is BinaryOp.GTE:
        return Value.boolean(lhs >= rhs)
    if op is BinaryOp.LTE:
        return Value.boolean(lhs <= rhs)
    if op is BinaryOp.EQ:
        return Value.boolean(lhs == rhs)
    return Value.boolean(lhs != rhs)


def _round_half_away(x: float) -> float:
    if not math.isfinite(x):
        return x
    # No `+ 0.5`: that addition can itself round up
    t = math.trunc(x)
    if abs(x - t) >= 0.5:
        return t + math.copysign(1.0, x)
    return float(t)


def _nan_min(a: float, b: float) -> float:
    """min() that returns the other operand when one is NaN."""
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return min(a, b)


def _nan_max(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)


def _integral(fn: Callable[[float], int], x: float) -> float:
    # math.floor/ceil reject inf and nan; keep them as they are
    return float(fn(x)) if math.isfinite(x) else x


def _call(name: str, args: List[Value]) -> Value:
    key = name.lower()
    expected = _ARITY.get(key)
    if expected is None:
        raise UnknownFunction(name)
    if len(args) != expected:
        raise InvalidArgCount(key, expected, len(args))

    if key == "if":
        return args[1] if args[0].as_bool() else args[2]

    x = args[0].as_number()
    if key == "min":
        return Value.number(_nan_min(x, args[1].as_number()))
    if key == "max":
        return Value.number(_nan_max(x, args[1].as_number()))
    if key == "round":
        digits = _truncate_digits(args[1].as_number())
        factor = 10.0 ** digits
        return Value.number(_round_half_away(x * factor) / factor)
    if key == "abs":
        return Value.number(abs(x))
    if key == "sqrt":
        return Value.number(math.sqrt(x) if x >= 0.0 else math.nan)
    if key == "floor":
        return Value.number(_integral(math.floor, x))
    return Value.number(_integral(math.ceil, x))


def _truncate_digits(n: float) -> int:
    """Decimal places for round(): truncated toward zero, nan counts as 0."""
    if math.isnan(n):
        return 0
    if math.isinf(n):
        return 308 if n > 0 else -308
    return max(-308, min(308, int(n)))
