"""Error types raised while parsing and evaluating formulas."""


class FormulaError(Exception):
    """Base class for every formula parsing or evaluation failure."""


class EmptyExpression(FormulaError):
    def __init__(self):
        super().__init__("empty expression")


class ParseError(FormulaError):
    """Syntax error. `position` is the offset of the offending character."""

    def __init__(self, position: int, message: str):
        self.position = position
        self.message = message
        super().__init__(f"parse error at position {position}: {message}")


class UnknownVariable(FormulaError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown variable: {name}")


class UnknownFunction(FormulaError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown function: {name}")


class FormulaTypeError(FormulaError):
    """Reserved for coercions that cannot be performed."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"type error: {detail}")


class DivisionByZero(FormulaError):
    def __init__(self):
        super().__init__("division by zero")


class InvalidArgCount(FormulaError):
    def __init__(self, function: str, expected: int, got: int):
        self.function = function
        self.expected = expected
        self.got = got
        super().__init__(
            f"invalid argument count for {function}: expected {expected}, got {got}"
        )
