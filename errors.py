"""Error taxonomy shared by the calculation engines and stores.

Every failure the core raises is a ``CalculatorError``.  The concrete
classes also derive from the matching builtin so callers that only know
``ZeroDivisionError`` or ``ValueError`` still catch them.
"""
from __future__ import annotations


class CalculatorError(Exception):
    """Base class for all calculator failures shown to the user."""


class DivisionByZeroError(CalculatorError, ZeroDivisionError):
    """Raised when a division (or an equivalent formula) has a zero divisor."""

    def __init__(self, message: str = "Cannot divide by zero") -> None:
        super().__init__(message)


class DomainError(CalculatorError, ValueError):
    """Raised when an operand is outside a function's domain."""

    def __init__(self, operation: str, value: object, reason: str) -> None:
        self.operation = operation
        self.value = value
        super().__init__(f"{operation}({value}): {reason}")


class InvalidBaseError(CalculatorError, ValueError):
    """Raised for a radix other than 2, 8, 10 or 16."""

    def __init__(self, base: object) -> None:
        self.base = base
        super().__init__(f"Invalid base: {base!r}")


class InvalidDigitError(CalculatorError, ValueError):
    """Raised when input contains a digit outside the radix alphabet."""

    def __init__(self, value: str, base: object) -> None:
        self.value = value
        self.base = base
        super().__init__(f"Invalid digit in {value!r} for base {base}")


class EvaluationError(CalculatorError, ValueError):
    """Raised when an expression is malformed or not allowed."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid expression {expression!r}: {reason}")


class GraphRangeError(CalculatorError, ValueError):
    """Raised when a graph axis range is unusable."""


class StoreInvariantError(CalculatorError):
    """Raised when a store mutation would break a collection invariant."""

    def __init__(self, report) -> None:
        self.report = report
        super().__init__(report.summary())
