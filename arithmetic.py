"""Basic-mode arithmetic engine.

A single-accumulator state machine: the value being edited, the left
operand of a pending operation, the pending operator and an "awaiting new
entry" flag.  Operators fold strictly left to right with no precedence, so
``5 + 3 * 2 =`` gives 16.

Only division by zero and the square root of a negative number raise.
After either, the engine's pending state is unspecified and the owner must
call ``clear()`` before continuing.
"""
from __future__ import annotations

import math

import numpy as np

from errors import DivisionByZeroError, DomainError

OPERATORS = ("+", "-", "*", "/", "%")
EQUALS = "="

# Display glyphs accepted as aliases.
_ALIASES = {"×": "*", "÷": "/", "−": "-"}

# Displays that are not editable numbers; typing replaces them.
_NON_NUMERIC = ("NaN", "Infinity", "-Infinity")


def format_number(value: float) -> str:
    """Render a result the way the display shows it.

    Finite values are written out positionally with the fewest digits that
    round-trip, so the display never shows an exponent.  Integral values
    drop the fractional part and ``-0`` renders as ``"0"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    return np.format_float_positional(float(value), trim="-")


def _parse(text: str) -> float:
    return float(text) if text else 0.0


def calculate(a: float, b: float, operator: str) -> float:
    """Apply one binary operator.

    Unknown operators return ``b`` unchanged.
    """
    op = _ALIASES.get(operator, operator)
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        if b == 0:
            raise DivisionByZeroError()
        return a / b
    if op == "%":
        # Remainder by zero leaves the dividend.
        if b == 0:
            return a
        return math.fmod(a, b)
    return b


class ArithmeticEngine:
    """Calculator state machine behind the basic mode keypad."""

    def __init__(self) -> None:
        self.current_value: str = "0"
        self.previous_value: str = ""
        self.operator: str | None = None
        self.awaiting_new_entry: bool = False

    # -- entry ---------------------------------------------------------------

    def input_digit(self, digit: str) -> str:
        if len(digit) != 1 or not digit.isdigit():
            raise ValueError(f"Expected a single digit, got {digit!r}")
        if self.awaiting_new_entry or self.current_value in _NON_NUMERIC:
            self.current_value = digit
            self.awaiting_new_entry = False
        elif self.current_value == "0":
            self.current_value = digit
        else:
            self.current_value += digit
        return self.current_value

    def input_decimal(self) -> str:
        if self.awaiting_new_entry or self.current_value in _NON_NUMERIC:
            self.current_value = "0."
            self.awaiting_new_entry = False
        elif "." not in self.current_value:
            self.current_value += "."
        return self.current_value

    def enter_value(self, value: float | str) -> str:
        """Replace the current entry with a whole number (recall, paste)."""
        self.current_value = format_number(float(value))
        self.awaiting_new_entry = False
        return self.current_value

    def backspace(self) -> str:
        """Drop the last typed character of the current entry."""
        if self.awaiting_new_entry:
            return self.current_value
        if self.current_value in _NON_NUMERIC:
            self.current_value = "0"
            return self.current_value
        trimmed = self.current_value[:-1]
        self.current_value = trimmed if trimmed not in ("", "-") else "0"
        return self.current_value

    def clear(self) -> str:
        self.current_value = "0"
        self.previous_value = ""
        self.operator = None
        self.awaiting_new_entry = False
        return self.current_value

    def clear_entry(self) -> str:
        self.current_value = "0"
        return self.current_value

    # -- binary operations ---------------------------------------------------

    def perform_operation(self, next_operator: str) -> str:
        """Fold any pending operation, then queue ``next_operator``.

        ``"="`` folds without queueing a new operator.
        """
        if not self.previous_value or self.operator is None:
            self.previous_value = self.current_value
        else:
            result = calculate(
                _parse(self.previous_value),
                _parse(self.current_value),
                self.operator,
            )
            self.current_value = format_number(result)
            self.previous_value = self.current_value

        self.awaiting_new_entry = True
        self.operator = None if next_operator == EQUALS else next_operator
        return self.current_value

    def calculate(self, a: float, b: float, operator: str) -> float:
        return calculate(a, b, operator)

    # -- unary transforms ----------------------------------------------------
    # These rewrite the current value only; operator and flag are untouched.

    def percentage(self) -> str:
        self.current_value = format_number(_parse(self.current_value) / 100)
        return self.current_value

    def square_root(self) -> str:
        value = _parse(self.current_value)
        if value < 0:
            raise DomainError("sqrt", format_number(value), "negative operand")
        self.current_value = format_number(math.sqrt(value))
        return self.current_value

    def square(self) -> str:
        value = _parse(self.current_value)
        self.current_value = format_number(value * value)
        return self.current_value

    def negate(self) -> str:
        self.current_value = format_number(-_parse(self.current_value))
        return self.current_value

    # -- queries -------------------------------------------------------------

    def get_current_value(self) -> str:
        return self.current_value

    def get_expression(self) -> str:
        if self.operator and self.previous_value:
            return f"{self.previous_value} {self.operator} {self.current_value}"
        return self.current_value
