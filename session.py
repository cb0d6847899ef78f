"""Calculator session: the owner of every engine and store.

One ``CalculatorSession`` stands behind one calculator window.  It holds an
engine per mode, the history and memory stores and the storage adapter,
and records a history entry whenever a mode completes a calculation.

Usage::

    session = CalculatorSession(Settings.from_env())
    session.press_digit("7")
    session.press_operator("*")
    session.press_digit("6")
    session.press_equals()   # "42", recorded in session.history
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import financial
from arithmetic import ArithmeticEngine, format_number
from config import Settings, setup_logging
from errors import CalculatorError
from graphing import Graph, GraphData
from models import CalculatorMode, FinancialFormula, GraphFunction, NumberBase, Theme
from programmer import ProgrammerEngine
from scientific import ScientificEngine
from storage import StorageAdapter
from store import HistoryStore, MemoryStore

logger = logging.getLogger("calcsuite.session")

UNARY_OPERATIONS = ("percent", "sqrt", "square", "negate")
BINARY_BITWISE = ("AND", "OR", "XOR")
UNARY_BITWISE = ("NOT", "LSH", "RSH", "ROL", "ROR")


class CalculatorSession:
    """Engines, stores and persisted preferences for one user session."""

    def __init__(
        self,
        settings: Settings | None = None,
        storage: StorageAdapter | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        setup_logging(self.settings.log_level)
        self.storage = storage if storage is not None else StorageAdapter.from_settings(self.settings)

        self.history = HistoryStore(self.storage, limit=self.settings.history_limit)
        self.memory = MemoryStore(self.storage, max_slots=self.settings.memory_slots)

        self.arithmetic = ArithmeticEngine()
        self.scientific = ScientificEngine(max_length=self.settings.max_expression_length)
        self.programmer = ProgrammerEngine.for_word_size(self.settings.word_size)
        self.graph = Graph()

        self.mode = self.storage.get_last_mode()
        self.theme = self.storage.get_theme()

    # -- preferences ---------------------------------------------------------

    def switch_mode(self, mode: CalculatorMode | str) -> CalculatorMode:
        self.mode = CalculatorMode(mode)
        self.storage.set_last_mode(self.mode)
        return self.mode

    def set_theme(self, theme: Theme | str) -> Theme:
        self.theme = Theme(theme)
        self.storage.set_theme(self.theme)
        return self.theme

    def toggle_theme(self) -> Theme:
        return self.set_theme(Theme.LIGHT if self.theme == Theme.DARK else Theme.DARK)

    # -- basic mode ----------------------------------------------------------

    @contextmanager
    def _arithmetic_guard(self, action: str) -> Iterator[None]:
        """Clear the engine when an operation fails, then re-raise."""
        try:
            yield
        except CalculatorError as e:
            logger.info("%s failed (%s); clearing engine", action, e)
            self.arithmetic.clear()
            raise

    @property
    def display(self) -> str:
        return self.arithmetic.get_current_value()

    def press_digit(self, digit: str) -> str:
        return self.arithmetic.input_digit(digit)

    def press_decimal(self) -> str:
        return self.arithmetic.input_decimal()

    def press_backspace(self) -> str:
        return self.arithmetic.backspace()

    def press_clear(self) -> str:
        return self.arithmetic.clear()

    def press_clear_entry(self) -> str:
        return self.arithmetic.clear_entry()

    def press_operator(self, operator: str) -> str:
        with self._arithmetic_guard(f"operator {operator}"):
            return self.arithmetic.perform_operation(operator)

    def press_equals(self) -> str:
        """Complete the pending operation and record it."""
        expression = self.arithmetic.get_expression()
        pending = self.arithmetic.operator is not None
        with self._arithmetic_guard("equals"):
            result = self.arithmetic.perform_operation("=")
        if pending:
            self.history.add_entry(expression, result, CalculatorMode.BASIC)
        return result

    def press_unary(self, operation: str) -> str:
        handlers = {
            "percent": self.arithmetic.percentage,
            "sqrt": self.arithmetic.square_root,
            "square": self.arithmetic.square,
            "negate": self.arithmetic.negate,
        }
        try:
            handler = handlers[operation]
        except KeyError:
            raise ValueError(f"Unknown unary operation: {operation!r}") from None
        with self._arithmetic_guard(operation):
            return handler()

    # -- memory --------------------------------------------------------------

    def memory_add(self, slot: int | None = None) -> bool:
        return self.memory.add(float(self.display), slot)

    def memory_subtract(self, slot: int | None = None) -> bool:
        return self.memory.subtract(float(self.display), slot)

    def memory_store(self, slot: int | None = None) -> bool:
        return self.memory.store(float(self.display), slot)

    def memory_recall(self, slot: int | None = None) -> str:
        return self.arithmetic.enter_value(self.memory.recall(slot))

    def memory_clear(self, slot: int | None = None) -> None:
        self.memory.clear(slot)

    # -- scientific mode -----------------------------------------------------

    def evaluate_expression(self, expression: str) -> str:
        result = format_number(self.scientific.evaluate(expression))
        self.history.add_entry(expression, result, CalculatorMode.SCIENTIFIC)
        return result

    # -- programmer mode -----------------------------------------------------

    def convert_base(
        self,
        value: str,
        from_base: NumberBase | str,
        to_base: NumberBase | str,
    ) -> str:
        return self.programmer.convert_base(value, from_base, to_base)

    def bitwise(
        self,
        operation: str,
        value: str,
        base: NumberBase | str = NumberBase.DECIMAL,
        operand: str | None = None,
        positions: int = 1,
    ) -> str:
        """Apply a keypad bitwise operation to digit strings in ``base``."""
        op = operation.upper()
        engine = self.programmer
        a = engine.parse(value, base)

        if op in BINARY_BITWISE:
            if operand is None:
                raise ValueError(f"{op} needs a second operand")
            b = engine.parse(operand, base)
            result = {
                "AND": engine.bitwise_and,
                "OR": engine.bitwise_or,
                "XOR": engine.bitwise_xor,
            }[op](a, b)
            expression = f"{value} {op} {operand}"
        elif op in UNARY_BITWISE:
            result = {
                "NOT": lambda v: engine.bitwise_not(v),
                "LSH": lambda v: engine.left_shift(v, positions),
                "RSH": lambda v: engine.right_shift(v, positions),
                "ROL": lambda v: engine.rotate_left(v, positions),
                "ROR": lambda v: engine.rotate_right(v, positions),
            }[op](a)
            expression = f"{value} {op}"
        else:
            raise ValueError(f"Unknown bitwise operation: {operation!r}")

        rendered = engine.format(result, base)
        self.history.add_entry(expression, rendered, CalculatorMode.PROGRAMMER)
        return rendered

    # -- graphing mode -------------------------------------------------------

    def add_graph_function(self, expression: str) -> GraphFunction:
        function = self.graph.add_function(expression)
        self.history.add_entry(
            f"f(x) = {function.expression}",
            "Function added to graph",
            CalculatorMode.GRAPHING,
        )
        return function

    def plot(self) -> GraphData:
        return self.graph.sample()

    # -- financial mode ------------------------------------------------------

    def calculate_financial(self, formula: FinancialFormula | str, **inputs: object) -> float:
        value = financial.calculate(formula, **inputs)
        self.history.add_entry(
            financial.describe(formula, inputs),
            financial.format_result(formula, value),
            CalculatorMode.FINANCIAL,
        )
        return value
