"""End-to-end tests through CalculatorSession."""
from __future__ import annotations

import pytest

from config import Settings
from errors import DivisionByZeroError, DomainError, EvaluationError, InvalidDigitError
from models import CalculatorMode, FinancialFormula, Theme
from session import CalculatorSession


def press(session: CalculatorSession, keys: str) -> str:
    """Press a sequence of basic-mode keys, e.g. ``"12*3="``."""
    result = session.display
    for key in keys:
        if key.isdigit():
            result = session.press_digit(key)
        elif key == ".":
            result = session.press_decimal()
        elif key == "=":
            result = session.press_equals()
        else:
            result = session.press_operator(key)
    return result


class TestBasicMode:

    def test_equals_records_history(self, session):
        assert press(session, "12*3=") == "36"
        entry = session.history.entries[0]
        assert (entry.expression, entry.result, entry.mode) == ("12 * 3", "36", CalculatorMode.BASIC)

    def test_equals_without_operation_not_recorded(self, session):
        assert press(session, "5=") == "5"
        assert len(session.history) == 0

    def test_chained_operations_record_last_step(self, session):
        assert press(session, "5+3*2=") == "16"
        assert session.history.entries[0].expression == "8 * 2"

    def test_division_by_zero_clears(self, session):
        press(session, "10/0")
        with pytest.raises(DivisionByZeroError):
            session.press_equals()
        assert session.display == "0"
        assert session.arithmetic.operator is None
        assert len(session.history) == 0

    def test_domain_error_clears(self, session):
        press(session, "5")
        session.press_unary("negate")
        with pytest.raises(DomainError):
            session.press_unary("sqrt")
        assert session.display == "0"

    def test_unary_operations(self, session):
        press(session, "50")
        assert session.press_unary("percent") == "0.5"
        session.press_clear()
        press(session, "12")
        assert session.press_unary("square") == "144"

    def test_small_result_stays_positional(self, session):
        assert press(session, "0.0001") == "0.0001"
        assert session.press_unary("percent") == "0.000001"
        assert press(session, ".") == "0.000001"
        result = press(session, "+2=")
        assert "e" not in result
        assert "e" not in session.history.entries[0].expression

    def test_typing_over_infinity(self, session):
        press(session, "1" + "0" * 200)
        assert session.press_unary("square") == "Infinity"
        assert press(session, "7+1=") == "8"

    def test_unknown_unary(self, session):
        with pytest.raises(ValueError):
            session.press_unary("cube")

    def test_editing_keys(self, session):
        press(session, "123")
        assert session.press_backspace() == "12"
        assert session.press_clear_entry() == "0"
        assert session.press_clear() == "0"


class TestMemory:

    def test_store_and_recall(self, session):
        press(session, "5")
        assert session.memory_store() is True
        session.press_clear()
        assert session.memory_recall() == "5"

    def test_add_and_subtract(self, session):
        press(session, "5")
        session.memory_store()
        session.memory_add()
        session.memory_subtract()
        session.memory_add()
        assert session.memory.recall() == 10

    def test_recall_feeds_pending_operation(self, session):
        press(session, "4")
        session.memory_store()
        session.press_clear()
        press(session, "3+")
        session.memory_recall()
        assert session.press_equals() == "7"

    def test_clear(self, session):
        press(session, "5")
        session.memory_store()
        session.memory_clear()
        assert session.memory.has_memory is False


class TestScientificMode:

    def test_evaluate_records_history(self, session):
        assert session.evaluate_expression("2^10") == "1024"
        entry = session.history.entries[0]
        assert (entry.expression, entry.result, entry.mode) == ("2^10", "1024", CalculatorMode.SCIENTIFIC)

    def test_degrees_by_default(self, session):
        assert session.evaluate_expression("sin(90)") == "1"

    def test_tower_of_powers_is_infinite(self, session):
        assert session.evaluate_expression("9^9^9^9") == "Infinity"
        assert session.history.entries[0].result == "Infinity"

    def test_failure_not_recorded(self, session):
        with pytest.raises(EvaluationError):
            session.evaluate_expression("1/0")
        assert len(session.history) == 0


class TestProgrammerMode:

    def test_binary_operation(self, session):
        assert session.bitwise("and", "12", operand="10") == "8"
        entry = session.history.entries[0]
        assert (entry.expression, entry.result, entry.mode) == ("12 AND 10", "8", CalculatorMode.PROGRAMMER)

    def test_unary_operation_in_hex(self, session):
        assert session.bitwise("NOT", "0", base="hexadecimal") == "-1"
        assert session.history.entries[0].expression == "0 NOT"

    def test_shift_positions(self, session):
        assert session.bitwise("LSH", "1", positions=4) == "16"
        assert session.bitwise("ROR", "1", base="binary") == "1" + "0" * 31

    def test_binary_operation_needs_operand(self, session):
        with pytest.raises(ValueError):
            session.bitwise("XOR", "1")

    def test_unknown_operation(self, session):
        with pytest.raises(ValueError):
            session.bitwise("NAND", "1", operand="1")

    def test_invalid_digit(self, session):
        with pytest.raises(InvalidDigitError):
            session.bitwise("NOT", "2", base="binary")
        assert len(session.history) == 0

    def test_convert_base_not_recorded(self, session):
        assert session.convert_base("255", "decimal", "hexadecimal") == "FF"
        assert len(session.history) == 0

    def test_word_size_from_settings(self, storage):
        session = CalculatorSession(Settings(word_size=8), storage=storage)
        assert session.bitwise("LSH", "1", positions=7) == "-128"


class TestGraphingMode:

    def test_add_function_records_history(self, session):
        function = session.add_graph_function("x^2")
        entry = session.history.entries[0]
        assert entry.expression == "f(x) = x^2"
        assert entry.result == "Function added to graph"
        assert entry.mode == CalculatorMode.GRAPHING
        assert session.plot().series[0].function_id == function.id


class TestFinancialMode:

    def test_records_history(self, session):
        value = session.calculate_financial(
            FinancialFormula.LOAN_PAYMENT, principal=12000, annual_rate=0, years=2
        )
        assert value == 500
        entry = session.history.entries[0]
        assert entry.expression == "Loan Payment: Principal=$12000, Rate=0%, Years=2"
        assert entry.result == "$500.00"
        assert entry.mode == CalculatorMode.FINANCIAL

    def test_percent_result(self, session):
        session.calculate_financial("roi", initial_investment=1000, final_value=1200)
        assert session.history.entries[0].result == "20.00%"

    def test_failure_not_recorded(self, session):
        with pytest.raises(DivisionByZeroError):
            session.calculate_financial("roi", initial_investment=0, final_value=1)
        assert len(session.history) == 0

    def test_overflowing_growth_is_recorded(self, session):
        session.calculate_financial("future_value", principal=1000, annual_rate=100, years=1000)
        assert session.history.entries[0].result == "$Infinity"


class TestPreferences:

    def test_defaults(self, session):
        assert session.mode == CalculatorMode.BASIC
        assert session.theme == Theme.DARK

    def test_restored_by_next_session(self, session, storage):
        session.switch_mode("programmer")
        assert session.toggle_theme() == Theme.LIGHT
        press(session, "1+1=")
        restored = CalculatorSession(Settings(), storage=storage)
        assert restored.mode == CalculatorMode.PROGRAMMER
        assert restored.theme == Theme.LIGHT
        assert restored.history.entries == session.history.entries

    def test_unknown_mode(self, session):
        with pytest.raises(ValueError):
            session.switch_mode("unit-converter")

    def test_file_storage(self, tmp_path):
        settings = Settings(storage_path=str(tmp_path / "state.json"))
        CalculatorSession(settings).set_theme("light")
        assert CalculatorSession(settings).theme == Theme.LIGHT
