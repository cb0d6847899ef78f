"""Tests for the executable invariants over stores and the arithmetic engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from arithmetic import ArithmeticEngine
from models import HistoryEntry, MemorySlot
from rules import (
    ENGINE_RULES,
    HISTORY_RULES,
    MEMORY_RULES,
    Rule,
    run_rules,
    validate_engine,
    validate_history,
    validate_memory,
)


@dataclass
class FakeHistory:
    entries: list = field(default_factory=list)
    limit: int = 100


@dataclass
class FakeMemory:
    slots: list = field(default_factory=list)
    max_slots: int = 10
    active_slot: int = 0


def _entry(minutes_ago: int, entry_id: str | None = None) -> HistoryEntry:
    timestamp = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    extra = {"id": entry_id} if entry_id else {}
    return HistoryEntry(expression="1", result="1", mode="basic", timestamp=timestamp, **extra)


def _failed_ids(report) -> set[str]:
    return {r.rule_id for r in report.failures}


class TestRuleSets:

    def test_rule_ids_are_unique(self):
        ids = [r.id for r in HISTORY_RULES + MEMORY_RULES + ENGINE_RULES]
        assert len(ids) == len(set(ids))

    def test_run_rules_counts_raising_rule_as_failure(self):
        boom = Rule(id="X", name="boom", description="always raises", check=lambda s: 1 / 0)
        report = run_rules([boom], None)
        assert not report.passed
        assert "[X] boom" in report.summary()

    def test_summary_when_passing(self):
        report = validate_memory(FakeMemory())
        assert report.summary() == f"All {len(MEMORY_RULES)} rules passed"


class TestHistoryRules:

    def test_valid_history(self):
        assert validate_history(FakeHistory([_entry(0), _entry(1), _entry(2)])).passed

    def test_over_limit(self):
        report = validate_history(FakeHistory([_entry(0), _entry(1)], limit=1))
        assert _failed_ids(report) == {"HIST-LIMIT"}

    def test_timestamps_need_not_be_ordered(self):
        assert validate_history(FakeHistory([_entry(5), _entry(0)])).passed

    def test_duplicate_ids(self):
        report = validate_history(FakeHistory([_entry(0, "a"), _entry(1, "a")]))
        assert _failed_ids(report) == {"HIST-ID"}


class TestMemoryRules:

    def test_empty_memory_is_valid(self):
        assert validate_memory(FakeMemory()).passed

    def test_over_capacity(self):
        report = validate_memory(FakeMemory([MemorySlot()] * 3, max_slots=2))
        assert _failed_ids(report) == {"MEM-CAPACITY"}

    def test_active_slot_out_of_range(self):
        report = validate_memory(FakeMemory([MemorySlot()], active_slot=1))
        assert _failed_ids(report) == {"MEM-ACTIVE"}

    def test_negative_active_slot(self):
        report = validate_memory(FakeMemory(active_slot=-1))
        assert _failed_ids(report) == {"MEM-ACTIVE"}


class TestEngineRules:

    def test_fresh_engine(self):
        assert validate_engine(ArithmeticEngine()).passed

    def test_empty_display(self):
        engine = ArithmeticEngine()
        engine.current_value = ""
        assert _failed_ids(validate_engine(engine)) == {"ENG-DISPLAY", "ENG-NUMERIC"}

    def test_operator_without_operand(self):
        engine = ArithmeticEngine()
        engine.operator = "+"
        assert _failed_ids(validate_engine(engine)) == {"ENG-OPERAND"}

    def test_trailing_decimal_point_is_numeric(self):
        engine = ArithmeticEngine()
        engine.input_decimal()
        assert validate_engine(engine).passed
