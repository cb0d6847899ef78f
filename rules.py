"""Collection and engine invariants as executable rules.

Each rule is a named predicate.  The stores run their rule set after every
mutation and refuse to keep a state that fails one; tests run the same
rules against hand-built good and bad states.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


# ---------------------------------------------------------------------------
# Rule: a named, executable predicate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Rule:
    """A named validation rule over a store or engine."""

    id: str
    name: str
    description: str
    check: Callable[[Any], bool]


@dataclass(frozen=True)
class ValidationResult:
    rule_id: str
    rule_name: str
    passed: bool
    description: str


@dataclass(frozen=True)
class ValidationReport:
    results: list[ValidationResult]

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        total = len(self.results)
        failed = len(self.failures)
        if failed == 0:
            return f"All {total} rules passed"
        lines = [f"{failed}/{total} rules failed:"]
        for f in self.failures:
            lines.append(f"  [{f.rule_id}] {f.rule_name}: {f.description}")
        return "\n".join(lines)


def run_rules(rules: list[Rule], subject: Any) -> ValidationReport:
    """Run every rule against ``subject``.  A rule that raises fails."""
    results = []
    for rule in rules:
        try:
            passed = bool(rule.check(subject))
        except Exception:
            passed = False
        results.append(
            ValidationResult(
                rule_id=rule.id,
                rule_name=rule.name,
                passed=passed,
                description=rule.description,
            )
        )
    return ValidationReport(results=results)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def _history_within_limit(h) -> bool:
    return len(h.entries) <= h.limit


def _history_ids_unique(h) -> bool:
    ids = [e.id for e in h.entries]
    return len(ids) == len(set(ids))


HISTORY_RULES: list[Rule] = [
    Rule(
        id="HIST-LIMIT",
        name="history_within_limit",
        description="History holds at most `limit` entries",
        check=_history_within_limit,
    ),
    Rule(
        id="HIST-ID",
        name="history_ids_unique",
        description="Every entry id is unique",
        check=_history_ids_unique,
    ),
]


# ---------------------------------------------------------------------------
# Memory
# ---------------------------------------------------------------------------

def _memory_within_capacity(m) -> bool:
    return len(m.slots) <= m.max_slots


def _active_slot_in_range(m) -> bool:
    return 0 <= m.active_slot < max(len(m.slots), 1)


MEMORY_RULES: list[Rule] = [
    Rule(
        id="MEM-CAPACITY",
        name="memory_within_capacity",
        description="Memory holds at most `max_slots` slots",
        check=_memory_within_capacity,
    ),
    Rule(
        id="MEM-ACTIVE",
        name="active_slot_in_range",
        description="Active slot indexes an existing slot (or 0 when empty)",
        check=_active_slot_in_range,
    ),
]


# ---------------------------------------------------------------------------
# Arithmetic engine
# ---------------------------------------------------------------------------

def _display_not_empty(engine) -> bool:
    return bool(engine.current_value)


def _display_is_number(engine) -> bool:
    float(engine.current_value)
    return True


def _operator_has_operand(engine) -> bool:
    return engine.operator is None or bool(engine.previous_value)


ENGINE_RULES: list[Rule] = [
    Rule(
        id="ENG-DISPLAY",
        name="display_not_empty",
        description="The current value is never empty",
        check=_display_not_empty,
    ),
    Rule(
        id="ENG-NUMERIC",
        name="display_is_number",
        description="The current value parses as a number",
        check=_display_is_number,
    ),
    Rule(
        id="ENG-OPERAND",
        name="operator_has_operand",
        description="A pending operator always has a left operand",
        check=_operator_has_operand,
    ),
]


def validate_history(store) -> ValidationReport:
    return run_rules(HISTORY_RULES, store)


def validate_memory(store) -> ValidationReport:
    return run_rules(MEMORY_RULES, store)


def validate_engine(engine) -> ValidationReport:
    return run_rules(ENGINE_RULES, engine)
