"""Shared fixtures for calculator tests."""
from __future__ import annotations

import pytest

from arithmetic import ArithmeticEngine
from config import Settings
from programmer import ProgrammerEngine
from session import CalculatorSession
from storage import StorageAdapter
from store import HistoryStore, MemoryStore


@pytest.fixture
def engine() -> ArithmeticEngine:
    return ArithmeticEngine()


@pytest.fixture
def programmer() -> ProgrammerEngine:
    return ProgrammerEngine()


@pytest.fixture
def storage() -> StorageAdapter:
    return StorageAdapter()


@pytest.fixture
def history(storage) -> HistoryStore:
    return HistoryStore(storage)


@pytest.fixture
def memory(storage) -> MemoryStore:
    return MemoryStore(storage)


@pytest.fixture
def session(storage) -> CalculatorSession:
    return CalculatorSession(Settings(), storage=storage)


def enter(engine: ArithmeticEngine, number: str) -> None:
    """Type a number on the keypad, digit by digit."""
    for char in number:
        if char == ".":
            engine.input_decimal()
        else:
            engine.input_digit(char)
