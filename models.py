"""Data models for the calculator core.

History entries and memory slots are the records persisted through the
storage adapter.  The enums name the calculator modes and the settings a
mode can switch between.  This module defines the data models only -- no
calculation logic.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CalculatorMode(str, Enum):
    BASIC = "basic"
    SCIENTIFIC = "scientific"
    PROGRAMMER = "programmer"
    GRAPHING = "graphing"
    FINANCIAL = "financial"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class AngleMode(str, Enum):
    DEG = "deg"
    RAD = "rad"


class NumberBase(str, Enum):
    BINARY = "binary"
    OCTAL = "octal"
    DECIMAL = "decimal"
    HEXADECIMAL = "hexadecimal"

    @property
    def radix(self) -> int:
        return _RADIX[self]


_RADIX = {
    NumberBase.BINARY: 2,
    NumberBase.OCTAL: 8,
    NumberBase.DECIMAL: 10,
    NumberBase.HEXADECIMAL: 16,
}


class FinancialFormula(str, Enum):
    LOAN_PAYMENT = "loan_payment"
    COMPOUND_INTEREST = "compound_interest"
    FUTURE_VALUE = "future_value"
    SIMPLE_INTEREST = "simple_interest"
    PRESENT_VALUE = "present_value"
    ROI = "roi"
    STRAIGHT_LINE_DEPRECIATION = "depreciation_sl"
    DECLINING_BALANCE_DEPRECIATION = "depreciation_db"
    ANNUITY_FUTURE_VALUE = "annuity_fv"
    ANNUITY_PRESENT_VALUE = "annuity_pv"
    BREAK_EVEN = "break_even"
    NPV = "npv"


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class HistoryEntry(BaseModel):
    """One completed calculation.  Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, min_length=1)
    expression: str
    result: str
    timestamp: datetime = Field(default_factory=_utcnow)
    mode: CalculatorMode


# ---------------------------------------------------------------------------
# Memory
# ---------------------------------------------------------------------------

class MemorySlot(BaseModel):
    """A single memory register."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    value: float = 0.0
    label: str | None = Field(default=None, max_length=64)

    @field_validator("label")
    @classmethod
    def label_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


# ---------------------------------------------------------------------------
# Graphing
# ---------------------------------------------------------------------------

class GraphFunction(BaseModel):
    """A function plotted in graphing mode, in terms of ``x``."""

    id: str = Field(default_factory=_new_id)
    expression: str = Field(..., min_length=1)
    color: str
    visible: bool = True


class GraphRange(BaseModel):
    """Visible window of the graph."""

    x_min: float = -10.0
    x_max: float = 10.0
    y_min: float = -10.0
    y_max: float = 10.0
