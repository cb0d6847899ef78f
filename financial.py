"""
Financial formula library.

All functions are pure.  Rates are percentages (``5`` means 5 %).
Monthly formulas divide the annual rate by 12 and multiply years by 12.

FORMULAS:
    loan payment        P * r * (1+r)^n / ((1+r)^n - 1)       r = monthly
    compound amount     P * (1 + R/m)^(m*t)
    simple interest     P * R * t
    present value       FV / (1+R)^t                          annual
    ROI                 (final - initial) / initial * 100
    straight line       (cost - salvage) / life
    declining balance   cost * (1-R)^(year-1) * R
    annuity FV          PMT * ((1+r)^n - 1) / r               r = monthly
    annuity PV          PMT * (1 - (1+r)^-n) / r              r = monthly
    break-even units    fixed / (price - variable)
    NPV                 -initial + sum(CF_k / (1+R)^k), k = 1..N

Formulas with the rate in a denominator fall back to linear arithmetic at
a zero rate.  Inputs are not validated: negative years or rates compute
as-is.  A zero denominator without such a fallback raises
``DivisionByZeroError``.  Growth factors that overflow become infinite and
ones with no real value (a negative base to a fractional power) become NaN,
so results may be non-finite; the formatters render those as
``Infinity`` and ``NaN``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from arithmetic import format_number
from errors import DivisionByZeroError
from models import FinancialFormula

MONTHS_PER_YEAR = 12


def _divide(numerator: float, denominator: float, what: str) -> float:
    if denominator == 0:
        raise DivisionByZeroError(f"Cannot divide by zero: {what} is zero")
    return numerator / denominator


def _power(base: float, exponent: float) -> float:
    """Real-valued ``base ** exponent``: inf on overflow, NaN when complex."""
    fractional = not float(exponent).is_integer()
    try:
        result = base ** exponent
    except ZeroDivisionError:
        return math.inf
    except OverflowError:
        if base >= 0:
            return math.inf
        if fractional:
            return math.nan
        return -math.inf if exponent % 2 else math.inf
    if isinstance(result, complex):
        return math.nan
    return result


# =============================================================================
# LOANS & INTEREST
# =============================================================================

def loan_payment(principal: float, annual_rate: float, years: float) -> float:
    """Monthly payment that amortizes ``principal`` over ``years``."""
    monthly_rate = annual_rate / 100 / MONTHS_PER_YEAR
    payments = years * MONTHS_PER_YEAR

    if monthly_rate == 0:
        return _divide(principal, payments, "number of payments")

    growth = _power(1 + monthly_rate, payments)
    # Payment tends to the interest alone as the term grows.
    if math.isinf(growth) and growth > 0:
        return principal * monthly_rate
    return _divide(principal * monthly_rate * growth, growth - 1, "amortization factor")


def future_value(
    principal: float,
    annual_rate: float,
    years: float,
    compounding_frequency: float = MONTHS_PER_YEAR,
) -> float:
    rate = annual_rate / 100
    period_rate = _divide(rate, compounding_frequency, "compounding frequency")
    return principal * _power(1 + period_rate, compounding_frequency * years)


def compound_interest(
    principal: float,
    annual_rate: float,
    years: float,
    compounding_frequency: float = MONTHS_PER_YEAR,
) -> float:
    """Interest earned (amount minus principal)."""
    return future_value(principal, annual_rate, years, compounding_frequency) - principal


def simple_interest(principal: float, annual_rate: float, years: float) -> float:
    return principal * annual_rate * years / 100


def present_value(future: float, annual_rate: float, years: float) -> float:
    rate = annual_rate / 100
    return _divide(future, _power(1 + rate, years), "discount factor")


def roi(initial_investment: float, final_value: float) -> float:
    """Return on investment, in percent."""
    return _divide(final_value - initial_investment, initial_investment, "initial investment") * 100


# =============================================================================
# DEPRECIATION
# =============================================================================

def straight_line_depreciation(cost: float, salvage_value: float, useful_life: float) -> float:
    return _divide(cost - salvage_value, useful_life, "useful life")


def declining_balance_depreciation(cost: float, rate: float, year: float) -> float:
    """Depreciation charged in ``year`` (1-based) at ``rate`` percent."""
    fraction = rate / 100
    return cost * _power(1 - fraction, year - 1) * fraction


# =============================================================================
# ANNUITIES, BREAK-EVEN, NPV
# =============================================================================

def annuity_future_value(payment: float, annual_rate: float, years: float) -> float:
    monthly_rate = annual_rate / 100 / MONTHS_PER_YEAR
    payments = years * MONTHS_PER_YEAR

    if monthly_rate == 0:
        return payment * payments

    return payment * (_power(1 + monthly_rate, payments) - 1) / monthly_rate


def annuity_present_value(payment: float, annual_rate: float, years: float) -> float:
    monthly_rate = annual_rate / 100 / MONTHS_PER_YEAR
    payments = years * MONTHS_PER_YEAR

    if monthly_rate == 0:
        return payment * payments

    return payment * (1 - _power(1 + monthly_rate, -payments)) / monthly_rate


def break_even_point(fixed_costs: float, price_per_unit: float, variable_cost_per_unit: float) -> float:
    """Units to sell before revenue covers costs."""
    return _divide(fixed_costs, price_per_unit - variable_cost_per_unit, "unit margin")


def npv(initial_investment: float, cash_flows: Sequence[float], discount_rate: float) -> float:
    """Net present value; the first cash flow arrives after one period."""
    rate = discount_rate / 100
    total = -initial_investment
    for period, cash_flow in enumerate(cash_flows, start=1):
        total += _divide(cash_flow, _power(1 + rate, period), "discount factor")
    return total


# =============================================================================
# REGISTRY
# =============================================================================

@dataclass(frozen=True)
class FormulaInfo:
    """A formula together with the label used in the history list."""

    formula: FinancialFormula
    function: Callable[..., float]
    label: str
    unit: str = "currency"  # currency | percent | units


FINANCIAL_FORMULAS: dict[FinancialFormula, FormulaInfo] = {
    info.formula: info
    for info in (
        FormulaInfo(
            FinancialFormula.LOAN_PAYMENT, loan_payment,
            "Loan Payment: Principal=${principal}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.COMPOUND_INTEREST, compound_interest,
            "Compound Interest: Principal=${principal}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.FUTURE_VALUE, future_value,
            "Future Value: Principal=${principal}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.SIMPLE_INTEREST, simple_interest,
            "Simple Interest: Principal=${principal}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.PRESENT_VALUE, present_value,
            "Present Value: Future=${future}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.ROI, roi,
            "ROI: Initial=${initial_investment}, Final=${final_value}",
            unit="percent",
        ),
        FormulaInfo(
            FinancialFormula.STRAIGHT_LINE_DEPRECIATION, straight_line_depreciation,
            "Depreciation: Cost=${cost}, Salvage=${salvage_value}, Life={useful_life}",
        ),
        FormulaInfo(
            FinancialFormula.DECLINING_BALANCE_DEPRECIATION, declining_balance_depreciation,
            "Declining Balance: Cost=${cost}, Rate={rate}%, Year={year}",
        ),
        FormulaInfo(
            FinancialFormula.ANNUITY_FUTURE_VALUE, annuity_future_value,
            "Annuity FV: Payment=${payment}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.ANNUITY_PRESENT_VALUE, annuity_present_value,
            "Annuity PV: Payment=${payment}, Rate={annual_rate}%, Years={years}",
        ),
        FormulaInfo(
            FinancialFormula.BREAK_EVEN, break_even_point,
            "Break-even: Fixed=${fixed_costs}, Price=${price_per_unit}, "
            "Variable=${variable_cost_per_unit}",
            unit="units",
        ),
        FormulaInfo(
            FinancialFormula.NPV, npv,
            "NPV: Initial=${initial_investment}, Cash Flows=[{cash_flows}], Rate={discount_rate}%",
        ),
    )
}


def _render_input(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_render_input(v) for v in value)
    if isinstance(value, (int, float)):
        return format_number(float(value))
    return str(value)


def calculate(formula: FinancialFormula | str, **inputs: object) -> float:
    """Dispatch to the formula function by name."""
    return FINANCIAL_FORMULAS[FinancialFormula(formula)].function(**inputs)


def describe(formula: FinancialFormula | str, inputs: dict[str, object]) -> str:
    """History text for a financial calculation."""
    info = FINANCIAL_FORMULAS[FinancialFormula(formula)]
    rendered = {name: _render_input(value) for name, value in inputs.items()}
    return info.label.format(**rendered)


def _fixed(value: float) -> str:
    if not math.isfinite(value):
        return format_number(value)
    return f"{value:.2f}"


def format_currency(value: float) -> str:
    """Two-decimal dollar amount, e.g. ``$1234.57``."""
    if value < 0:
        return f"-${_fixed(-value)}"
    return f"${_fixed(value)}"


def format_result(formula: FinancialFormula | str, value: float) -> str:
    """Display text for a formula result in the formula's unit."""
    unit = FINANCIAL_FORMULAS[FinancialFormula(formula)].unit
    if unit == "percent":
        return f"{_fixed(value)}%"
    if unit == "units":
        return f"{_fixed(value)} units"
    return format_currency(value)
