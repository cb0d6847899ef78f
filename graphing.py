"""Graphing mode: the list of plotted functions and their sampled points.

Rendering is left to a plotting library.  This module produces the data a
chart needs: evenly spaced x values across the visible range and, for each
visible function, the y value at every x (``None`` where the function is
undefined or leaves the visible y range).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
import sympy as sp

from config import GRAPH_POINTS
from errors import GraphRangeError
from models import AngleMode, GraphFunction, GraphRange
from scientific import parse, sanitize_expression

logger = logging.getLogger("calcsuite.graphing")

VARIABLE = "x"
COLORS = ("#2196f3", "#f44336", "#4caf50", "#ff9800", "#9c27b0", "#00bcd4")

MIN_SPAN = 0.001
MAX_SPAN = 1_000_000


def validate_graph_range(lo: float, hi: float) -> None:
    """Raise ``GraphRangeError`` for an unusable axis range."""
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise GraphRangeError("Range values must be finite numbers")
    if lo >= hi:
        raise GraphRangeError("Minimum must be less than maximum")
    if hi - lo < MIN_SPAN:
        raise GraphRangeError("Range is too small")
    if hi - lo > MAX_SPAN:
        raise GraphRangeError("Range is too large")


# ---------------------------------------------------------------------------
# Compiled functions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompiledFunction:
    """A parsed f(x) with a vectorized numpy evaluator."""

    expression: str
    expr: sp.Expr
    symbol: sp.Symbol
    vectorized: Callable[[np.ndarray], np.ndarray]

    def __call__(self, xs: np.ndarray) -> np.ndarray:
        try:
            with np.errstate(all="ignore"):
                ys = np.asarray(self.vectorized(xs), dtype=float)
            return np.broadcast_to(ys, xs.shape)
        except (TypeError, ValueError, AttributeError, NameError):
            # Some sympy functions have no numpy counterpart.
            logger.debug("falling back to pointwise evaluation for %s", self.expression)
            return np.array([self._point(x) for x in xs], dtype=float)

    def _point(self, x: float) -> float:
        try:
            value = complex(self.expr.subs(self.symbol, x).evalf())
        except (TypeError, ValueError, ZeroDivisionError):
            return math.nan
        return value.real if value.imag == 0 else math.nan


def compile_function(expression: str, angle_mode: AngleMode = AngleMode.RAD) -> CompiledFunction:
    """Parse ``expression`` in terms of ``x`` and build its evaluator."""
    expr = parse(expression, angle_mode=angle_mode, variables=(VARIABLE,))
    symbol = sp.Symbol(VARIABLE, real=True)
    return CompiledFunction(
        expression=expression,
        expr=expr,
        symbol=symbol,
        vectorized=sp.lambdify(symbol, expr, modules="numpy"),
    )


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Series:
    function_id: str
    label: str
    color: str
    ys: list[float | None]


@dataclass(frozen=True)
class GraphData:
    xs: list[float]
    series: list[Series] = field(default_factory=list)


class Graph:
    """Functions plotted in graphing mode and the visible window."""

    def __init__(
        self,
        graph_range: GraphRange | None = None,
        points: int = GRAPH_POINTS,
        angle_mode: AngleMode = AngleMode.RAD,
    ) -> None:
        self.functions: list[GraphFunction] = []
        self.range = GraphRange()
        self.points = points
        self.angle_mode = angle_mode
        self._compiled: dict[str, CompiledFunction] = {}
        if graph_range is not None:
            self.set_range(graph_range)

    def set_range(self, graph_range: GraphRange) -> None:
        validate_graph_range(graph_range.x_min, graph_range.x_max)
        validate_graph_range(graph_range.y_min, graph_range.y_max)
        self.range = graph_range

    def add_function(self, expression: str) -> GraphFunction:
        """Add f(x); raises ``EvaluationError`` if it does not parse."""
        sanitized = sanitize_expression(expression)
        compiled = compile_function(sanitized, self.angle_mode)
        function = GraphFunction(
            expression=sanitized,
            color=COLORS[len(self.functions) % len(COLORS)],
        )
        self.functions.append(function)
        self._compiled[function.id] = compiled
        logger.debug("added graph function %s: %s", function.id, sanitized)
        return function

    def remove_function(self, function_id: str) -> bool:
        before = len(self.functions)
        self.functions = [f for f in self.functions if f.id != function_id]
        self._compiled.pop(function_id, None)
        return len(self.functions) != before

    def toggle_function(self, function_id: str) -> GraphFunction | None:
        for i, function in enumerate(self.functions):
            if function.id == function_id:
                toggled = function.model_copy(update={"visible": not function.visible})
                self.functions[i] = toggled
                return toggled
        return None

    def sample(self) -> GraphData:
        """Sample every visible function across the x range."""
        r = self.range
        xs = np.linspace(r.x_min, r.x_max, self.points + 1)
        series = []
        for function in self.functions:
            if not function.visible:
                continue
            ys = self._compiled[function.id](xs)
            with np.errstate(invalid="ignore"):
                in_view = np.isfinite(ys) & (ys >= r.y_min) & (ys <= r.y_max)
            series.append(
                Series(
                    function_id=function.id,
                    label=f"f(x) = {function.expression}",
                    color=function.color,
                    ys=[float(y) if ok else None for y, ok in zip(ys, in_view)],
                )
            )
        return GraphData(xs=[float(x) for x in xs], series=series)
