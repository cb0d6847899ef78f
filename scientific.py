"""Scientific mode: expression evaluation and direct scientific functions.

Expressions typed on the scientific keypad are sanitized, checked against
an allow-list of functions and constants, tokenized by sympy's parser and
evaluated with every power routed through a size guard.  Nothing reaches
the parser unless every identifier in it is one we put in its namespace,
and quotes, underscores and dots outside numbers never survive sanitizing.

``evaluate`` raises ``EvaluationError`` for malformed input and
``DomainError`` for results outside the real numbers (square root of a
negative, logarithm of zero, factorial of a negative or non-integer).
Powers too large to expand evaluate to infinity and ones too small to
expand evaluate to zero.
"""
from __future__ import annotations

import ast
import math
import re
from typing import Any, Callable, Iterable

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    standard_transformations,
    stringify_expr,
)

from config import MAX_EXPRESSION_LENGTH
from errors import CalculatorError, DomainError, EvaluationError
from models import AngleMode

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

FUNCTIONS = (
    "sin", "cos", "tan", "asin", "acos", "atan",
    "sinh", "cosh", "tanh",
    "log", "ln", "exp", "sqrt", "cbrt", "abs", "factorial",
    "floor", "ceil",
)
CONSTANTS = ("pi", "e", "PI", "E")

_GLYPHS = {"×": "*", "÷": "/", "−": "-", "π": "pi"}
_ROOT_OF_NUMBER = re.compile(r"√\s*([0-9.]+)")
_DISALLOWED = re.compile(r"[^0-9+\-*/().^!%,\sa-zA-Z]")
_ALLOWED = re.compile(r"^[0-9+\-*/().^!%,\sa-zA-Z]+$")
_IDENTIFIER = re.compile(r"[A-Za-z]+")

# Exact powers and factorials beyond these sizes are not expanded.
_MAX_POWER_DIGITS = 10_000
_MAX_FACTORIAL = 10_000

_POWER = "__power"
_SYMPY_GLOBALS: dict[str, Any] = {name: getattr(sp, name) for name in sp.__all__}


# ---------------------------------------------------------------------------
# Sanitizing and validation
# ---------------------------------------------------------------------------

def sanitize_expression(expression: str) -> str:
    """Normalize display glyphs, strip disallowed characters, close parens."""
    text = expression
    for glyph, replacement in _GLYPHS.items():
        text = text.replace(glyph, replacement)
    text = _ROOT_OF_NUMBER.sub(r"sqrt(\1)", text).replace("√", "sqrt")
    text = _DISALLOWED.sub("", text).strip()

    unclosed = 0
    for char in text:
        if char == "(":
            unclosed += 1
        elif char == ")" and unclosed > 0:
            unclosed -= 1
    return text + ")" * unclosed


def validate_expression(
    expression: str,
    variables: Iterable[str] = (),
    max_length: int = MAX_EXPRESSION_LENGTH,
) -> None:
    """Raise ``EvaluationError`` unless the text is safe to parse."""
    if not expression or not expression.strip():
        raise EvaluationError(expression, "expression is empty")
    if len(expression) > max_length:
        raise EvaluationError(expression, f"longer than {max_length} characters")
    if not _ALLOWED.match(expression):
        raise EvaluationError(expression, "contains disallowed characters")

    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise EvaluationError(expression, "unbalanced parentheses")
    if depth != 0:
        raise EvaluationError(expression, "unbalanced parentheses")

    known = set(FUNCTIONS) | set(CONSTANTS) | set(variables)
    for name in _IDENTIFIER.findall(expression):
        if name not in known:
            raise EvaluationError(expression, f"unknown name {name!r}")


# ---------------------------------------------------------------------------
# Parser namespace
# ---------------------------------------------------------------------------

def _checked(name: str, check: Callable[[sp.Expr], bool], reason: str, fn: Callable) -> Callable:
    """Wrap ``fn`` so numeric arguments failing ``check`` raise DomainError."""

    def wrapper(arg):
        arg = sp.sympify(arg)
        if arg.is_number and arg.is_real and not check(arg):
            raise DomainError(name, arg, reason)
        return fn(arg)

    return wrapper


def _factorial(arg):
    arg = sp.sympify(arg)
    if arg is sp.oo:
        return sp.oo
    if arg.is_number and not (arg.is_integer and arg.is_nonnegative):
        raise DomainError("factorial", arg, "requires a non-negative integer")
    if arg.is_number and arg > _MAX_FACTORIAL:
        return sp.oo
    return sp.factorial(arg)


def _power(base, exponent):
    """``base ** exponent`` without expanding results of unbounded size."""
    base, exponent = sp.sympify(base), sp.sympify(exponent)
    if base.is_number and exponent.is_number:
        digits = sp.N(exponent * sp.log(sp.Abs(base), 10), 15)
        if digits.is_extended_real and digits > _MAX_POWER_DIGITS:
            if base.is_nonnegative or exponent.is_even:
                return sp.oo
            if exponent.is_odd:
                return -sp.oo
            raise DomainError("power", base, "result is not a real number")
        if digits.is_extended_real and digits < -_MAX_POWER_DIGITS:
            return sp.S.Zero
    return sp.Pow(base, exponent)


class _GuardPowers(ast.NodeTransformer):
    """Rewrite ``a ** b`` as a call to :func:`_power`."""

    def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
        self.generic_visit(node)
        if not isinstance(node.op, ast.Pow):
            return node
        call = ast.Call(
            func=ast.Name(id=_POWER, ctx=ast.Load()),
            args=[node.left, node.right],
            keywords=[],
        )
        return ast.copy_location(call, node)


def _namespace(angle_mode: AngleMode, variables: Iterable[str] = ()) -> dict[str, Any]:
    if angle_mode == AngleMode.DEG:
        to_rad = sp.pi / 180
        trig = {
            "sin": lambda x: sp.sin(x * to_rad),
            "cos": lambda x: sp.cos(x * to_rad),
            "tan": lambda x: sp.tan(x * to_rad),
            "asin": lambda x: sp.asin(x) / to_rad,
            "acos": lambda x: sp.acos(x) / to_rad,
            "atan": lambda x: sp.atan(x) / to_rad,
        }
    else:
        trig = {
            "sin": sp.sin, "cos": sp.cos, "tan": sp.tan,
            "asin": sp.asin, "acos": sp.acos, "atan": sp.atan,
        }

    namespace: dict[str, Any] = {
        **trig,
        "sinh": sp.sinh,
        "cosh": sp.cosh,
        "tanh": sp.tanh,
        "log": _checked("log", lambda v: v > 0, "requires a positive operand",
                        lambda v: sp.log(v, 10)),
        "ln": _checked("ln", lambda v: v > 0, "requires a positive operand", sp.log),
        "exp": sp.exp,
        "sqrt": _checked("sqrt", lambda v: v >= 0, "negative operand", sp.sqrt),
        "cbrt": lambda x: sp.real_root(x, 3),
        "abs": sp.Abs,
        "factorial": _factorial,
        "floor": sp.floor,
        "ceil": sp.ceiling,
        "pi": sp.pi,
        "PI": sp.pi,
        "e": sp.E,
        "E": sp.E,
        _POWER: _power,
    }
    for name in variables:
        namespace[name] = sp.Symbol(name, real=True)
    return namespace


def parse(
    expression: str,
    angle_mode: AngleMode = AngleMode.RAD,
    variables: Iterable[str] = (),
    max_length: int = MAX_EXPRESSION_LENGTH,
) -> sp.Expr:
    """Sanitize, validate and parse into a sympy expression."""
    variables = tuple(variables)
    text = sanitize_expression(expression)
    validate_expression(text, variables=variables, max_length=max_length)
    try:
        namespace = _namespace(angle_mode, variables)
        code = stringify_expr(text, namespace, _SYMPY_GLOBALS, TRANSFORMATIONS)
        tree = _GuardPowers().visit(ast.parse(code, mode="eval"))
        compiled = compile(ast.fix_missing_locations(tree), "<expression>", "eval")
        expr = eval(compiled, dict(_SYMPY_GLOBALS), namespace)
    except CalculatorError:
        raise
    except Exception as exc:
        raise EvaluationError(text, str(exc) or type(exc).__name__) from exc
    if not isinstance(expr, sp.Basic):
        raise EvaluationError(text, "not a single value")
    return expr


def evaluate(
    expression: str,
    angle_mode: AngleMode = AngleMode.RAD,
    max_length: int = MAX_EXPRESSION_LENGTH,
) -> float:
    """Evaluate an expression to a real number."""
    expr = parse(expression, angle_mode=angle_mode, max_length=max_length)
    if expr.free_symbols:
        raise EvaluationError(expression, "expression has free variables")
    if expr.has(sp.zoo, sp.nan):
        raise EvaluationError(expression, "result is undefined")

    real, imag = sp.N(expr).as_real_imag()
    if imag != 0:
        raise DomainError("evaluate", expression, "result is not a real number")
    try:
        return float(real)
    except TypeError as exc:
        raise EvaluationError(expression, "result is not numeric") from exc


# ---------------------------------------------------------------------------
# Direct functions
# ---------------------------------------------------------------------------

class ScientificEngine:
    """Scientific keypad functions on plain floats."""

    def __init__(
        self,
        angle_mode: AngleMode = AngleMode.DEG,
        max_length: int = MAX_EXPRESSION_LENGTH,
    ) -> None:
        self.angle_mode = angle_mode
        self.max_length = max_length

    def toggle_angle_mode(self) -> AngleMode:
        self.angle_mode = AngleMode.RAD if self.angle_mode == AngleMode.DEG else AngleMode.DEG
        return self.angle_mode

    def evaluate(self, expression: str) -> float:
        return evaluate(expression, angle_mode=self.angle_mode, max_length=self.max_length)

    # -- trigonometry --------------------------------------------------------

    def _to_rad(self, value: float, angle_mode: AngleMode | None) -> float:
        mode = angle_mode or self.angle_mode
        return math.radians(value) if mode == AngleMode.DEG else value

    def _from_rad(self, value: float, angle_mode: AngleMode | None) -> float:
        mode = angle_mode or self.angle_mode
        return math.degrees(value) if mode == AngleMode.DEG else value

    def sin(self, value: float, angle_mode: AngleMode | None = None) -> float:
        return math.sin(self._to_rad(value, angle_mode))

    def cos(self, value: float, angle_mode: AngleMode | None = None) -> float:
        return math.cos(self._to_rad(value, angle_mode))

    def tan(self, value: float, angle_mode: AngleMode | None = None) -> float:
        return math.tan(self._to_rad(value, angle_mode))

    def asin(self, value: float, angle_mode: AngleMode | None = None) -> float:
        if not -1 <= value <= 1:
            raise DomainError("asin", value, "operand outside [-1, 1]")
        return self._from_rad(math.asin(value), angle_mode)

    def acos(self, value: float, angle_mode: AngleMode | None = None) -> float:
        if not -1 <= value <= 1:
            raise DomainError("acos", value, "operand outside [-1, 1]")
        return self._from_rad(math.acos(value), angle_mode)

    def atan(self, value: float, angle_mode: AngleMode | None = None) -> float:
        return self._from_rad(math.atan(value), angle_mode)

    # -- powers and logarithms -----------------------------------------------

    def log(self, value: float) -> float:
        """Base-10 logarithm."""
        if value <= 0:
            raise DomainError("log", value, "requires a positive operand")
        return math.log10(value)

    def ln(self, value: float) -> float:
        if value <= 0:
            raise DomainError("ln", value, "requires a positive operand")
        return math.log(value)

    def exp(self, value: float) -> float:
        try:
            return math.exp(value)
        except OverflowError:
            return math.inf

    def power(self, base: float, exponent: float) -> float:
        try:
            return math.pow(base, exponent)
        except OverflowError:
            return math.inf
        except ValueError as exc:
            raise DomainError("power", (base, exponent), "result is not a real number") from exc

    def sqrt(self, value: float) -> float:
        if value < 0:
            raise DomainError("sqrt", value, "negative operand")
        return math.sqrt(value)

    def cbrt(self, value: float) -> float:
        root = abs(value) ** (1 / 3)
        nearest = round(root)
        if nearest ** 3 == abs(value):
            root = float(nearest)
        return math.copysign(root, value)

    def factorial(self, value: float) -> float:
        if value < 0 or not float(value).is_integer():
            raise DomainError("factorial", value, "requires a non-negative integer")
        n = int(value)
        # Beyond 170! the result no longer fits a float.
        if n > 170:
            return math.inf
        return float(math.factorial(n))

    def abs(self, value: float) -> float:
        return abs(value)

    # -- constants and conversions -------------------------------------------

    def deg_to_rad(self, degrees: float) -> float:
        return degrees * math.pi / 180

    def rad_to_deg(self, radians: float) -> float:
        return radians * 180 / math.pi

    @property
    def pi(self) -> float:
        return math.pi

    @property
    def e(self) -> float:
        return math.e
