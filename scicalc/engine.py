"""Expression evaluation.

The display expression (``3×(2+1)!``, ``sin(30)``, ``√(144)``) is first
rewritten token by token into Python expression syntax, then parsed with
:mod:`ast` and walked by :class:`SafeEvaluator`, which only knows the names
in :func:`scicalc.functions.build_namespace`. Nothing is ever passed to
``eval``.
"""

from __future__ import annotations

import ast
import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from scicalc.errors import (
    CalculationError,
    MalformedExpressionError,
    NonFiniteResultError,
    UnknownNameError,
)
from scicalc.functions import Number, build_namespace, power
from scicalc.settings import AngleMode, Settings

logger = logging.getLogger(__name__)

MAX_EXPR_LEN = 2000

# Order matters: "log(" has to become "log10(" before "ln(" becomes "log(".
_REWRITES = (
    ("×", "*"),
    ("÷", "/"),
    ("π", "pi"),
    ("e", "E"),
    ("^", "**"),
    ("√(", "sqrt("),
    ("log(", "log10("),
    ("ln(", "log("),
)

_NUMBER_TAIL_RE = re.compile(r"(?:\d+(?:\.\d*)?|\.\d+)$")


def _unit_start(s: str, end: int) -> int:
    """Index where the number or parenthesized group ending at ``end`` starts."""
    if end > 0 and s[end - 1] == ")":
        depth = 0
        for i in range(end - 1, -1, -1):
            if s[i] == ")":
                depth += 1
            elif s[i] == "(":
                depth -= 1
                if depth == 0:
                    return i
        return -1
    m = _NUMBER_TAIL_RE.search(s, 0, end)
    return m.start() if m else -1


def rewrite_factorials(src: str) -> str:
    """Turn every postfix ``x!`` into ``fact(x)``, leftmost first.

    ``(1+2)!`` becomes ``fact((1+2))``. A group directly after a name stays
    that call's argument: ``sqrt(9)!`` becomes ``sqrt(fact((9)))`` and
    ``3!!`` becomes ``fact(fact((3)))``.
    """
    s = src
    while True:
        i = s.find("!")
        if i < 0:
            return s
        start = _unit_start(s, i)
        if start < 0:
            raise MalformedExpressionError("'!' must follow a number or a group.")
        operand = s[start:i]
        if operand.startswith("(") and start > 0 and (s[start - 1].isalnum() or s[start - 1] == "_"):
            operand = f"(fact({operand}))"
        else:
            operand = f"fact({operand})"
        s = f"{s[:start]}{operand}{s[i + 1:]}"


def to_python_expression(src: str) -> str:
    s = src
    for old, new in _REWRITES:
        s = s.replace(old, new)
    return rewrite_factorials(s)


def is_int_like(x: float, tol: float = 1e-12) -> bool:
    if not math.isfinite(x): return False
    n = round(x); return abs(x - n) <= tol


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of one evaluation: a rounded finite value or the error."""

    ok: bool
    value: Optional[float] = None
    error: Optional[CalculationError] = None

    @classmethod
    def success(cls, value: float) -> EvaluationResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: CalculationError) -> EvaluationResult:
        return cls(ok=False, error=error)

    @property
    def reason(self) -> Optional[str]:
        return self.error.reason if self.error is not None else None


class SafeEvaluator:
    _ALLOWED_BINOPS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Pow)
    _ALLOWED_UNARYOPS = (ast.UAdd, ast.USub)

    def __init__(self, env: Dict[str, Any]) -> None:
        self.env = env

    def eval_expr(self, expr: str) -> Number:
        if not expr or not expr.strip():
            raise MalformedExpressionError("Empty expression.")
        try:
            node = ast.parse(expr.strip(), mode="eval")
        except SyntaxError as exc:
            raise MalformedExpressionError(f"Syntax error: {exc.msg}") from None
        try:
            value = self._eval(node.body)
        except RecursionError:
            raise MalformedExpressionError("Expression nested too deeply.") from None
        if not math.isfinite(value):
            raise NonFiniteResultError(f"Result is {value}.")
        return value

    def _eval(self, node: ast.AST) -> Number:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
                try: return float(node.value)
                except OverflowError: raise NonFiniteResultError("Numeric literal too large.") from None
            raise MalformedExpressionError("Only numeric literals are allowed.")

        if isinstance(node, ast.UnaryOp) and isinstance(node.op, self._ALLOWED_UNARYOPS):
            v = self._eval(node.operand)
            return +v if isinstance(node.op, ast.UAdd) else -v

        if isinstance(node, ast.BinOp) and isinstance(node.op, self._ALLOWED_BINOPS):
            l, r = self._eval(node.left), self._eval(node.right)
            try:
                if isinstance(node.op, ast.Add):  return l + r
                if isinstance(node.op, ast.Sub):  return l - r
                if isinstance(node.op, ast.Mult): return l * r
                if isinstance(node.op, ast.Div):  return l / r
                return power(l, r)
            except ZeroDivisionError: raise NonFiniteResultError("Division by zero.") from None
            except OverflowError:     raise NonFiniteResultError("Overflow during computation.") from None

        if isinstance(node, ast.Call):
            name = self._get_call_name(node.func)
            func = self.env.get(name)
            if not callable(func): raise UnknownNameError(f"Unknown function: {name}.")
            if node.keywords: raise MalformedExpressionError("Keyword arguments are not supported.")
            args = [self._eval(a) for a in node.args]
            try: return float(func(*args))
            except CalculationError: raise
            except TypeError as exc:         raise MalformedExpressionError(f"{name} usage error: {exc}.") from None
            except ZeroDivisionError:        raise NonFiniteResultError(f"{name}: division by zero.") from None
            except OverflowError:            raise NonFiniteResultError(f"{name}: overflow.") from None
            except ValueError as exc:        raise NonFiniteResultError(f"{name} domain error: {exc}.") from None

        if isinstance(node, ast.Name):
            val = self.env.get(node.id)
            if val is None: raise UnknownNameError(f"Unknown name: {node.id}.")
            if callable(val): raise MalformedExpressionError(f"'{node.id}' is a function; call it like {node.id}(...).")
            return float(val)

        raise MalformedExpressionError("Unsupported expression construct.")

    @staticmethod
    def _get_call_name(func_node: ast.AST) -> str:
        if isinstance(func_node, ast.Name): return func_node.id
        raise MalformedExpressionError("Only simple function calls are allowed (e.g., sin(x)).")


class CalculatorEngine:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        # own copy, so sessions built from one Settings keep separate angle modes
        self.settings = replace(settings) if settings else Settings(); self.settings.validate()

    def compute(self, expr: str) -> Number:
        """Evaluate ``expr`` and round it for display; raises CalculationError."""
        if len(expr) > MAX_EXPR_LEN:
            raise MalformedExpressionError(f"Expression too long (limit: {MAX_EXPR_LEN} chars).")
        source = to_python_expression(expr)
        logger.debug("rewrote %r -> %r", expr, source)
        value = SafeEvaluator(self.build_env()).eval_expr(source)
        return self.round_for_display(value)

    def evaluate(self, expr: str) -> EvaluationResult:
        try:
            return EvaluationResult.success(self.compute(expr))
        except CalculationError as exc:
            logger.warning("Evaluation error for %r: %s (%s)", expr, exc, exc.reason)
            return EvaluationResult.failure(exc)

    def round_for_display(self, x: Number) -> float:
        n = float(f"{x:.{int(self.settings.precision)}g}")
        return 0.0 if abs(n) < self.settings.zero_threshold else n

    def format_number(self, x: Number) -> str:
        xf = float(x)
        if math.isnan(xf):  return "nan"
        if math.isinf(xf):  return "inf" if xf > 0 else "-inf"
        if is_int_like(xf) and abs(xf) < 1e15: return str(int(round(xf)))
        n = int(self.settings.precision)
        return f"{xf:.{n}g}"

    def build_env(self) -> Dict[str, Any]:
        return build_namespace(self.settings.angle_mode)


def evaluate(expression: str, angle_mode: AngleMode = AngleMode.DEG) -> EvaluationResult:
    """Evaluate a display expression with default precision."""
    return CalculatorEngine(Settings(angle_mode=angle_mode)).evaluate(expression)
