"""Expression editor.

:class:`CalculatorSession` owns everything a calculator keeps between key
presses: the expression being typed, the last result, the angle mode and the
memory register. Each public method is one logical action from the keypad.
Actions that would produce a malformed expression are ignored rather than
reported.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from scicalc.engine import CalculatorEngine, EvaluationResult
from scicalc.errors import CalculationError
from scicalc.settings import AngleMode, Settings

logger = logging.getLogger(__name__)

OPERATORS = ("+", "-", "×", "÷", "^")
FUNCTION_PREFIXES = ("sin(", "cos(", "tan(", "ln(", "log(", "√(")
CONSTANTS = ("π", "e")
MEMORY_OPS = ("MC", "MR", "M+", "M-")

ERROR_TEXT = "Error"

_DIGITS_RE = re.compile(r"[0-9]+")
# last number with nothing but non-digit/non-dot characters after it
_TRAILING_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)(?=[^\d.]*$)")
_TRAILING_RUN_RE = re.compile(r"[\d.]*$")
_OPENS_UNIT_RE = re.compile(r"[\d(]|π|e|[a-zA-Z√]")
_CLOSES_UNIT = set("0123456789)!πe")


@dataclass(frozen=True)
class Display:
    """Read-only view for the display collaborator."""

    expression_text: str
    result_text: str
    angle_mode: AngleMode = AngleMode.DEG
    memory_text: str = "0"


def trailing_number(expr: str) -> tuple[int, str]:
    """Return ``(start, token)`` of the number ending ``expr``, or ``(-1, "")``."""
    m = _TRAILING_NUMBER_RE.search(expr)
    if not m: return -1, ""
    return m.start(1), m.group(1)


class CalculatorSession:
    def __init__(self, settings: Optional[Settings] = None,
                 engine: Optional[CalculatorEngine] = None) -> None:
        self.engine = engine or CalculatorEngine(settings)
        self.expression: str = ""
        self.last_result: Optional[float] = None
        self.error: Optional[CalculationError] = None
        self.memory: float = 0.0

    # ----------------------------- State -----------------------------------
    @property
    def angle_mode(self) -> AngleMode:
        return self.engine.settings.angle_mode

    @property
    def display(self) -> Display:
        if self.error is not None:
            result_text = ERROR_TEXT
        elif self.last_result is not None:
            result_text = self.engine.format_number(self.last_result)
        else:
            result_text = "" if self.expression else "0"
        return Display(self.expression, result_text, self.angle_mode,
                       self.engine.format_number(self.memory))

    def _set_expression(self, new: str) -> bool:
        if new == self.expression: return False
        self.expression = new
        self.last_result = None
        self.error = None
        return True

    # ----------------------------- Editing ---------------------------------
    def append(self, token: str) -> None:
        """Append a digit, operator, parenthesis, constant, function prefix or '.'."""
        if token in OPERATORS:
            self._append_operator(token)
            return
        if not (token in ("(", ")", ".") or token in CONSTANTS
                or token in FUNCTION_PREFIXES or _DIGITS_RE.fullmatch(token)):
            raise ValueError(f"unsupported token: {token!r}")

        expr = self.expression
        if token == ".":
            if "." in _TRAILING_RUN_RE.search(expr).group(0): return
        if self._needs_implicit_multiply(expr[-1:], token):
            expr += "×"
        self._set_expression(expr + token)

    def _append_operator(self, op: str) -> None:
        expr = self.expression
        last = expr[-1:]
        # only a unary minus may open an expression or a group
        if not expr or last == "(":
            if op == "-": self._set_expression(expr + op)
            return
        if last in OPERATORS:
            if op == "-":
                if not self._ends_with_unary_minus(expr): self._set_expression(expr + op)
                return
            head = expr.rstrip("".join(OPERATORS))
            if not head or head.endswith("("): return
            self._set_expression(head + op)
            return
        self._set_expression(expr + op)

    @staticmethod
    def _ends_with_unary_minus(expr: str) -> bool:
        if not expr.endswith("-"): return False
        return len(expr) == 1 or expr[-2] in OPERATORS or expr[-2] == "("

    @staticmethod
    def _needs_implicit_multiply(prev: str, token: str) -> bool:
        if not prev or prev not in _CLOSES_UNIT: return False
        if not _OPENS_UNIT_RE.search(token): return False
        # a digit after a digit continues the same number
        return not (prev.isdigit() and token[0].isdigit())

    def append_factorial(self) -> None:
        expr = self.expression
        if expr and (expr[-1].isdigit() or expr[-1] in ")!"):
            self._set_expression(expr + "!")

    def backspace(self) -> None:
        expr = self.expression
        if not expr: return
        for fn in FUNCTION_PREFIXES:
            if expr.endswith(fn):
                self._set_expression(expr[:-len(fn)])
                return
        self._set_expression(expr[:-1])

    def clear(self) -> None:
        self.expression = ""
        self.last_result = None
        self.error = None

    def toggle_sign(self) -> None:
        start, token = trailing_number(self.expression)
        if not token: return
        self._set_expression(f"{self.expression[:start]}(-{token})")

    def percent(self) -> None:
        start, token = trailing_number(self.expression)
        if not token: return
        self._set_expression(f"{self.expression[:start]}({token}/100)")

    def toggle_angle_mode(self) -> AngleMode:
        settings = self.engine.settings
        settings.angle_mode = settings.angle_mode.toggled()
        return settings.angle_mode

    # ----------------------------- Memory ----------------------------------
    def memory_operation(self, op: str) -> None:
        if op == "MC": self.memory_clear()
        elif op == "MR": self.memory_recall()
        elif op == "M+": self.memory_add()
        elif op == "M-": self.memory_subtract()
        else: raise ValueError(f"unknown memory operation: {op!r}")

    def memory_clear(self) -> None:
        self.memory = 0.0

    def memory_recall(self) -> None:
        expr = self.expression
        if expr and (expr[-1].isdigit() or expr[-1] == ")"):
            expr += "×"
        self._set_expression(expr + self.engine.format_number(self.memory))

    def memory_add(self) -> None:
        self._memory_update(1.0)

    def memory_subtract(self) -> None:
        self._memory_update(-1.0)

    def _memory_operand(self) -> Optional[float]:
        if self.last_result is not None:
            return self.last_result
        if self.expression:
            result = self.engine.evaluate(self.expression)
            if result.ok: return result.value
        return None

    def _memory_update(self, sign: float) -> None:
        operand = self._memory_operand()
        if operand is None: return
        updated = self.memory + sign * operand
        if not math.isfinite(updated):
            logger.warning("Memory update to %s ignored", updated)
            return
        self.memory = updated

    # ----------------------------- Evaluate --------------------------------
    def evaluate(self) -> Optional[EvaluationResult]:
        """Evaluate the expression; on success it is replaced by the result."""
        if not self.expression: return None
        result = self.engine.evaluate(self.expression)
        if result.ok:
            self.last_result = result.value
            self.error = None
            self.expression = self.engine.format_number(result.value)
        else:
            self.error = result.error
        return result
