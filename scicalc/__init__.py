"""scicalc: keystroke-driven scientific calculator core.

Usage:
    from scicalc import CalculatorSession, evaluate

    session = CalculatorSession()
    for token in ("5", "!", "÷", "√(", "4", ")"):
        session.append_factorial() if token == "!" else session.append(token)
    session.evaluate()
    session.display.result_text   # "60"

    evaluate("sin(30)").value      # 0.5 (degrees by default)
"""

__version__ = "0.1.0"

from scicalc.editor import CalculatorSession, Display
from scicalc.engine import CalculatorEngine, EvaluationResult, evaluate
from scicalc.errors import (
    CalculationError,
    FactorialError,
    MalformedExpressionError,
    NonFiniteResultError,
    UnknownNameError,
)
from scicalc.settings import AngleMode, Settings

__all__ = [
    "AngleMode",
    "CalculationError",
    "CalculatorEngine",
    "CalculatorSession",
    "Display",
    "EvaluationResult",
    "FactorialError",
    "MalformedExpressionError",
    "NonFiniteResultError",
    "Settings",
    "UnknownNameError",
    "evaluate",
]
