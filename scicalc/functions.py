"""Numeric function set exposed to evaluated expressions."""

from __future__ import annotations

import math
from typing import Any, Callable, Dict

from scicalc.errors import FactorialError, NonFiniteResultError
from scicalc.settings import AngleMode

Number = float

MAX_FACTORIAL = 170  # 171! no longer fits in a double

# Lanczos approximation, g = 7
_LANCZOS_G = 7
_LANCZOS_COEFFS = (
    676.5203681218851, -1259.1392167224028,
    771.32342877765313, -176.61502916214059,
    12.507343278686905, -0.13857109526572012,
    9.9843695780195716e-6, 1.5056327351493116e-7,
)


def gamma(z: float) -> float:
    if z < 0.5:
        # reflection formula; Gamma(1 - z) overflowing means the result underflows to 0
        try:
            return math.pi / (math.sin(math.pi * z) * gamma(1.0 - z))
        except OverflowError:
            return 0.0
    z -= 1.0
    x = 0.99999999999980993
    for i, p in enumerate(_LANCZOS_COEFFS):
        x += p / (z + i + 1)
    t = z + _LANCZOS_G + 0.5
    return math.sqrt(2 * math.pi) * t ** (z + 0.5) * math.exp(-t) * x


def fact(n: float) -> float:
    """Factorial of integral ``n``; Gamma(n + 1) for anything else."""
    n = float(n)
    if not n.is_integer():
        return gamma(n + 1.0)
    if n < 0:
        raise FactorialError(f"factorial of {n:g}", reason=FactorialError.NEGATIVE)
    if n > MAX_FACTORIAL:
        raise FactorialError(f"factorial of {n:g}", reason=FactorialError.OVERFLOW)
    result = 1.0
    for i in range(2, int(n) + 1):
        result *= i
    return result


def power(x: float, y: float) -> float:
    result = x ** y
    if isinstance(result, complex):
        raise NonFiniteResultError(f"{x:g} ** {y:g} has no real value")
    return result


def build_namespace(angle_mode: AngleMode) -> Dict[str, Any]:
    """Constants and functions an expression may reference, and nothing else."""
    deg = angle_mode is AngleMode.DEG

    def _to_rad(x: float) -> float: return x * math.pi / 180.0 if deg else x

    def sin(x: float) -> float: return math.sin(_to_rad(x))
    def cos(x: float) -> float: return math.cos(_to_rad(x))
    def tan(x: float) -> float: return math.tan(_to_rad(x))

    funcs: Dict[str, Callable[..., float]] = {
        "sin": sin, "cos": cos, "tan": tan,
        "sqrt": math.sqrt, "pow": power,
        "log": math.log, "log10": math.log10,
        "fact": fact,
    }
    env: Dict[str, Any] = {"pi": math.pi, "E": math.e}
    env.update(funcs)
    return env
