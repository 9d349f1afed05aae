"""Evaluation errors.

Every failure the engine can produce derives from :class:`CalculationError`
and carries a short ``reason`` suitable for diagnostics. Editing rejections
are not errors at all; the session simply leaves the expression unchanged.
"""

from __future__ import annotations


class CalculationError(Exception):
    reason = "calculation error"

    def __init__(self, message: str = "", reason: str | None = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(message or self.reason)


class MalformedExpressionError(CalculationError):
    reason = "malformed expression"


class UnknownNameError(CalculationError):
    reason = "unknown name"


class FactorialError(CalculationError):
    OVERFLOW = "overflow"
    NEGATIVE = "negative argument"

    reason = "factorial error"


class NonFiniteResultError(CalculationError):
    reason = "non-finite result"
