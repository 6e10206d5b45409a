"""qd_fx._errors
=================
Исключения qd-fx.

Численные граничные случаи (деление на ноль, корень из отрицательного и
т.п.) исключений не порождают — они дают NaN/Inf/±0 как IEEE-754.
Исключения остаются только для разбора строк и для нарушенных
внутренних инвариантов.
"""

from __future__ import annotations

import enum

__all__ = ["ErrorKind", "ParseError", "ConvergenceError"]


class ErrorKind(enum.Enum):
    """Вид ошибки разбора строки."""

    EMPTY = "empty"
    INVALID = "invalid"


class ParseError(ValueError):
    """Строку не удалось разобрать как число."""

    def __init__(self, kind: ErrorKind, text: str = ""):
        self.kind = kind
        self.text = text
        if kind is ErrorKind.EMPTY:
            message = "cannot parse number from empty string"
        else:
            message = f"invalid number literal: {text!r}"
        super().__init__(message)


class ConvergenceError(ArithmeticError):
    """Итерация Ньютона не сошлась — признак ошибки в реализации, а не во входе."""
