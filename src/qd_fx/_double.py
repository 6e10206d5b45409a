"""qd_fx._double
=================
`Double` — число двойной-двойной точности (double-double):
неоценённая сумма двух float64, около 106 бит мантиссы (31 десятичная цифра).
"""

from __future__ import annotations

import math

from ._core import ieee_div, quick_two_sum, two_diff, two_prod, two_sum
from ._expansion import Expansion, install_constants
from ._tables import DOUBLE_CONSTANTS

__all__ = ["Double"]


class Double(Expansion):
    """
    Double(x) — из int, float, str, mpmath.mpf, Fraction или другого числа qd-fx;
    Double(hi, lo) — из двух уже нормализованных компонент (без проверки).
    """

    __slots__ = ()

    precision_k = 2
    DIGITS = 31
    EPSILON = math.ldexp(1.0, -104)

    @classmethod
    def from_add(cls, a: float, b: float) -> "Double":
        """Точная сумма двух float."""
        return cls(*two_sum(a, b))

    @classmethod
    def from_sub(cls, a: float, b: float) -> "Double":
        """Точная разность двух float."""
        return cls(*two_diff(a, b))

    @classmethod
    def from_mul(cls, a: float, b: float) -> "Double":
        """Точное произведение двух float."""
        return cls(*two_prod(a, b))

    @classmethod
    def from_div(cls, a: float, b: float) -> "Double":
        """Частное двух float с точностью double-double."""
        q1 = ieee_div(a, b)
        if not math.isfinite(q1) or q1 == 0.0:
            return cls(q1)
        p1, p2 = two_prod(q1, b)
        s, e = two_diff(a, p1)
        e -= p2
        q2 = (s + e) / b
        return cls(*quick_two_sum(q1, q2))


install_constants(Double, DOUBLE_CONSTANTS)
