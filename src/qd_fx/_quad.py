"""qd_fx._quad
===============
`Quad` — число четверной-двойной точности (quad-double):
неоценённая сумма четырёх float64, около 212 бит мантиссы (62 десятичные цифры).
"""

from __future__ import annotations

import math

from ._core import ieee_div, two_diff, two_prod, two_sum
from ._expansion import Expansion, install_constants
from ._tables import QUAD_CONSTANTS

__all__ = ["Quad"]


class Quad(Expansion):
    """
    Quad(x) — из int, float, str, mpmath.mpf, Fraction, Double или Quad;
    Quad(c0, c1, c2, c3) — из уже нормализованных компонент (недостающие = 0).
    """

    __slots__ = ()

    precision_k = 4
    DIGITS = 62
    EPSILON = math.ldexp(1.0, -209)

    @classmethod
    def from_add(cls, a: float, b: float) -> "Quad":
        return cls(*two_sum(a, b))

    @classmethod
    def from_sub(cls, a: float, b: float) -> "Quad":
        return cls(*two_diff(a, b))

    @classmethod
    def from_mul(cls, a: float, b: float) -> "Quad":
        return cls(*two_prod(a, b))

    @classmethod
    def from_div(cls, a: float, b: float) -> "Quad":
        """Частное двух float с точностью quad-double."""
        q0 = ieee_div(a, b)
        if not math.isfinite(q0) or q0 == 0.0:
            return cls(q0)
        return cls(a) / cls(b)


install_constants(Quad, QUAD_CONSTANTS)
