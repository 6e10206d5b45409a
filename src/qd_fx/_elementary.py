"""qd_fx._elementary
=====================
Алгебраические функции обоих типов: sqrt, nroot (и cbrt), powf.

sqrt использует итерацию Карпа–Маркштейна: если x ≈ 1/sqrt(a), то
`a·x + (a - (a·x)²)·x/2` даёт sqrt(a) с удвоенной точностью x.
"""

from __future__ import annotations

import math

from ._double import Double
from ._expansion import implements
from ._quad import Quad

# Итерации Ньютона для n-го корня
_NROOT_ITERATIONS = {Double: 1, Quad: 3}


def _pre_sqrt(a):
    cls = type(a)
    if a.is_zero():
        return cls.ZERO
    if a.is_nan() or a.is_sign_negative():
        return cls.NAN
    if a.is_infinite():
        return cls.INFINITY
    return None


def _half_exponent(a) -> int:
    """j такое, что старшая компонента a·2^(-2j) лежит в [1/4, 2)."""
    _, e = math.frexp(a[0])
    return e // 2


@implements(Double, "sqrt")
def dd_sqrt(a: Double) -> Double:
    special = _pre_sqrt(a)
    if special is not None:
        return special
    j = _half_exponent(a)
    if j:
        return dd_sqrt(a.ldexp(-2 * j)).ldexp(j)
    x = Double.from_div(1.0, math.sqrt(a[0]))
    ax = a * x
    return ax + (a - ax.sqr()) * x.mul_pwr2(0.5)


@implements(Quad, "sqrt")
def qd_sqrt(a: Quad) -> Quad:
    special = _pre_sqrt(a)
    if special is not None:
        return special
    j = _half_exponent(a)
    if j:
        return qd_sqrt(a.ldexp(-2 * j)).ldexp(j)
    # Два шага Ньютона для 1/sqrt(a): x += x·(1/2 - (a/2)·x²)
    x = Quad(1.0 / math.sqrt(a[0]))
    h = a.mul_pwr2(0.5)
    for _ in range(2):
        x = x + x * (0.5 - h * x.sqr())
    ax = a * x
    return ax + (a - ax.sqr()) * x.mul_pwr2(0.5)


@implements(Double, "nroot")
@implements(Quad, "nroot")
def nroot(a, n: int):
    """
    Корень n-й степени методом Ньютона для a^(-1/n):
    x' = x + x·(1 - a·x^n)/n, результат — 1/x.
    """
    cls = type(a)
    if n <= 0:
        return cls.NAN
    if n % 2 == 0 and a.is_sign_negative():
        return cls.NAN
    if n == 1:
        return a
    if n == 2:
        return a.sqrt()
    if a.is_zero():
        return cls.ZERO
    if a.is_nan():
        return cls.NAN
    if a.is_infinite():
        return a

    # a = r·2^(n·j), корень из r считается вблизи единицы
    _, e = math.frexp(a[0])
    j = e // n
    r = a.abs().ldexp(-n * j)
    x = cls(math.exp(-math.log(r[0]) / n))
    for _ in range(_NROOT_ITERATIONS[cls]):
        x = x + x * (1.0 - r * x.powi(n)) / n
    if a.is_sign_negative():
        x = -x
    return x.recip().ldexp(j)


@implements(Double, "powf")
@implements(Quad, "powf")
def powf(a, n):
    """a**n для вещественного n: exp(n·ln(a)) после таблицы особых случаев."""
    cls = type(a)
    if a.is_nan() or n.is_nan():
        return cls.NAN
    if a.is_zero():
        if n.is_zero():
            return cls.NAN
        return cls.ZERO if n.is_sign_positive() else cls.INFINITY
    if n.is_infinite():
        if a == cls.ONE or a.is_sign_negative():
            return cls.NAN
        grows = (a > cls.ONE) == n.is_sign_positive()
        return cls.INFINITY if grows else cls.ZERO
    return (n * a.ln()).exp()
